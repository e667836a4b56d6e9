"""
Text codec for collection documents.

A collection document is plain Markdown that stays comfortable to edit by
hand. Items are grouped under one section per category:

    # 📖 LaterRead Inbox

    ## 🤖 AI/Tech

    - [ ] 🤖 [Title](https://example.com/a) | example.com | 2025-01-10
    >  Summary written by the classifier
    > 📝 A note
    > 🔗 Related: [Other](https://example.com/b) | [Third](https://example.com/c)

Parsing is tolerant: every line is classified first, and anything that is
not part of a recognized item is skipped and reported in
``ParseResult.skipped`` instead of raising. An item header whose symbol is
not configured in the registry is skipped as a whole.

Relations are read in two encodings: the legacy comma-separated list of
raw urls, and the current ``Related:`` list of Markdown links. They are
always written in the current encoding, resolved against a url index that
spans both collections; targets missing from the index are left out of
the rendered line.
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from laterread.core.categories import Category, CategoryRegistry, default_registry
from laterread.core.items.models import ReadingItem

SUMMARY_PREFIX = ">  "
NOTE_PREFIX = "> 📝 "
RELATIONS_PREFIX = "> 🔗 "
RELATIONS_LABEL = "Related: "
RELATIONS_SEPARATOR = " | "
LEGACY_RELATIONS_SEPARATOR = ", "

_LINK_PATTERN = re.compile(r"\[(.+?)\]\((\S+?)\)(?= \| |\s*$)")


class LineKind(str, Enum):
    """Classification of a single document line."""

    TITLE = "title"
    SECTION = "section"
    HEADER = "header"
    SUMMARY = "summary"
    NOTE = "note"
    RELATIONS = "relations"
    RULE = "rule"
    BLANK = "blank"
    MALFORMED_HEADER = "malformed_header"
    TEXT = "text"


# Detail lines that may follow a header, in the order they must appear.
DETAIL_ORDER: tuple[LineKind, ...] = (LineKind.SUMMARY, LineKind.NOTE, LineKind.RELATIONS)

# Lines the serializer regenerates; never reported as skipped.
LAYOUT_KINDS = frozenset({LineKind.TITLE, LineKind.SECTION, LineKind.RULE, LineKind.BLANK})


@dataclass(frozen=True)
class SkippedLine:
    """A line that did not become part of any item."""

    line_number: int
    text: str
    reason: str


@dataclass
class ParseResult:
    """Items recognized in a document plus the lines that were dropped."""

    items: list[ReadingItem] = field(default_factory=list)
    skipped: list[SkippedLine] = field(default_factory=list)


class TextCodec:
    """
    Parse and serialize collection documents.

    The header grammar depends on the registry: only configured symbols are
    accepted, so a codec is bound to one registry.
    """

    def __init__(self, registry: CategoryRegistry | None = None) -> None:
        self.registry = registry or default_registry()
        symbols = "|".join(re.escape(s) for s in self.registry.symbols())
        # Greedy title: the url starts after the last "](" that fits the line.
        self._header = re.compile(
            r"^- \[([ x])\] (" + symbols + r") \[(.+)\]\((.+?)\) \| (.+?) \| (.+?)$"
        )

    # ------------------------------------------------------------------
    # Line classification
    # ------------------------------------------------------------------

    def classify_line(self, line: str) -> LineKind:
        """Classify one line of a document (without its newline)."""
        if not line.strip():
            return LineKind.BLANK
        if line.startswith("## "):
            return LineKind.SECTION
        if line.startswith("# "):
            return LineKind.TITLE
        if line.strip() == "---":
            return LineKind.RULE
        if line.startswith(SUMMARY_PREFIX):
            return LineKind.SUMMARY
        if line.startswith(NOTE_PREFIX):
            return LineKind.NOTE
        if line.startswith(RELATIONS_PREFIX):
            return LineKind.RELATIONS
        if line.startswith("- ["):
            if self._match_header(line) is not None:
                return LineKind.HEADER
            return LineKind.MALFORMED_HEADER
        return LineKind.TEXT

    def _match_header(self, line: str) -> ReadingItem | None:
        match = self._header.match(line)
        if match is None:
            return None
        checked, symbol, title, url, domain, created = match.groups()
        try:
            created_date = date.fromisoformat(created.strip())
        except ValueError:
            return None
        return ReadingItem(
            url=url,
            title=title,
            domain=domain,
            category=self.registry.key_for_symbol(symbol),
            created=created_date,
            read=checked == "x",
        )

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse_document(self, document: str, preamble: Iterable[str] = ()) -> ParseResult:
        """
        Parse a document, reporting every line that was dropped.

        Args:
            document: Full document text
            preamble: Known prose lines of the document layout (not reported)

        Returns:
            ParseResult with items in document order
        """
        known_prose = {line.strip() for line in preamble if line.strip()}
        lines = document.splitlines()
        result = ParseResult()
        index = 0

        while index < len(lines):
            line = lines[index]
            item = self._match_header(line)

            if item is None:
                kind = self.classify_line(line)
                if kind not in LAYOUT_KINDS and line.strip() not in known_prose:
                    result.skipped.append(SkippedLine(index + 1, line, _skip_reason(kind)))
                index += 1
                continue

            index += 1

            for expected in DETAIL_ORDER:
                if index >= len(lines) or self.classify_line(lines[index]) != expected:
                    continue
                self._apply_detail(item, expected, lines[index])
                index += 1

            result.items.append(item)

        return result

    def parse(self, document: str) -> list[ReadingItem]:
        """Parse a document into items; never raises on malformed lines."""
        return self.parse_document(document).items

    def _apply_detail(self, item: ReadingItem, kind: LineKind, line: str) -> None:
        if kind == LineKind.SUMMARY:
            item.summary = line[len(SUMMARY_PREFIX) :]
        elif kind == LineKind.NOTE:
            item.note = line[len(NOTE_PREFIX) :]
        elif kind == LineKind.RELATIONS:
            item.related = parse_relations(line[len(RELATIONS_PREFIX) :])

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def serialize(
        self,
        items: Sequence[ReadingItem],
        *,
        title: str,
        preamble: Sequence[str] = (),
        link_index: Mapping[str, ReadingItem] | None = None,
        sort_by_date: bool = False,
    ) -> str:
        """
        Render items as a collection document.

        Args:
            items: Items to render; order within a category is preserved
                unless ``sort_by_date`` is set
            title: Document title line (without the leading ``# ``)
            preamble: Prose lines written between the title and the sections
            link_index: url -> item index used to render relation titles;
                defaults to the items themselves
            sort_by_date: Sort each category newest first

        Returns:
            Document text ending with a newline
        """
        if link_index is None:
            link_index = {item.url: item for item in items}

        grouped: dict[Category, list[ReadingItem]] = {}
        for item in items:
            grouped.setdefault(self.registry.resolve(item.category), []).append(item)

        parts = [f"# {title}\n\n"]
        for line in preamble:
            parts.append(f"{line}\n\n")

        for key in self.registry.order:
            members = grouped.get(key)
            if not members:
                continue
            if sort_by_date:
                members = sorted(members, key=lambda i: i.created, reverse=True)

            info = self.registry.info(key)
            parts.append(f"## {info.symbol} {info.label}\n\n")
            for item in members:
                parts.append(self.render_item(item, link_index))
                parts.append("\n")

        return "".join(parts)

    def render_item(self, item: ReadingItem, link_index: Mapping[str, ReadingItem]) -> str:
        """Render one item: header line plus any present detail lines."""
        checkbox = "x" if item.read else " "
        symbol = self.registry.symbol(item.category)
        lines = [
            f"- [{checkbox}] {symbol} [{item.title}]({item.url}) "
            f"| {item.domain} | {item.created.isoformat()}"
        ]
        if item.summary:
            lines.append(f"{SUMMARY_PREFIX}{item.summary}")
        if item.note:
            lines.append(f"{NOTE_PREFIX}{item.note}")
        links = [
            f"[{_link_text(link_index[url].title)}]({url})"
            for url in item.related
            if url in link_index
        ]
        if links:
            lines.append(f"{RELATIONS_PREFIX}{RELATIONS_LABEL}{RELATIONS_SEPARATOR.join(links)}")
        return "\n".join(lines) + "\n"


def parse_relations(text: str) -> list[str]:
    """
    Extract relation target urls from the body of a relations line.

    Example:
        >>> parse_relations("Related: [A](http://a) | [B](http://b)")
        ['http://a', 'http://b']
        >>> parse_relations("http://a, http://b")
        ['http://a', 'http://b']
    """
    body = text.strip()
    if body.startswith(RELATIONS_LABEL.strip()):
        body = body[len(RELATIONS_LABEL.strip()) :].strip()

    links = [m.group(2) for m in _LINK_PATTERN.finditer(body)]
    if links:
        return links
    return [u.strip() for u in body.split(LEGACY_RELATIONS_SEPARATOR) if u.strip()]


def _link_text(title: str) -> str:
    # Relation links are parsed lazily; a "](" inside the text would end it early.
    return title.replace("](", "] (")


def _skip_reason(kind: LineKind) -> str:
    if kind == LineKind.MALFORMED_HEADER:
        return "item line does not match the header format"
    if kind in DETAIL_ORDER:
        return f"{kind.value} line without a preceding item"
    return "unrecognized text"


__all__ = [
    "LineKind",
    "ParseResult",
    "SkippedLine",
    "TextCodec",
    "parse_relations",
    "NOTE_PREFIX",
    "RELATIONS_PREFIX",
    "SUMMARY_PREFIX",
]
