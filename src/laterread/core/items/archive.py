"""
Archive of read Inbox items.

Archived items leave the Inbox and are kept in a separate document with one
section per month, newest month first:

    # 📚 LaterRead Archive

    ## 📅 2025-01

    - [x] 🤖 [Title](https://example.com/a) | example.com | 2025-01-03
    >  Summary
    > 📝 Note

Item lines use the collection header format. Relation lines are not
written; the archive is only a link source so that live items keep their
relations to archived ones.
"""

import logging
import re
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from laterread.core.categories import CategoryRegistry, default_registry
from laterread.core.items.codec import LineKind, TextCodec
from laterread.core.items.models import ReadingItem
from laterread.core.items.store import write_document

logger = logging.getLogger(__name__)

ARCHIVE_TITLE = "📚 LaterRead Archive"
MONTH_HEADING = "## 📅 "

_MONTH_PATTERN = re.compile(r"^## 📅 (\d{4}-\d{2})\s*$")


def month_key(day: date) -> str:
    """
    Section key for the month of ``day``.

    Example:
        >>> month_key(date(2025, 1, 20))
        '2025-01'
    """
    return f"{day.year}-{day.month:02d}"


class ArchiveStore:
    """
    Monthly archive document.

    Example:
        >>> archive = ArchiveStore(vault / "archive.md")
        >>> archive.archive([item])
        1
        >>> list(archive.read_months())
        ['2025-01']
    """

    name = "archive"

    def __init__(self, path: Path, registry: CategoryRegistry | None = None) -> None:
        self.path = Path(path)
        self.registry = registry or default_registry()
        self.codec = TextCodec(self.registry)

    def read_months(self) -> dict[str, list[ReadingItem]]:
        """
        Parse the archive into month sections, in document order.

        Item lines outside any month section are logged and left out.

        Returns:
            Month key -> items, empty if the archive does not exist yet
        """
        try:
            document = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}

        sections: dict[str, list[str]] = {}
        current: list[str] | None = None
        for number, line in enumerate(document.splitlines(), start=1):
            match = _MONTH_PATTERN.match(line)
            if match is not None:
                current = sections.setdefault(match.group(1), [])
            elif current is not None:
                current.append(line)
            elif self.codec.classify_line(line) in (LineKind.HEADER, LineKind.MALFORMED_HEADER):
                logger.warning("%s:%d item outside a month section: %s", self.path.name, number, line)

        months: dict[str, list[ReadingItem]] = {}
        for key, lines in sections.items():
            result = self.codec.parse_document("\n".join(lines))
            for skipped in result.skipped:
                logger.warning("%s (%s) dropped: %s", self.path.name, key, skipped.text)
            months[key] = result.items
        return months

    def read_items(self) -> list[ReadingItem]:
        """Every archived item, newest month first."""
        return [item for items in self.read_months().values() for item in items]

    def render(self, months: dict[str, list[ReadingItem]]) -> str:
        parts = [f"# {ARCHIVE_TITLE}\n\n"]
        for key in sorted(months, reverse=True):
            if not months[key]:
                continue
            parts.append(f"{MONTH_HEADING}{key}\n\n")
            for item in months[key]:
                parts.append(self.codec.render_item(item, {}))
                parts.append("\n")
        return "".join(parts)

    def archive(self, items: Sequence[ReadingItem], today: date | None = None) -> int:
        """
        Add items at the top of the current month's section.

        Items are stored as read and without relations.

        Returns:
            Number of items archived

        Raises:
            StoreWriteError: If the archive cannot be written
        """
        if not items:
            return 0
        key = month_key(today or date.today())
        months = self.read_months()
        archived = [item.model_copy(update={"read": True, "related": []}) for item in items]
        months[key] = [*archived, *months.get(key, [])]
        write_document(self.path, self.render(months), self.name)
        logger.info("Archived %d item(s) under %s", len(archived), key)
        return len(archived)


__all__ = ["ARCHIVE_TITLE", "ArchiveStore", "month_key"]
