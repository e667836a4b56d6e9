"""
Collection storage layer for reading items.

Each collection lives in one Markdown document. Every operation is a full
load, an in-memory change and a full rewrite of the document; there is no
partial patching, and the last full rewrite wins when another process
edits the same file.

Two collections exist:
1. Inbox: newly captured items, most recent first within a category.
   Appending does not de-duplicate.
2. LaterWrite: promoted items that feed future writing. Appending is
   idempotent by url, and each category is sorted newest first on write.

Relation lines are rendered against the union of both collections, so a
store is attached to its sibling with ``attach_sibling``.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Protocol

from laterread.core.categories import Category, CategoryRegistry, default_registry
from laterread.core.errors import StoreWriteError
from laterread.core.items.codec import LineKind, SkippedLine, TextCodec
from laterread.core.items.models import ReadingItem, normalize_url

logger = logging.getLogger(__name__)


class LinkSource(Protocol):
    def read_items(self) -> list[ReadingItem]: ...


def write_document(path: Path, content: str, name: str) -> Path:
    """
    Replace a document atomically (temp file in the same directory, then rename).

    Raises:
        StoreWriteError: If the document cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        raise StoreWriteError(f"Failed to write {name} at {path}: {e}", path=str(path)) from e
    return path


class CollectionStore(ABC):
    """
    Storage for one collection document.

    Example:
        store = InboxStore(Path("~/Notes/LaterRead/inbox.md").expanduser())
        store.append(ReadingItem.new("https://example.com/a", "A"))
        store.toggle_read("https://example.com/a")
    """

    name = "collection"
    title = "Collection"
    preamble: tuple[str, ...] = ()
    sort_by_date = False

    def __init__(self, path: Path, registry: CategoryRegistry | None = None) -> None:
        """
        Initialize store with a document path.

        Args:
            path: Path of the Markdown document backing this collection
            registry: Category registry (defaults to the shared registry)
        """
        self.path = Path(path)
        self.registry = registry or default_registry()
        self.codec = TextCodec(self.registry)
        self.sibling: CollectionStore | None = None
        self.link_sources: list[LinkSource] = []
        self.last_skipped: list[SkippedLine] = []

    def attach_sibling(self, other: "CollectionStore") -> None:
        """Attach the other collection so relation links resolve across both."""
        self.sibling = other
        other.sibling = self

    def add_link_source(self, source: LinkSource) -> None:
        """Also resolve relation links against ``source`` (e.g. the archive)."""
        self.link_sources.append(source)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_items(self) -> list[ReadingItem]:
        """
        Parse the document without side effects.

        Returns:
            Items in document order, or an empty list if the file is absent
        """
        try:
            document = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.last_skipped = []
            return []

        result = self.codec.parse_document(document, preamble=self.preamble)
        self.last_skipped = result.skipped
        for skipped in result.skipped:
            if self.codec.classify_line(skipped.text) == LineKind.TEXT:
                logger.debug(
                    "%s:%d skipped: %s", self.path.name, skipped.line_number, skipped.reason
                )
            else:
                logger.warning(
                    "%s:%d dropped (%s): %s",
                    self.path.name,
                    skipped.line_number,
                    skipped.reason,
                    skipped.text,
                )
        return result.items

    def load(self) -> list[ReadingItem]:
        """
        Load all items in the collection.

        A missing document is not an error: an empty skeleton document (title
        and usage hint) is written and an empty list is returned.

        Raises:
            StoreWriteError: If the skeleton document cannot be created
        """
        if not self.path.exists():
            logger.info("%s not found, creating %s", self.name, self.path)
            self.save([])
            return []
        return self.read_items()

    def find(self, url: str) -> ReadingItem | None:
        """Return the item with this url, or None."""
        url = normalize_url(url)
        for item in self.read_items():
            if item.url == url:
                return item
        return None

    def contains(self, url: str) -> bool:
        return self.find(url) is not None

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def link_index(self, items: Sequence[ReadingItem]) -> dict[str, ReadingItem]:
        """Build the url -> item index used to render relation lines."""
        index: dict[str, ReadingItem] = {}
        sources: Iterable[LinkSource] = [
            *([self.sibling] if self.sibling is not None else []),
            *self.link_sources,
        ]
        for source in sources:
            for item in source.read_items():
                index.setdefault(item.url, item)
        for item in items:
            index[item.url] = item
        return index

    def render(self, items: Sequence[ReadingItem]) -> str:
        """Serialize items as this collection's document."""
        return self.codec.serialize(
            items,
            title=self.title,
            preamble=self.preamble,
            link_index=self.link_index(items),
            sort_by_date=self.sort_by_date,
        )

    def save(self, items: Sequence[ReadingItem]) -> Path:
        """
        Rewrite the whole document atomically.

        Creates the parent directory if needed.

        Returns:
            Path to the written document

        Raises:
            StoreWriteError: If the document cannot be written
        """
        return write_document(self.path, self.render(items), self.name)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @abstractmethod
    def _insert(self, items: list[ReadingItem], item: ReadingItem) -> bool:
        """Insert ``item`` into ``items`` in place; False if it was not added."""

    def append(self, item: ReadingItem) -> bool:
        """
        Add an item to the collection.

        Returns:
            True if the item was inserted
        """
        items = self.load()
        if not self._insert(items, item):
            return False
        self.save(items)
        return True

    def _modify(
        self, url: str, change: Callable[[ReadingItem], None]
    ) -> ReadingItem | None:
        url = normalize_url(url)
        items = self.load()
        for item in items:
            if item.url == url:
                change(item)
                self.save(items)
                return item
        return None

    def toggle_read(self, url: str) -> ReadingItem | None:
        """Flip the read state. No-op (None) if the url is absent."""

        def change(item: ReadingItem) -> None:
            item.read = not item.read

        return self._modify(url, change)

    def update_fields(
        self,
        url: str,
        *,
        category: str | Category | None = None,
        summary: str | None = None,
        note: str | None = None,
    ) -> ReadingItem | None:
        """
        Update only the named fields of an item.

        Fields passed as None keep their value; an empty string clears a
        summary or note.

        Returns:
            The updated item, or None if the url is absent
        """

        def change(item: ReadingItem) -> None:
            if category is not None:
                item.category = self.registry.resolve(category)
            if summary is not None:
                item.summary = summary
            if note is not None:
                item.note = note

        return self._modify(url, change)

    def set_relations(self, url: str, related: Sequence[str]) -> ReadingItem | None:
        """Replace the relation list wholesale. Does not touch other items."""

        def change(item: ReadingItem) -> None:
            item.related = list(related)

        return self._modify(url, change)

    def delete(self, url: str) -> ReadingItem | None:
        """
        Remove the item with this url.

        Other items that relate to it keep their reference; it simply stops
        rendering once the target no longer resolves.
        """
        url = normalize_url(url)
        items = self.load()
        kept = [item for item in items if item.url != url]
        if len(kept) == len(items):
            return None
        removed = next(item for item in items if item.url == url)
        self.save(kept)
        return removed


class InboxStore(CollectionStore):
    """Inbox of captured items; newest first, duplicates allowed."""

    name = "inbox"
    title = "📖 LaterRead Inbox"
    preamble = ("Press the capture shortcut or run `laterread add <url>` to save a page.",)

    def _insert(self, items: list[ReadingItem], item: ReadingItem) -> bool:
        items.insert(0, item)
        return True


class LaterWriteStore(CollectionStore):
    """Promoted items kept as writing material; unique by url."""

    name = "laterwrite"
    title = "✍️ LaterWrite"
    preamble = ("Content ideas and related articles to write about.", "---")
    sort_by_date = True

    def _insert(self, items: list[ReadingItem], item: ReadingItem) -> bool:
        if any(existing.url == item.url for existing in items):
            return False
        items.append(item)
        return True


__all__ = ["CollectionStore", "InboxStore", "LaterWriteStore", "write_document"]
