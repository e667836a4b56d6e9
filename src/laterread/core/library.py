"""
The reading library: both collections wired together.

A ``Library`` is created once at start-up and passed to whatever needs the
stores (CLI commands, the classification service). It owns the Inbox and
LaterWrite stores plus the archive, attaches them as siblings, and routes
every relation change through the ``RelationSynchronizer`` so edges stay
symmetric.

Every mutation runs under ``Library.lock`` (re-entrant). Background jobs
take the same lock around their load-modify-save cycle, so a delete can
never interleave with a job that is writing the item back.

Usage:
    >>> library = Library.from_config(load_config())
    >>> library.capture(ReadingItem.new("https://example.com/a", "A"))
    >>> library.promote("https://example.com/a", related=["https://example.com/b"])
"""

import logging
import threading
from collections.abc import Callable, Sequence
from datetime import date
from pathlib import Path

from laterread.core.categories import Category, CategoryRegistry, default_registry
from laterread.core.config.models import LaterReadConfig
from laterread.core.errors import ItemNotFoundError
from laterread.core.items.archive import ArchiveStore
from laterread.core.items.models import ReadingItem, normalize_url
from laterread.core.items.relations import RelationSynchronizer
from laterread.core.items.store import CollectionStore, InboxStore, LaterWriteStore
from laterread.core.reading import rank_relation_candidates

logger = logging.getLogger(__name__)

DeleteListener = Callable[[str], None]


class Library:
    """
    Inbox and LaterWrite collections plus the relation synchronizer.

    Example:
        >>> library = Library(tmp / "inbox.md", tmp / "LaterWrite.md")
        >>> library.inbox.append(item)
    """

    def __init__(
        self,
        inbox_path: Path,
        laterwrite_path: Path,
        registry: CategoryRegistry | None = None,
        archive_path: Path | None = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.inbox = InboxStore(inbox_path, self.registry)
        self.laterwrite = LaterWriteStore(laterwrite_path, self.registry)
        self.archive = ArchiveStore(
            archive_path or Path(inbox_path).parent / "archive.md", self.registry
        )
        self.inbox.attach_sibling(self.laterwrite)
        for store in (self.inbox, self.laterwrite):
            store.add_link_source(self.archive)
        self.lock = threading.RLock()
        self.synchronizer = RelationSynchronizer([self.inbox, self.laterwrite])
        self._delete_listeners: list[DeleteListener] = []

    @classmethod
    def from_config(cls, config: LaterReadConfig) -> "Library":
        """Create a library from the storage section of the configuration."""
        return cls(
            config.storage.inbox_file,
            config.storage.laterwrite_file,
            archive_path=config.storage.archive_file,
        )

    @property
    def stores(self) -> tuple[CollectionStore, CollectionStore]:
        return (self.inbox, self.laterwrite)

    def on_delete(self, listener: DeleteListener) -> None:
        """Register a callback run with the url of every deleted item."""
        self._delete_listeners.append(listener)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def locate(self, url: str) -> tuple[CollectionStore, ReadingItem] | None:
        """Find an item in either collection (Inbox first)."""
        for store in self.stores:
            item = store.find(url)
            if item is not None:
                return store, item
        return None

    def all_items(self) -> list[ReadingItem]:
        return [*self.inbox.read_items(), *self.laterwrite.read_items()]

    def relation_candidates(self, url: str) -> list[ReadingItem]:
        """
        Items that may be related to ``url``.

        Read Inbox items plus every LaterWrite item, excluding the item
        itself; same category first, then newest first.

        Raises:
            ItemNotFoundError: If the url is in neither collection
        """
        found = self.locate(url)
        if found is None:
            raise ItemNotFoundError(url, "library")
        _, item = found
        candidates = [i for i in self.inbox.read_items() if i.read]
        candidates.extend(self.laterwrite.read_items())
        return rank_relation_candidates(item, candidates)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def capture(self, item: ReadingItem) -> ReadingItem:
        """Save a newly captured item at the head of the Inbox."""
        with self.lock:
            self.inbox.append(item)
        logger.info("Saved %s to inbox", item.url)
        return item

    def _store_for(self, url: str) -> CollectionStore:
        found = self.locate(url)
        if found is None:
            raise ItemNotFoundError(url, "library")
        return found[0]

    def toggle_read(self, url: str) -> ReadingItem:
        """Flip the read state of an item in either collection."""
        with self.lock:
            item = self._store_for(url).toggle_read(url)
        if item is None:
            raise ItemNotFoundError(url, "library")
        return item

    def update_fields(
        self,
        url: str,
        *,
        category: str | Category | None = None,
        summary: str | None = None,
        note: str | None = None,
    ) -> ReadingItem:
        """Partially update an item in either collection."""
        with self.lock:
            item = self._store_for(url).update_fields(
                url, category=category, summary=summary, note=note
            )
        if item is None:
            raise ItemNotFoundError(url, "library")
        return item

    def set_relations(self, url: str, related: Sequence[str]) -> ReadingItem:
        """
        Replace an item's relations and keep the other side in sync.

        Targets gained receive a back-link; targets dropped lose theirs.
        """
        with self.lock:
            store = self._store_for(url)
            before = store.find(url)
            item = store.set_relations(url, related)
            if item is None or before is None:
                raise ItemNotFoundError(url, store.name)
            self.synchronizer.relink(item.url, before.related, item.related)
        return item

    def _notify_deleted(self, url: str) -> None:
        for listener in self._delete_listeners:
            listener(url)

    def delete(self, url: str) -> ReadingItem:
        """
        Delete an item from whichever collection holds it.

        Relations pointing at it are left in place and stop rendering.
        """
        with self.lock:
            store = self._store_for(url)
            item = store.delete(url)
            if item is None:
                raise ItemNotFoundError(url, store.name)
            self._notify_deleted(item.url)
        return item

    def promote(self, url: str, related: Sequence[str] = ()) -> ReadingItem:
        """
        Move an item from the Inbox to LaterWrite.

        The item is added to LaterWrite (unless an item with the same url is
        already there) as unread, in the LaterWrite category, with
        ``related`` as its relations, and only then removed from the Inbox.
        If LaterWrite cannot be written the Inbox is left as it was. Every
        related item then gets a back-link.

        Returns:
            The promoted item as written to LaterWrite

        Raises:
            ItemNotFoundError: If the url is not in the Inbox
            StoreWriteError: If either document cannot be written
        """
        url = normalize_url(url)
        with self.lock:
            item = self.inbox.find(url)
            if item is None:
                raise ItemNotFoundError(url, self.inbox.name)

            promoted = item.model_copy(
                update={
                    "read": False,
                    "category": Category.LATERWRITE,
                    "related": [],
                }
            )
            promoted.related = list(related)

            if not self.laterwrite.append(promoted):
                logger.info("%s already in laterwrite, keeping existing entry", url)
            self.inbox.delete(url)
            self._notify_deleted(url)
            modified = self.synchronizer.propagate(url, promoted.related)
        logger.info("Promoted %s; back-links written to %s", url, modified or "nothing")
        return promoted

    def archive_read(
        self, urls: Sequence[str] | None = None, today: date | None = None
    ) -> list[ReadingItem]:
        """
        Move read Inbox items to the monthly archive.

        The archive is written first; the Inbox is rewritten without the
        moved items only once that succeeded.

        Args:
            urls: Restrict to these items (unread ones are skipped);
                defaults to every read Inbox item
            today: Date that picks the archive month

        Returns:
            The archived items, in Inbox order
        """
        wanted = None if urls is None else {normalize_url(u) for u in urls}
        with self.lock:
            items = self.inbox.load()
            moving = [i for i in items if i.read and (wanted is None or i.url in wanted)]
            if not moving:
                return []
            self.archive.archive(moving, today)
            moved = {id(i) for i in moving}
            kept = [i for i in items if id(i) not in moved]
            self.inbox.save(kept)
            remaining = {i.url for i in kept}
            for gone in dict.fromkeys(i.url for i in moving if i.url not in remaining):
                self._notify_deleted(gone)
        logger.info("Archived %d read item(s)", len(moving))
        return moving


__all__ = ["Library"]
