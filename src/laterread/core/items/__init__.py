"""
Reading items and their two collections.

Items are stored in plain Markdown documents (see ``codec``), one document
per collection (see ``store``). Relations between items are kept symmetric
by ``relations.RelationSynchronizer``. Read Inbox items can be moved to a
monthly archive document (see ``archive``).
"""

from laterread.core.items.archive import ArchiveStore
from laterread.core.items.codec import LineKind, ParseResult, SkippedLine, TextCodec
from laterread.core.items.models import ReadingItem, domain_from_url, normalize_url
from laterread.core.items.relations import RelationSynchronizer
from laterread.core.items.store import CollectionStore, InboxStore, LaterWriteStore

__all__ = [
    "ArchiveStore",
    "CollectionStore",
    "InboxStore",
    "LaterWriteStore",
    "LineKind",
    "ParseResult",
    "ReadingItem",
    "RelationSynchronizer",
    "SkippedLine",
    "TextCodec",
    "domain_from_url",
    "normalize_url",
]
