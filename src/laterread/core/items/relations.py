"""
Bidirectional relation maintenance across collections.

If item A lists B as related, B should list A, whichever collection each of
them lives in. The synchronizer edits the relation lists of target items and
persists every collection it changed.
"""

import logging
from collections.abc import Iterable, Sequence

from laterread.core.items.models import normalize_url
from laterread.core.items.store import CollectionStore

logger = logging.getLogger(__name__)


class RelationSynchronizer:
    """
    Keep relation edges symmetric across a set of collections.

    Example:
        >>> sync = RelationSynchronizer([inbox, laterwrite])
        >>> sync.propagate("https://example.com/new", ["https://example.com/b"])
        ['inbox']
    """

    def __init__(self, stores: Sequence[CollectionStore]) -> None:
        self.stores = list(stores)

    def propagate(self, source_url: str, targets: Iterable[str]) -> list[str]:
        """
        Add ``source_url`` to the relation list of every target that exists.

        Targets that are not found in any collection are ignored.

        Returns:
            Names of the collections that were rewritten
        """
        return self._apply(source_url, add=targets, remove=())

    def relink(
        self, source_url: str, old_targets: Iterable[str], new_targets: Iterable[str]
    ) -> list[str]:
        """
        Update back-links after a relation list changed from old to new.

        Targets gained get a back-link; targets dropped lose theirs.

        Returns:
            Names of the collections that were rewritten
        """
        old = [normalize_url(u) for u in old_targets]
        new = [normalize_url(u) for u in new_targets]
        added = [u for u in new if u not in old]
        removed = [u for u in old if u not in new]
        return self._apply(source_url, add=added, remove=removed)

    def _apply(self, source_url: str, add: Iterable[str], remove: Iterable[str]) -> list[str]:
        source_url = normalize_url(source_url)
        add_set = {normalize_url(u) for u in add} - {source_url}
        remove_set = {normalize_url(u) for u in remove} - {source_url}
        if not add_set and not remove_set:
            return []

        modified: list[str] = []
        for store in self.stores:
            items = store.read_items()
            changed = False
            for item in items:
                if item.url in add_set:
                    changed |= item.add_related(source_url)
                elif item.url in remove_set:
                    changed |= item.remove_related(source_url)
            if changed:
                store.save(items)
                modified.append(store.name)
                logger.debug("Updated back-links to %s in %s", source_url, store.name)
        return modified


__all__ = ["RelationSynchronizer"]
