"""
Reading list helpers: visibility, unread reminders, weekly digest and
relation candidates.
"""

import json
import logging
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from pathlib import Path

from laterread.core.categories import Category, CategoryRegistry, default_registry
from laterread.core.items.models import ReadingItem
from laterread.core.notify import Notice

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS: tuple[int, ...] = (7, 15, 20, 30)

_REMINDER_MESSAGES = {
    7: "You have 7 unread articles. Take a look when you get a moment.",
    15: "15 unread articles. Don't let the good stuff gather dust.",
    20: "20 unread! Plan some reading time for the weekend?",
    30: "30 unread articles piling up. Time to clean out the inbox.",
}


def visible_items(
    items: Iterable[ReadingItem], today: date | None = None, hide_read_after_days: int = 7
) -> list[ReadingItem]:
    """
    Filter out read items older than the visibility window.

    Unread items are always visible.
    """
    today = today or date.today()
    cutoff = today - timedelta(days=hide_read_after_days)
    return [item for item in items if not item.read or item.created > cutoff]


def unread_count(items: Iterable[ReadingItem]) -> int:
    return sum(1 for item in items if not item.read)


class UnreadReminder:
    """
    Nudge the user when the unread pile crosses a threshold.

    A reminder fires once when the unread count lands exactly on a threshold
    above the last one notified. When the count drops below the last
    notified threshold, the record falls back to the highest threshold below
    the current count so the reminder can fire again. The last notified
    threshold is kept in a small JSON state file.
    """

    STATE_KEY = "last_notified_unread_threshold"

    def __init__(self, state_path: Path, thresholds: Sequence[int] = DEFAULT_THRESHOLDS) -> None:
        self.state_path = Path(state_path)
        self.thresholds = sorted(set(thresholds))

    def _read_state(self) -> dict:
        try:
            data = json.loads(self.state_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.state_path, e)
            return {}
        return data if isinstance(data, dict) else {}

    @property
    def last_notified(self) -> int:
        value = self._read_state().get(self.STATE_KEY, 0)
        return value if isinstance(value, int) else 0

    def _store(self, value: int) -> None:
        state = self._read_state()
        state[self.STATE_KEY] = value
        try:
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            self.state_path.write_text(json.dumps(state, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save reminder state: %s", e)

    def check(self, count: int) -> Notice | None:
        """
        Update the reminder state for the current unread count.

        Returns:
            A reminder notice when a new threshold is reached, else None
        """
        last = self.last_notified
        if count in self.thresholds and count > last:
            self._store(count)
            message = _REMINDER_MESSAGES.get(count, f"You have {count} unread articles.")
            return Notice("📚 Reading reminder", message, kind="reminder")
        if count < last:
            previous = max((t for t in self.thresholds if t < count), default=0)
            self._store(previous)
        return None


def digest_filename(today: date | None = None) -> str:
    """
    File name of the weekly reading list.

    Example:
        >>> digest_filename(date(2025, 1, 10))
        '2025-W02.md'
    """
    today = today or date.today()
    year, week, _ = today.isocalendar()
    return f"{year}-W{week:02d}.md"


def build_digest(
    items: Iterable[ReadingItem],
    registry: CategoryRegistry | None = None,
    today: date | None = None,
) -> str:
    """
    Render unread items as a weekly reading list grouped by category.

    Returns:
        Markdown document text
    """
    registry = registry or default_registry()
    today = today or date.today()
    unread = [item for item in items if not item.read]
    year, week, _ = today.isocalendar()

    parts = [f"# 📚 Reading List {year}-W{week:02d}\n\n"]
    parts.append(f"> Generated {today.isoformat()} · {len(unread)} to read\n\n---\n\n")

    grouped: dict[Category, list[ReadingItem]] = {}
    for item in unread:
        grouped.setdefault(registry.resolve(item.category), []).append(item)

    for key in registry.order:
        members = grouped.get(key)
        if not members:
            continue
        info = registry.info(key)
        parts.append(f"## {info.symbol} {info.label}\n\n")
        for item in members:
            parts.append(f"### [{item.title}]({item.url})\n\n")
            parts.append(f"- **Source**: {item.domain}\n")
            parts.append(f"- **Added**: {item.created.isoformat()}\n")
            if item.summary:
                parts.append(f"- **Summary**: {item.summary}\n")
            if item.note:
                parts.append(f"\n> 📝 {item.note}\n")
            parts.append("\n")

    parts.append("---\n\n*Generated by LaterRead*\n")
    return "".join(parts)


def rank_relation_candidates(
    item: ReadingItem, candidates: Iterable[ReadingItem]
) -> list[ReadingItem]:
    """Same category as ``item`` first, then newest first."""
    others = [c for c in candidates if c.url != item.url]
    return sorted(
        others,
        key=lambda c: (c.category == item.category, c.created),
        reverse=True,
    )
