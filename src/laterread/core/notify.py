"""
User-visible notices.

Delivering a notification is the host's business; laterread only produces
``Notice`` values and hands them to a ``Notifier``.
"""

from dataclasses import dataclass
from typing import Protocol

from rich.console import Console
from rich.markup import escape


@dataclass(frozen=True)
class Notice:
    """
    A short message for the user.

    Attributes:
        title: Headline
        body: Detail text
        kind: Machine-readable tag (e.g. "saved", "invalid-response")
    """

    title: str
    body: str = ""
    kind: str = "info"

    @property
    def is_error(self) -> bool:
        return self.kind not in ("info", "saved", "classified", "progress", "reminder", "done")


class Notifier(Protocol):
    def notify(self, notice: Notice) -> None: ...


class ConsoleNotifier:
    """Print notices to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def notify(self, notice: Notice) -> None:
        style = "red" if notice.is_error else "green"
        line = f"[{style}]{escape(notice.title)}[/{style}]"
        if notice.body:
            line += f" [dim]{escape(notice.body)}[/dim]"
        self.console.print(line)


class RecordingNotifier:
    """Collect notices in memory (for embedding hosts and tests)."""

    def __init__(self) -> None:
        self.notices: list[Notice] = []

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    def kinds(self) -> list[str]:
        return [n.kind for n in self.notices]
