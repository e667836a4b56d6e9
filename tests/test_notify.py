"""
Tests for notices and the console notifier.
"""

import io

from rich.console import Console

from laterread.core.notify import ConsoleNotifier, Notice, RecordingNotifier


def console_output(notice: Notice) -> str:
    buffer = io.StringIO()
    ConsoleNotifier(Console(file=buffer, width=200)).notify(notice)
    return buffer.getvalue()


class TestConsoleNotifier:
    def test_title_and_body(self) -> None:
        assert console_output(Notice("Saved ✓", "An article")) == "Saved ✓ An article\n"

    def test_markup_in_text_is_printed_literally(self) -> None:
        output = console_output(Notice("Saved ✓", "Fixing [/etc/hosts] parsing [bold]now"))

        assert "Fixing [/etc/hosts] parsing [bold]now" in output

    def test_markup_in_title(self) -> None:
        assert "[/x] title" in console_output(Notice("[/x] title"))


def test_error_kinds() -> None:
    assert Notice("x", kind="rate-limited").is_error
    assert not Notice("x", kind="classified").is_error


def test_recording_notifier() -> None:
    notifier = RecordingNotifier()

    notifier.notify(Notice("a", kind="progress"))
    notifier.notify(Notice("b"))

    assert notifier.kinds() == ["progress", "info"]
