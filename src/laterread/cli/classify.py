"""
laterread CLI - Classification commands.

Ask the remote classifier for a summary and category, for one item or for
every unread Inbox item that still needs one.
"""

import typer
from rich.markup import escape

from laterread.cli.common import console, get_config, get_credentials, get_library, get_service
from laterread.cli.errors import ExitCode, print_missing_key_error


def _require_key() -> None:
    if not get_credentials().get():
        print_missing_key_error()
        raise typer.Exit(ExitCode.USER_ERROR)


def classify(
    url: str = typer.Argument(..., help="Inbox item url"),
) -> None:
    """
    Classify one Inbox item now.

    Examples:
        laterread classify https://example.com/article
    """
    _require_key()
    config = get_config()
    library = get_library(config)
    if not library.inbox.contains(url):
        console.print(f"[red]Error:[/red] {escape(url)} is not in the Inbox")
        raise typer.Exit(ExitCode.USER_ERROR)

    result = get_service(library, config).classify(url)
    if result is None:
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    info = library.registry.info(result.category)
    console.print(f"{info.symbol} {info.label}")
    if result.summary:
        console.print(f"[dim]{escape(result.summary)}[/dim]")


def classify_all() -> None:
    """
    Classify every unread Inbox item without a summary or category.

    Requests are sent one at a time with a short pause in between. Items
    that fail keep their current state and are picked up by the next run.
    """
    _require_key()
    config = get_config()
    library = get_library(config)
    report = get_service(library, config).classify_all()

    if report.total == 0:
        return
    console.print(
        f"Classified {report.classified} of {report.total}"
        + (f", [red]{report.failed} failed[/red]" if report.failed else "")
        + (f", {report.discarded} removed meanwhile" if report.discarded else "")
    )
    if report.classified == 0 and report.failed:
        raise typer.Exit(ExitCode.GENERAL_ERROR)
