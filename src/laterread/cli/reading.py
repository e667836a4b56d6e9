"""
laterread CLI - Reading list overview commands.
"""

from datetime import date
from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from laterread.cli.common import console, get_config, get_library
from laterread.cli.errors import ExitCode, exit_with_error, print_error
from laterread.core.errors import LaterReadError
from laterread.core.reading import build_digest, digest_filename


def digest(
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory to write to (default: the configured digest folder)",
    ),
    stdout: bool = typer.Option(
        False,
        "--stdout",
        help="Print the reading list instead of writing a file",
    ),
) -> None:
    """
    Write this week's reading list of unread Inbox items.

    The file is named after the ISO week, e.g. 2025-W02.md.
    """
    config = get_config()
    library = get_library(config)
    today = date.today()
    text = build_digest(library.inbox.read_items(), library.registry, today)

    if stdout:
        console.print(text, markup=False, highlight=False, soft_wrap=True)
        return

    folder = output or config.storage.digest_folder
    path = folder / digest_filename(today)
    try:
        folder.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        print_error(f"Failed to write {path}", reason=str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    console.print(f"[green]✓[/green] Reading list written to {path}")


def categories() -> None:
    """List the category keys and their symbols."""
    registry = get_library().registry
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("", width=3)
    table.add_column("Key")
    table.add_column("Label")
    table.add_column("Keywords", style="dim", overflow="fold")
    for key in registry.order:
        info = registry.info(key)
        table.add_row(info.symbol, key.value, info.label, info.keywords)
    console.print(table)


def archive() -> None:
    """
    Move every read Inbox item to the archive.

    Items are filed under the current month in archive.md, next to the
    Inbox document.
    """
    library = get_library()
    try:
        moved = library.archive_read()
    except LaterReadError as e:
        exit_with_error(e)
    if not moved:
        console.print("[dim]No read items to archive[/dim]")
        return
    console.print(f"[green]✓[/green] Archived {len(moved)} item(s) to {escape(str(library.archive.path))}")
