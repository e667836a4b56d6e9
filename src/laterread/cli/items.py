"""
laterread CLI - Reading item commands.

Save pages, list and edit items, relate them, and promote Inbox items to
LaterWrite.
"""

import sys
from datetime import date

import typer
from rich.markup import escape
from rich.table import Table

from laterread.cli.common import console, get_config, get_credentials, get_library, get_service
from laterread.cli.errors import ExitCode, exit_with_error, print_error
from laterread.core.capture import extract_url, fetch_page_info
from laterread.core.categories import Category, CategoryRegistry
from laterread.core.config import get_state_path
from laterread.core.errors import LaterReadError
from laterread.core.items.models import ReadingItem
from laterread.core.notify import ConsoleNotifier, Notice
from laterread.core.reading import UnreadReminder, unread_count, visible_items


def _parse_category(value: str) -> Category:
    try:
        return Category(value.strip())
    except ValueError:
        print_error(
            f"Unknown category '{value}'",
            solution="laterread categories",
        )
        raise typer.Exit(ExitCode.USER_ERROR)


def _items_table(
    items: list[ReadingItem], title: str, registry: CategoryRegistry, *, show_url: bool = False
) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("", width=2)
    table.add_column("Added", width=10)
    table.add_column("Cat", width=3)
    table.add_column("Title", overflow="fold")
    table.add_column("Source", style="dim", width=20)
    if show_url:
        table.add_column("Url", style="dim", overflow="fold")
    for item in items:
        table.add_row(
            "✓" if item.read else "",
            item.created.isoformat(),
            registry.symbol(item.category),
            escape(item.title),
            escape(item.domain),
            *([escape(item.url)] if show_url else []),
        )
    return table


def add(
    url: str | None = typer.Argument(
        None,
        help="Page url (or text containing one on stdin)",
    ),
    title: str | None = typer.Option(
        None,
        "--title",
        "-t",
        help="Page title (fetched from the page if omitted)",
    ),
    note: str = typer.Option(
        "",
        "--note",
        "-n",
        help="Note to keep with the item",
    ),
    no_classify: bool = typer.Option(
        False,
        "--no-classify",
        help="Skip background classification",
    ),
) -> None:
    """
    Save a page to the Inbox.

    Examples:
        laterread add https://example.com/article
        laterread add https://example.com/article --title "An article" -n "for the talk"
        pbpaste | laterread add
    """
    config = get_config()
    library = get_library(config)
    notifier = ConsoleNotifier()

    try:
        if url is None:
            if sys.stdin.isatty():
                print_error(
                    "No url provided",
                    solution="laterread add https://example.com/article",
                )
                raise typer.Exit(ExitCode.USER_ERROR)
            url = extract_url(sys.stdin.read())

        if title is None:
            page = fetch_page_info(url)
            url, title = page.url, page.title

        item = library.capture(ReadingItem.new(url, title, note=note))
    except LaterReadError as e:
        exit_with_error(e)

    notifier.notify(Notice("Saved ✓", item.title[:50], kind="saved"))

    reminder = UnreadReminder(get_state_path(), config.reading.reminder_thresholds)
    if notice := reminder.check(unread_count(library.inbox.read_items())):
        notifier.notify(notice)

    if no_classify or not config.classifier.auto_classify:
        return
    if not get_credentials().get():
        console.print("[dim]No API key configured; run `laterread key set` to enable classification[/dim]")
        return

    service = get_service(library, config)
    service.submit(item.url)
    service.wait()
    service.shutdown()


def list_items(
    laterwrite: bool = typer.Option(
        False,
        "--laterwrite",
        "-w",
        help="List LaterWrite instead of the Inbox",
    ),
    show_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Include read items older than the visibility window",
    ),
    unread: bool = typer.Option(
        False,
        "--unread",
        "-u",
        help="Only unread items",
    ),
    category: str | None = typer.Option(
        None,
        "--category",
        "-c",
        help="Only items in this category",
    ),
) -> None:
    """
    List saved items.

    Read items are hidden once they are older than the configured window
    (7 days by default); use --all to see them.

    Examples:
        laterread list
        laterread list --unread --category ai-tech
        laterread list --laterwrite
    """
    config = get_config()
    library = get_library(config)
    store = library.laterwrite if laterwrite else library.inbox

    try:
        items = store.load()
    except LaterReadError as e:
        exit_with_error(e)

    if not show_all:
        items = visible_items(items, date.today(), config.reading.hide_read_after_days)
    if unread:
        items = [i for i in items if not i.read]
    if category is not None:
        wanted = _parse_category(category)
        items = [i for i in items if i.category == wanted]

    if store.last_skipped:
        console.print(
            f"[yellow]{len(store.last_skipped)} line(s) in {store.path.name} "
            "could not be read (run with --debug for details)[/yellow]"
        )

    if not items:
        console.print(f"[dim]No items in {store.title}[/dim]")
        return

    console.print(_items_table(items, f"{store.title} - {store.path}", library.registry))
    console.print(f"\n[dim]{unread_count(items)} unread of {len(items)}[/dim]")


def read(
    url: str = typer.Argument(..., help="Item url"),
    archive: bool = typer.Option(
        False,
        "--archive",
        help="Move the item to the archive once it is read (Inbox only)",
    ),
) -> None:
    """Toggle an item between read and unread."""
    library = get_library()
    try:
        item = library.toggle_read(url)
        archived = library.archive_read([item.url]) if archive and item.read else []
    except LaterReadError as e:
        exit_with_error(e)
    state = "read" if item.read else "unread"
    console.print(f"[green]✓[/green] Marked as {state}: {escape(item.title)}")
    if archived:
        console.print(f"[dim]Archived to {escape(str(library.archive.path))}[/dim]")


def note(
    url: str = typer.Argument(..., help="Item url"),
    text: str = typer.Argument("", help="Note text (omit to clear the note)"),
) -> None:
    """Set or clear the note on an item."""
    try:
        item = get_library().update_fields(url, note=text)
    except LaterReadError as e:
        exit_with_error(e)
    if item.note:
        console.print(f"[green]✓[/green] Note saved: {escape(item.note)}")
    else:
        console.print("[green]✓[/green] Note cleared")


def categorize(
    url: str = typer.Argument(..., help="Item url"),
    category: str = typer.Argument(..., help="Category key (see `laterread categories`)"),
    summary: str | None = typer.Option(
        None,
        "--summary",
        "-s",
        help="Replace the summary as well",
    ),
) -> None:
    """Set an item's category by hand."""
    key = _parse_category(category)
    try:
        library = get_library()
        item = library.update_fields(url, category=key, summary=summary)
    except LaterReadError as e:
        exit_with_error(e)
    info = library.registry.info(item.category)
    console.print(f"[green]✓[/green] {info.symbol} {info.label}: {escape(item.title)}")


def relate(
    url: str = typer.Argument(..., help="Item url"),
    targets: list[str] | None = typer.Argument(
        None,
        help="Urls of related items (omit to clear all relations)",
    ),
) -> None:
    """
    Replace an item's relations.

    Related items get a back-link; items no longer related lose theirs.

    Examples:
        laterread relate https://a.example https://b.example https://c.example
        laterread relate https://a.example
    """
    try:
        item = get_library().set_relations(url, targets or [])
    except LaterReadError as e:
        exit_with_error(e)
    if item.related:
        console.print(f"[green]✓[/green] {len(item.related)} relation(s) for {escape(item.title)}")
    else:
        console.print(f"[green]✓[/green] Relations cleared for {escape(item.title)}")


def delete(
    url: str = typer.Argument(..., help="Item url"),
) -> None:
    """Delete an item from whichever collection holds it."""
    try:
        item = get_library().delete(url)
    except LaterReadError as e:
        exit_with_error(e)
    console.print(f"[green]✓[/green] Deleted: {escape(item.title)}")


def promote(
    url: str = typer.Argument(..., help="Inbox item url"),
    related: list[str] = typer.Option(
        [],
        "--related",
        "-r",
        help="Url of a related item (repeatable)",
    ),
) -> None:
    """
    Move an Inbox item to LaterWrite.

    The item becomes unread in the LaterWrite category; every related item
    gets a back-link.

    Examples:
        laterread promote https://a.example
        laterread promote https://a.example -r https://b.example -r https://c.example
    """
    try:
        item = get_library().promote(url, related)
    except LaterReadError as e:
        exit_with_error(e)
    console.print(f"[green]✓[/green] Moved to LaterWrite: {escape(item.title)}")
    if item.related:
        console.print(f"[dim]Related: {len(item.related)} item(s)[/dim]")


def candidates(
    url: str = typer.Argument(..., help="Item url"),
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum items to show", min=1),
) -> None:
    """Show items that could be related to an item (same category first)."""
    library = get_library()
    try:
        found = library.relation_candidates(url)
    except LaterReadError as e:
        exit_with_error(e)
    if not found:
        console.print("[dim]No candidates: read Inbox items and LaterWrite items appear here[/dim]")
        return

    console.print(
        _items_table(found[:limit], "Relation candidates", library.registry, show_url=True)
    )
