"""
laterread CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer

from laterread import __version__
from laterread.cli import classify, items, key, reading
from laterread.cli.common import console
from laterread.core.config.env import load_layered_env

# Help panel names for command grouping
PANEL_ITEMS = "Save and Read"
PANEL_ORGANIZE = "Organize"
PANEL_CLASSIFY = "Classify"
PANEL_INSTALL = "Setup"

# Create the main Typer app
app = typer.Typer(
    name="laterread",
    help="Save pages to read later, in plain Markdown",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    LaterRead - a reading inbox kept in Markdown.

    Pages go to the Inbox (inbox.md); items worth writing about are promoted
    to LaterWrite (LaterWrite.md). Both are plain documents you can open in
    any editor or note vault.

    Common Workflows:
        laterread add https://example.com/article    # Save a page
        laterread list                               # What's left to read
        laterread read https://example.com/article   # Mark as read
        laterread promote https://example.com/article -r https://other.example
        laterread classify-all                       # Summarize and categorize

    Configuration:
        ~/.config/laterread/config.json    # Vault location, model, reminders
        laterread key set                  # Store the OpenRouter API key
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug)

    ctx.obj = {"debug": debug}


# =============================================================================
# Save and Read
# =============================================================================

app.command(name="add", rich_help_panel=PANEL_ITEMS)(items.add)
app.command(name="list", rich_help_panel=PANEL_ITEMS)(items.list_items)
app.command(name="read", rich_help_panel=PANEL_ITEMS)(items.read)
app.command(name="note", rich_help_panel=PANEL_ITEMS)(items.note)
app.command(name="delete", rich_help_panel=PANEL_ITEMS)(items.delete)
app.command(name="archive", rich_help_panel=PANEL_ITEMS)(reading.archive)
app.command(name="digest", rich_help_panel=PANEL_ITEMS)(reading.digest)


# =============================================================================
# Organize
# =============================================================================

app.command(name="categorize", rich_help_panel=PANEL_ORGANIZE)(items.categorize)
app.command(name="relate", rich_help_panel=PANEL_ORGANIZE)(items.relate)
app.command(name="promote", rich_help_panel=PANEL_ORGANIZE)(items.promote)
app.command(name="candidates", rich_help_panel=PANEL_ORGANIZE)(items.candidates)
app.command(name="categories", rich_help_panel=PANEL_ORGANIZE)(reading.categories)


# =============================================================================
# Classify
# =============================================================================

app.command(name="classify", rich_help_panel=PANEL_CLASSIFY)(classify.classify)
app.command(name="classify-all", rich_help_panel=PANEL_CLASSIFY)(classify.classify_all)


# =============================================================================
# Setup
# =============================================================================

app.add_typer(key.app, name="key", rich_help_panel=PANEL_INSTALL)


@app.command(rich_help_panel=PANEL_INSTALL)
def version() -> None:
    """Show laterread version and exit."""
    console.print(f"laterread version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
