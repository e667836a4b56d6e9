"""
laterread CLI - API key management.

The classifier key is stored in the user .env file
(``~/.config/laterread/.env``). ``OPENROUTER_API_KEY`` in the environment
takes precedence over the stored value.
"""

import typer

from laterread.cli.common import console, get_credentials
from laterread.cli.errors import ExitCode, exit_with_error
from laterread.core.errors import LaterReadError

app = typer.Typer(help="Manage the classifier API key")


def mask(value: str) -> str:
    """Show only the first and last four characters of a secret."""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}…{value[-4:]}"


@app.command(name="set")
def set_key(
    value: str | None = typer.Argument(
        None,
        help="API key (prompted for if omitted)",
    ),
) -> None:
    """Store the OpenRouter API key."""
    if value is None:
        value = typer.prompt("OpenRouter API key", hide_input=True)
    if not value.strip():
        console.print("[red]Error:[/red] API key cannot be empty.")
        raise typer.Exit(ExitCode.USER_ERROR)

    store = get_credentials()
    try:
        store.set(value)
    except LaterReadError as e:
        exit_with_error(e)
    console.print(f"[green]✓[/green] API key saved to {store.path}")


@app.command()
def show() -> None:
    """Show whether a key is configured (masked)."""
    value = get_credentials().get()
    if not value:
        console.print("[yellow]No API key configured[/yellow]")
        raise typer.Exit(ExitCode.USER_ERROR)
    console.print(f"API key: {mask(value)}")


@app.command()
def delete() -> None:
    """Remove the stored API key."""
    store = get_credentials()
    if not store.delete():
        console.print(f"[red]Error:[/red] Could not remove the key from {store.path}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    console.print("[green]✓[/green] API key removed")
