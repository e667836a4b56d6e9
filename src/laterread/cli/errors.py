"""
Standardized error handling and exit codes for the laterread CLI.

This module provides consistent error messaging with actionable guidance
and standardized exit codes across all CLI commands.
"""

from enum import IntEnum
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from laterread.core.classify.models import ClassifierError, FailureKind
from laterread.core.errors import (
    CaptureUnavailableError,
    ItemNotFoundError,
    LaterReadError,
    StoreWriteError,
)

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for laterread CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Generic error (write failure, classifier failure)."""

    USER_ERROR = 2
    """Bad input: unknown url, unknown category, missing API key."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "No API key configured",
        ...     reason="Classification needs an OpenRouter API key",
        ...     solution="laterread key set",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")


def print_missing_key_error() -> None:
    """Print error when no API key is stored."""
    print_error(
        "No API key configured",
        reason="Classification needs an OpenRouter API key",
        solution="laterread key set",
    )


def exit_with_error(error: LaterReadError) -> NoReturn:
    """Report a laterread error and exit with the matching code."""
    if isinstance(error, ItemNotFoundError):
        print_error(
            f"No item with url {error.url}",
            reason=f"Searched the {error.collection}",
            solution="laterread list --all",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    if isinstance(error, StoreWriteError):
        print_error(
            "Could not save the document",
            reason=str(error),
            solution=f"Check that {error.path} is writable",
        )
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if isinstance(error, CaptureUnavailableError):
        print_error(str(error), solution="laterread add https://example.com/article")
        raise typer.Exit(ExitCode.USER_ERROR)

    if isinstance(error, ClassifierError) and error.kind == FailureKind.UNAUTHORIZED:
        print_error(str(error), solution="laterread key set")
        raise typer.Exit(ExitCode.USER_ERROR)

    print_error(str(error))
    raise typer.Exit(ExitCode.GENERAL_ERROR)


__all__ = [
    "ExitCode",
    "exit_with_error",
    "print_error",
    "print_missing_key_error",
]
