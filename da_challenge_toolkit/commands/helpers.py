"""Shared command helpers and utilities."""

import sys
from typing import Callable, Optional, TypeVar

from rich import print as rprint
from rich.markup import escape

from da_challenge_toolkit.shared.exceptions import NonRetryableException
from da_challenge_toolkit.shared.results import Result
from da_challenge_toolkit.utils.formatters import format_errors

T = TypeVar("T")


def handle_command_error(
    error: Exception, show_usage_fn: Optional[Callable[[], None]] = None
) -> None:
    """
    Standard error handling for commands.

    Args:
        error: The exception that occurred
        show_usage_fn: Optional function to display usage instructions
    """
    if isinstance(error, (ValueError, NonRetryableException)):
        rprint(f"[red]Error:[/red] {str(error)}")
    else:
        rprint(f"[red]Unexpected error:[/red] {str(error)}")

    if show_usage_fn:
        show_usage_fn()

    sys.exit(1)


def unwrap_or_exit(result: Result[T]) -> T:
    """Return the result data, or print every error and exit with status 1."""
    if result.success:
        return result.data  # type: ignore[return-value]
    for line in format_errors(result.errors):
        rprint(f"[red]Error:[/red] {escape(line)}")
    sys.exit(1)
