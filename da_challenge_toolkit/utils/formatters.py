"""Shared formatting and file utilities for commands."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from rich.console import Console
from rich.table import Table

from da_challenge_toolkit.shared.results import ProcessingError

# Shared console instance
console = Console()


def format_hash(value: str, length: int = 18) -> str:
    """
    Shorten a 0x-prefixed hash to its first and last characters.

    Args:
        value: Hex string
        length: Max characters shown before shortening

    Returns:
        Formatted hash like "0x1234ab...cdef"
    """
    if not value:
        return "N/A"
    if len(value) <= length:
        return value
    return f"{value[:8]}...{value[-4:]}"


def to_json(data: Dict[str, Any]) -> str:
    """Indented JSON, stable across runs."""
    return json.dumps(data, indent=2)


def save_json_output(
    data: Dict[str, Any],
    filename: str,
    output_dir: str = "output",
    print_path: bool = True,
) -> str:
    """
    Save data to a JSON file with automatic directory creation.

    Args:
        data: Data to save
        filename: Output filename (can include subdirectories)
        output_dir: Base output directory (default: 'output')
        print_path: Whether to print the saved file path

    Returns:
        Full path to saved file
    """
    output_path = Path(output_dir)
    filepath = output_path / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as f:
        f.write(to_json(data))

    if print_path:
        console.print(f"[cyan]Data saved to:[/cyan] {filepath}")

    return str(filepath)


def create_ranges_table(ranges: Iterable[Any]) -> Table:
    """
    Create a Rich table listing settlement block ranges.

    Args:
        ranges: BlockRange values, oldest first

    Returns:
        Rich Table ready to print
    """
    table = Table(
        show_header=True,
        header_style="bold cyan",
        show_lines=False,
        pad_edge=False,
        box=None,
    )
    table.add_column("#", width=4, justify="right")
    table.add_column("From", justify="right")
    table.add_column("To", justify="right")
    table.add_column("Blocks", justify="right")
    for i, block_range in enumerate(ranges):
        table.add_row(
            str(i),
            str(block_range.start),
            str(block_range.end),
            str(len(block_range)),
        )
    return table


def format_errors(errors: List[ProcessingError]) -> List[str]:
    """One line per error: ``[source] message (key=value, ...)``."""
    lines = []
    for error in errors:
        details = ", ".join(f"{k}={v}" for k, v in error.context.items())
        line = f"[{error.source}] {error.message}"
        if details:
            line += f" ({details})"
        lines.append(line)
    return lines
