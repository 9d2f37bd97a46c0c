"""Shared Rich console and output helpers for songfinder.

Provides a global Rich console instance and helpers for consistent
output formatting across all CLI commands.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.status import Status
from rich.table import Table

from songfinder.candidates import Candidate

# Global console instance (initialized in CLI)
_console: Console | None = None


def get_console() -> Console:
    """Get the global Rich console instance.

    Raises:
        RuntimeError: If console not initialized (should only happen in tests)
    """
    if _console is None:
        raise RuntimeError("Console not initialized. Call set_console() first.")
    return _console


def set_console(console: Console) -> None:
    """Set the global Rich console instance."""
    global _console
    _console = console


@contextmanager
def status(
    message: str,
    spinner: str = "dots",
) -> Iterator[Status]:
    """Create a Rich Status context for showing ongoing operations.

    Example:
        with status("Searching MusicBrainz...") as st:
            # Do work
            st.update("Normalizing results...")
    """
    with get_console().status(message, spinner=spinner) as st:
        yield st


def print(*args: Any, **kwargs: Any) -> None:
    """Print to the global console."""
    get_console().print(*args, **kwargs)


def print_json(data: Any) -> None:
    """Print data as JSON without Rich markup processing."""
    get_console().print_json(data=data)


def print_error(message: str) -> None:
    get_console().print(f"[red]Error: {escape(message)}[/red]", highlight=False)


def print_warning(message: str) -> None:
    get_console().print(f"[yellow]Warning: {escape(message)}[/yellow]", highlight=False)


def candidate_table(candidates: Sequence[Candidate], title: str | None = None) -> Table:
    """Build a table of search candidates, numbered from 1."""
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Artist")
    table.add_column("Album")
    table.add_column("MBID", style="dim")

    for index, candidate in enumerate(candidates, start=1):
        table.add_row(
            str(index),
            candidate.title,
            candidate.artist_name,
            candidate.album_title,
            candidate.id,
        )
    return table
