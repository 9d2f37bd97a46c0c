"""CLI for songfinder using Typer and Rich.

Search MusicBrainz with the prefix query syntax, inspect how a query is parsed,
and replay keystrokes through the live suggestion debouncer.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError
from rich.console import Console

from songfinder.candidates import Candidate
from songfinder.config import Config
from songfinder.console import (
    candidate_table,
    print_error,
    print_json,
    print_warning,
    set_console,
    status,
)
from songfinder.console import (
    print as cprint,
)
from songfinder.coverart import CoverArtArchive
from songfinder.debounce import SuggestionDebouncer
from songfinder.musicbrainz import MusicBrainzClient, SearchError, SearchKind, SearchRequest
from songfinder.query_parser import Channel, parse_search_query
from songfinder.records import SongRecord, parse_month
from songfinder.safe_logging import configure_rich_logging


class OutputFormat(StrEnum):
    """Output format for CLI commands."""

    TEXT = "text"
    JSON = "json"


class ExitCode:
    """Standard exit codes for CLI commands."""

    SUCCESS = 0
    ERROR = 1
    NO_RESULTS = 2


app = typer.Typer(
    name="songfinder",
    help="Songfinder: prefix-query track search against MusicBrainz",
    no_args_is_help=True,
    add_completion=False,
)


class AppState:
    """Global application state passed between commands."""

    config: Config
    output_format: OutputFormat
    verbose: int


state = AppState()


def make_client(config: Config) -> MusicBrainzClient:
    """Create a MusicBrainz client from configuration."""
    return MusicBrainzClient(
        base_url=config.musicbrainz.base_url,
        user_agent=config.musicbrainz.user_agent,
        timeout_s=config.musicbrainz.timeout_s,
        cover_art=CoverArtArchive(
            host=config.cover_art.host,
            size=config.cover_art.size,
            placeholder=config.cover_art.placeholder,
        ),
    )


@app.callback()
def main(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Path to configuration TOML file", exists=True),
    ] = None,
    output: Annotated[
        OutputFormat,
        typer.Option("--output", "-o", help="Output format"),
    ] = OutputFormat.TEXT,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity"),
    ] = 0,
    base_url: Annotated[str | None, typer.Option(help="MusicBrainz API root URL")] = None,
    user_agent: Annotated[str | None, typer.Option(help="User-Agent sent to MusicBrainz")] = None,
    quiet_window_ms: Annotated[
        int | None, typer.Option(help="Suggestion debounce window in milliseconds")
    ] = None,
) -> None:
    """Songfinder: prefix-query track search against MusicBrainz."""
    logger = logging.getLogger(__name__)

    # Load config (TOML + env vars)
    try:
        cfg = Config.load(config_path)
    except ValidationError as e:
        set_console(Console())
        print_error(f"Invalid configuration: {e}")
        sys.exit(ExitCode.ERROR)

    # CLI > Env > Config File > Defaults
    if base_url:
        cfg.musicbrainz.base_url = base_url
    if user_agent:
        cfg.musicbrainz.user_agent = user_agent
    if quiet_window_ms is not None:
        cfg.suggestions.quiet_window_ms = quiet_window_ms

    if verbose > 0:
        log_level = logging.DEBUG if verbose >= 2 else logging.INFO
    else:
        log_level = getattr(logging, cfg.logging.level.upper(), logging.WARNING)

    console = configure_rich_logging(level=log_level, sanitize=cfg.logging.sanitize)
    set_console(console)

    # Suppress external library logging unless very verbose (-vvv)
    if verbose < 3:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    if config_path:
        logger.info(f"Loaded config from {config_path}")
    logger.debug(f"Logging configured: level={logging.getLevelName(log_level)}")

    state.config = cfg
    state.output_format = output
    state.verbose = verbose


@app.command()
def parse(
    query: Annotated[str, typer.Argument(help='Search string, e.g. s:"hello world" aa:cook')],
) -> None:
    """Show how a search string is split into song/artist/album fields."""
    search_filter = parse_search_query(query)

    if state.output_format == OutputFormat.JSON:
        print_json(search_filter.to_dict())
        return

    if search_filter.is_empty():
        print_warning("Empty query")
        return
    for channel in Channel:
        value = search_filter.get(channel)
        cprint(f"{channel.value:>6}: {value if value is not None else '-'}", markup=False)


async def _run_search(request: SearchRequest) -> list[Any]:
    async with make_client(state.config) as client:
        return await client.search(request)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Search string (prefix syntax unless --raw)")],
    kind: Annotated[SearchKind, typer.Option("--kind", "-k", help="Entity to search")] = SearchKind.RECORDING,
    limit: Annotated[int | None, typer.Option("--limit", "-n", min=1, max=100, help="Max results")] = None,
    raw: Annotated[bool, typer.Option(help="Send QUERY to MusicBrainz as-is")] = False,
    records: Annotated[bool, typer.Option(help="Print song records instead of candidates")] = False,
    month: Annotated[
        str | None, typer.Option(help="Month to file records under (YYYY-MM, default now)")
    ] = None,
) -> None:
    """Search MusicBrainz for tracks.

    Examples:
        songfinder search 's:"hello world" aa:"ag cook"'
        songfinder search --kind artist --raw 'ag cook'
        songfinder -o json search --records --month 2024-03 'aa:cook al:pop'
    """
    logger = logging.getLogger(__name__)
    limit = limit or state.config.musicbrainz.default_limit

    if raw:
        request = SearchRequest(kind=kind, raw_query=query, limit=limit)
    else:
        request = SearchRequest.from_filter(parse_search_query(query), kind=kind, limit=limit)
    logger.info(f"Searching {request.kind}: {query!r}")

    added_at = None
    if month:
        try:
            added_at = parse_month(month)
        except ValueError as e:
            print_error(str(e))
            sys.exit(ExitCode.ERROR)

    try:
        if state.output_format == OutputFormat.TEXT:
            with status("Searching MusicBrainz..."):
                results = asyncio.run(_run_search(request))
        else:
            results = asyncio.run(_run_search(request))
    except SearchError as e:
        print_error(str(e))
        sys.exit(ExitCode.ERROR)

    if not results:
        if state.output_format == OutputFormat.JSON:
            print_json([])
        else:
            print_warning("No results")
        sys.exit(ExitCode.NO_RESULTS)

    candidates = [item for item in results if isinstance(item, Candidate)]

    if records and candidates:
        song_records = [SongRecord.from_candidate(c, added_at) for c in candidates]
        print_json([record.to_dict() for record in song_records])
    elif state.output_format == OutputFormat.JSON:
        print_json([c.to_dict() for c in candidates] if candidates else results)
    elif candidates:
        cprint(candidate_table(candidates, title=f"{len(candidates)} recordings"))
    else:
        name_key = "name" if request.kind is SearchKind.ARTIST else "title"
        for item in results:
            cprint(f"{item.get(name_key, '?')}  {item.get('id', '')}", markup=False)

    sys.exit(ExitCode.SUCCESS)


async def _replay_keystrokes(
    channel: Channel, values: list[str], interval: float
) -> tuple[list[Any], list[Exception]]:
    errors: list[Exception] = []
    limit = state.config.suggestions.limit

    async with make_client(state.config) as client:

        async def fetch(channel_name: str, value: str) -> list[Any]:
            return await client.suggest(channel_name, value, limit=limit)

        debouncer = SuggestionDebouncer(
            fetch,
            quiet_window=state.config.suggestions.quiet_window_s,
            on_error=lambda _channel, exc: errors.append(exc),
        )
        for value in values:
            debouncer.schedule(channel, value)
            await asyncio.sleep(interval)
        await debouncer.wait_idle()
        return debouncer.suggestions(channel), errors


def _suggestion_label(item: Any) -> str:
    if isinstance(item, Candidate):
        return f"{item.title} - {item.artist_name}"
    return str(item.get("name") or item.get("title") or item.get("id", "?"))


@app.command()
def suggest(
    channel: Annotated[Channel, typer.Argument(help="Input field being typed into")],
    values: Annotated[list[str], typer.Argument(help="Successive field values, one per keystroke")],
    interval: Annotated[
        float, typer.Option(min=0.0, help="Seconds between simulated keystrokes")
    ] = 0.05,
) -> None:
    """Replay keystrokes through the suggestion debouncer.

    Only the value still current after the quiet window is sent to MusicBrainz.

    Examples:
        songfinder suggest artist a ag "ag c"
    """
    suggestions, errors = asyncio.run(_replay_keystrokes(channel, values, interval))

    if errors:
        for error in errors:
            print_error(str(error))
        sys.exit(ExitCode.ERROR)

    if state.output_format == OutputFormat.JSON:
        print_json(
            [item.to_dict() if isinstance(item, Candidate) else item for item in suggestions]
        )
    elif not suggestions:
        print_warning(f"No {channel.value} suggestions")
    else:
        for item in suggestions:
            cprint(_suggestion_label(item), markup=False)

    sys.exit(ExitCode.SUCCESS if suggestions else ExitCode.NO_RESULTS)


if __name__ == "__main__":
    app()
