"""
Prefix mini-language for the combined search box.

A query is a run of whitespace-separated tokens. Three prefixes introduce a
field value, either double-quoted (spaces allowed) or a bare word:

    s:      song (recording title)
    aa:     artist name
    al:     album (release title)

Examples:
    s:"hello world" aa:"ag cook" al:"pop 2"
    s:hello aa:cook al:pop
    plain text query            -> song="plain text query"

Each prefix is matched on its own against the original string, so prefix order
does not matter. When a prefix occurs more than once the first occurrence that
matches wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum


class Channel(StrEnum):
    """Independently debounced suggestion stream, one per filter field."""

    SONG = "song"
    ARTIST = "artist"
    ALBUM = "album"


def _prefix_pattern(prefix: str) -> re.Pattern[str]:
    # quoted value | bare word, then another `word:` token or end of input
    return re.compile(
        rf'(?:^|\s){re.escape(prefix)}:(?:"([^"]+)"|([^"\s]+))(?=\s+[A-Za-z0-9_]+:|\Z)'
    )


PREFIXES: dict[Channel, str] = {
    Channel.SONG: "s",
    Channel.ARTIST: "aa",
    Channel.ALBUM: "al",
}

_PATTERNS: dict[Channel, re.Pattern[str]] = {
    channel: _prefix_pattern(prefix) for channel, prefix in PREFIXES.items()
}

_WHOLE_QUOTED = re.compile(r'^"([^"]+)"$')


@dataclass(frozen=True)
class SearchFilter:
    """Structured search query produced by the parser."""

    song: str | None = None
    artist: str | None = None
    album: str | None = None

    def is_empty(self) -> bool:
        return self.song is None and self.artist is None and self.album is None

    def get(self, channel: Channel) -> str | None:
        return getattr(self, channel.value)

    def to_dict(self) -> dict[str, str]:
        """Only the fields that are set."""
        return {
            channel.value: value
            for channel in Channel
            if (value := self.get(channel)) is not None
        }


def _extract(pattern: re.Pattern[str], raw: str) -> str | None:
    match = pattern.search(raw)
    if match is None:
        return None
    quoted, bare = match.groups()
    return (quoted if quoted is not None else bare).strip()


def parse_search_query(raw: str) -> SearchFilter:
    """
    Parse a search box string into a SearchFilter.

    Never raises: unknown syntax simply leaves fields unset, and input without
    any recognized prefix is treated as a song title.

    Args:
        raw: Text as typed by the user

    Returns:
        SearchFilter with the fields found in the input
    """
    values = {channel.value: _extract(pattern, raw) for channel, pattern in _PATTERNS.items()}

    if all(value is None for value in values.values()):
        trimmed = raw.strip()
        if not trimmed:
            return SearchFilter()
        quoted = _WHOLE_QUOTED.match(trimmed)
        if quoted and quoted.group(1).strip():
            return SearchFilter(song=quoted.group(1).strip())
        return SearchFilter(song=trimmed)

    return SearchFilter(**values)


parse = parse_search_query
