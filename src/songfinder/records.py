"""
Song records derived from selected candidates.

The song collection itself is owned by a separate storage layer; this module
only builds the record that gets appended to it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

from songfinder.candidates import Candidate

YOUTUBE_SEARCH_URL = "https://www.youtube.com/results?search_query="


def youtube_search_url(title: str, artist: str) -> str:
    """Playback link: a YouTube search for "<title> <artist>"."""
    return YOUTUBE_SEARCH_URL + quote(f"{title} {artist}", safe="!~*'()")


def month_added_at(year: int, month: int) -> datetime:
    """Timestamp used when filing a song under a given month (1st, 12:00 UTC)."""
    return datetime(year, month, 1, 12, 0, 0, tzinfo=UTC)


def parse_month(value: str) -> datetime:
    """Parse "YYYY-MM" into the month's filing timestamp."""
    try:
        year_str, month_str = value.split("-")
        return month_added_at(int(year_str), int(month_str))
    except ValueError as e:
        raise ValueError(f"Invalid month {value!r}, expected YYYY-MM") from e


def _isoformat(moment: datetime) -> str:
    # Collection stores JavaScript-style ISO strings: millisecond precision, Z suffix
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class SongRecord:
    """One entry of the song collection."""

    id: str
    title: str
    artist: str
    album: str
    album_art: str
    youtube_url: str
    added_at: str

    @classmethod
    def from_candidate(cls, candidate: Candidate, added_at: datetime | None = None) -> SongRecord:
        """
        Hydrate a record from a selected candidate.

        Args:
            candidate: Normalized search result the user picked
            added_at: Filing timestamp (default: now)
        """
        moment = added_at or datetime.now(UTC)
        return cls(
            id=str(time.time_ns() // 1_000_000),
            title=candidate.title,
            artist=candidate.artist_name,
            album=candidate.album_title,
            album_art=candidate.cover_art_url,
            youtube_url=youtube_search_url(candidate.title, candidate.artist_name),
            added_at=_isoformat(moment),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the collection's field names."""
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "albumArt": self.album_art,
            "youtubeUrl": self.youtube_url,
            "addedAt": self.added_at,
        }
