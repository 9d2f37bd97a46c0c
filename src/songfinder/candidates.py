"""
Candidate normalization for recording search results.

MusicBrainz recording search returns nested artist credits and release lists,
any of which may be missing. Normalization flattens one raw recording into a
Candidate, substituting sentinels for absent data instead of failing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from songfinder.coverart import CoverArtResolver

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"


@dataclass(frozen=True)
class Candidate:
    """Provider-agnostic search result ready for display or selection."""

    id: str
    title: str
    artist_name: str
    album_title: str
    cover_art_url: str
    release_id: str | None = None
    artist_id: str | None = None
    length_ms: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "artist_name": self.artist_name,
            "album_title": self.album_title,
            "cover_art_url": self.cover_art_url,
            "release_id": self.release_id,
            "artist_id": self.artist_id,
            "length_ms": self.length_ms,
        }


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _first(items: Any) -> dict[str, Any] | None:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def first_artist_credit(raw: dict[str, Any]) -> tuple[str | None, str | None]:
    """
    Extract (artist_id, credited_name) from the first artist credit.

    The credited name wins over the artist's canonical name, matching how the
    recording is displayed on MusicBrainz.
    """
    credit = _first(raw.get("artist-credit"))
    if credit is None:
        return None, None

    artist = credit.get("artist") if isinstance(credit.get("artist"), dict) else {}
    name = _text(credit.get("name")) or _text(artist.get("name"))
    return _text(artist.get("id")), name or None


def normalize_recording(raw: dict[str, Any], cover_art: CoverArtResolver) -> Candidate:
    """
    Normalize one raw recording search result.

    Args:
        raw: Recording dict from the `recordings` array of a search response
        cover_art: Resolver producing the cover art URL for the first release

    Returns:
        Candidate with sentinels for missing artist/album data
    """
    artist_id, artist_name = first_artist_credit(raw)

    release = _first(raw.get("releases"))
    release_id = _text(release.get("id")) if release else None
    album_title = _text(release.get("title")) if release else None

    length = raw.get("length")

    return Candidate(
        id=str(raw.get("id") or ""),
        title=_text(raw.get("title")) or "",
        artist_name=artist_name or UNKNOWN_ARTIST,
        album_title=album_title or UNKNOWN_ALBUM,
        cover_art_url=cover_art.resolve(release_id),
        release_id=release_id,
        artist_id=artist_id,
        length_ms=length if isinstance(length, int) and not isinstance(length, bool) else None,
    )


def normalize_recordings(
    raws: Iterable[dict[str, Any]], cover_art: CoverArtResolver
) -> list[Candidate]:
    """Normalize a recording list, skipping entries that are not objects."""
    return [normalize_recording(raw, cover_art) for raw in raws if isinstance(raw, dict)]
