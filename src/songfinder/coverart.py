"""
Cover art URL resolution.

Search results only carry release identifiers. A resolver turns such an
identifier into an image URL without touching the network; the image itself is
fetched later by whoever renders it.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

DEFAULT_HOST = "https://coverartarchive.org"
DEFAULT_SIZE = 250
DEFAULT_PLACEHOLDER = "/default-album-art.jpg"

# Thumbnail sizes served by the Cover Art Archive
SUPPORTED_SIZES = frozenset({250, 500, 1200})


@runtime_checkable
class CoverArtResolver(Protocol):
    """Maps a release identifier to a renderable image URL."""

    def resolve(self, release_id: str | None) -> str: ...


class CoverArtArchive:
    """
    Cover Art Archive URL builder.

    Produces `<host>/release/<release-id>/front-<size>` for a known release and
    the placeholder path otherwise, so callers always get a renderable value.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        size: int = DEFAULT_SIZE,
        placeholder: str = DEFAULT_PLACEHOLDER,
    ):
        if size not in SUPPORTED_SIZES:
            raise ValueError(f"Unsupported cover art size {size}; expected one of {sorted(SUPPORTED_SIZES)}")
        self.host = host.rstrip("/")
        self.size = size
        self.placeholder = placeholder

    def front_url(self, release_id: str) -> str:
        release_id = release_id.strip()
        if not release_id or "/" in release_id:
            raise ValueError(f"Invalid release id: {release_id!r}")
        return f"{self.host}/release/{release_id}/front-{self.size}"

    def resolve(self, release_id: str | None) -> str:
        if not isinstance(release_id, str) or not release_id:
            return self.placeholder
        try:
            return self.front_url(release_id)
        except ValueError as e:
            logger.debug(f"Falling back to placeholder cover art: {e}")
            return self.placeholder
