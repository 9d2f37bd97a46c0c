"""
MusicBrainz search client for track candidates.

Builds Lucene-style queries from structured fields, issues one search request
per call and normalizes recording results into Candidates. Artist and release
searches are passed through as returned by the API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx

from songfinder.candidates import Candidate, normalize_recordings
from songfinder.coverart import CoverArtArchive, CoverArtResolver
from songfinder.query_parser import Channel, SearchFilter
from songfinder.safe_logging import redact_dict

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 25
SUGGESTION_LIMIT = 5


class SearchError(Exception):
    """Base class for search failures."""


class ProviderError(SearchError):
    """The provider answered with a non-success status or an unreadable body."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"MusicBrainz API error ({status_code}): {body}")


class TransportError(SearchError):
    """The request never produced a response (DNS, timeout, connection reset)."""


class SearchKind(StrEnum):
    """MusicBrainz search sub-resource."""

    RECORDING = "recording"
    RELEASE = "release"
    ARTIST = "artist"


# Suggestion channel -> sub-resource it completes against
CHANNEL_KINDS: dict[Channel, SearchKind] = {
    Channel.SONG: SearchKind.RECORDING,
    Channel.ARTIST: SearchKind.ARTIST,
    Channel.ALBUM: SearchKind.RELEASE,
}

# Response key holding the result list for each sub-resource
_RESULT_KEYS: dict[SearchKind, str] = {
    SearchKind.RECORDING: "recordings",
    SearchKind.RELEASE: "releases",
    SearchKind.ARTIST: "artists",
}


@dataclass(frozen=True)
class SearchRequest:
    """Input to MusicBrainzClient.search."""

    kind: SearchKind = SearchKind.RECORDING
    raw_query: str | None = None
    title: str | None = None
    artist: str | None = None
    album: str | None = None
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"limit must be positive, got {self.limit}")
        # Accept plain strings for kind
        object.__setattr__(self, "kind", SearchKind(self.kind))

    @classmethod
    def from_filter(
        cls,
        search_filter: SearchFilter,
        kind: SearchKind = SearchKind.RECORDING,
        limit: int = DEFAULT_LIMIT,
    ) -> SearchRequest:
        return cls(
            kind=kind,
            title=search_filter.song,
            artist=search_filter.artist,
            album=search_filter.album,
            limit=limit,
        )


def build_query(request: SearchRequest) -> str:
    """
    Build the Lucene query string for a request.

    A raw query is used as-is. Otherwise one field-scoped term per non-empty
    field is AND-joined, artist first, then recording title, then release
    title. No fields gives an empty query.
    """
    if request.raw_query:
        return request.raw_query

    query_parts = []
    if request.artist:
        query_parts.append(f'artist:"{request.artist}"')
    if request.title:
        query_parts.append(f'recording:"{request.title}"')
    if request.album:
        query_parts.append(f'release:"{request.album}"')
    return " AND ".join(query_parts)


class MusicBrainzClient:
    """
    MusicBrainz search client.

    One call to `search` is one GET against the search endpoint. There are no
    retries and no caching; failures surface as ProviderError or
    TransportError.
    """

    BASE_URL = "https://musicbrainz.org/ws/2"
    USER_AGENT = "songfinder/0.1.0 ( https://github.com/songfinder/songfinder )"

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout_s: float = 30.0,
        cover_art: CoverArtResolver | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize MusicBrainz client.

        Args:
            base_url: API root (default: public MusicBrainz web service)
            user_agent: Identifying User-Agent required by the MusicBrainz ToS
            timeout_s: Request timeout in seconds
            cover_art: Resolver for cover art URLs (default: Cover Art Archive)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.user_agent = user_agent or self.USER_AGENT
        self.cover_art = cover_art or CoverArtArchive()
        self._client = httpx.AsyncClient(
            timeout=timeout_s,
            headers={
                "Accept": "application/json",
                "User-Agent": self.user_agent,
            },
            transport=transport,
        )
        logger.debug(f"MusicBrainz client for {self.base_url}, headers={redact_dict(self._client.headers)}")

    async def _request(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        """Make a request to the MusicBrainz API and decode the JSON body."""
        params["fmt"] = "json"
        url = f"{self.base_url}/{endpoint}"

        logger.debug(f"GET {url} query={params.get('query')!r} limit={params.get('limit')}")
        try:
            response = await self._client.get(url, params=params)
        except httpx.TransportError as e:
            raise TransportError(f"MusicBrainz request failed: {e}") from e

        if not response.is_success:
            raise ProviderError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(response.status_code, response.text) from e

        if not isinstance(data, dict):
            raise ProviderError(response.status_code, response.text)
        return data

    async def search(self, request: SearchRequest) -> list[Candidate] | list[dict[str, Any]]:
        """
        Search MusicBrainz.

        Args:
            request: What to search for and which sub-resource to query

        Returns:
            Candidates for recording searches; the provider's raw artist or
            release objects for the other kinds

        Raises:
            ProviderError: Non-success HTTP status
            TransportError: Network-level failure
        """
        query = build_query(request)
        params = {"query": query, "limit": str(request.limit)}
        data = await self._request(request.kind.value, params)

        results = data.get(_RESULT_KEYS[request.kind]) or []
        logger.info(f"MusicBrainz {request.kind} search {query!r}: {len(results)} results")

        if request.kind is SearchKind.RECORDING:
            return normalize_recordings(results, self.cover_art)
        return list(results)

    async def search_recordings(self, request: SearchRequest) -> list[Candidate]:
        """Recording search regardless of the request's kind."""
        if request.kind is not SearchKind.RECORDING:
            request = SearchRequest(
                raw_query=request.raw_query,
                title=request.title,
                artist=request.artist,
                album=request.album,
                limit=request.limit,
            )
        results = await self.search(request)
        return [item for item in results if isinstance(item, Candidate)]

    async def search_filter(
        self, search_filter: SearchFilter, limit: int = DEFAULT_LIMIT
    ) -> list[Candidate]:
        """Recording search for a parsed search box query."""
        return await self.search_recordings(SearchRequest.from_filter(search_filter, limit=limit))

    async def suggest(
        self, channel: Channel | str, value: str, limit: int = SUGGESTION_LIMIT
    ) -> list[Candidate] | list[dict[str, Any]]:
        """
        Fetch live suggestions for one input field.

        The field value is sent as the raw query against the channel's
        sub-resource. Signature matches SuggestionDebouncer operations.
        """
        kind = CHANNEL_KINDS[Channel(channel)]
        return await self.search(SearchRequest(kind=kind, raw_query=value, limit=limit))

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> MusicBrainzClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
