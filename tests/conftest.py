"""Pytest configuration and shared fixtures for songfinder tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

# =============================================================================
# Fixture Paths
# =============================================================================

FIXTURES_DIR = Path(__file__).parent / "fixtures"
MUSICBRAINZ_DIR = FIXTURES_DIR / "musicbrainz"


def load_fixture(fixture_name: str) -> dict[str, Any]:
    """Load a MusicBrainz JSON response fixture."""
    fixture_path = MUSICBRAINZ_DIR / fixture_name
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture not found: {fixture_path}")
    return json.loads(fixture_path.read_text(encoding="utf-8"))


# =============================================================================
# MusicBrainz Fixtures
# =============================================================================


@pytest.fixture
def recording_search() -> dict[str, Any]:
    return load_fixture("recording_search.json")


@pytest.fixture
def artist_search() -> dict[str, Any]:
    return load_fixture("artist_search.json")


@pytest.fixture
def release_search() -> dict[str, Any]:
    return load_fixture("release_search.json")


class RecordingHandler:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code: int = 200, json_body: Any = None, text: str | None = None):
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json_body or {})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def mb_handler() -> Callable[..., RecordingHandler]:
    """Factory for recording MockTransport handlers."""

    def _make(status_code: int = 200, json_body: Any = None, text: str | None = None):
        return RecordingHandler(status_code, json_body, text)

    return _make


@pytest.fixture
def mb_client_factory():
    """Create MusicBrainzClient instances backed by an httpx MockTransport."""
    from songfinder.musicbrainz import MusicBrainzClient

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any):
        return MusicBrainzClient(transport=httpx.MockTransport(handler), **kwargs)

    return _make
