__all__ = (
    "app",
    "Config",
    # Query parsing
    "Channel",
    "SearchFilter",
    "parse_search_query",
    # Search
    "MusicBrainzClient",
    "SearchKind",
    "SearchRequest",
    "SearchError",
    "ProviderError",
    "TransportError",
    "build_query",
    # Normalization
    "Candidate",
    "CoverArtArchive",
    "CoverArtResolver",
    "normalize_recording",
    "normalize_recordings",
    # Suggestions
    "DebounceState",
    "SuggestionDebouncer",
    # Records
    "SongRecord",
)

from songfinder.candidates import Candidate, normalize_recording, normalize_recordings
from songfinder.cli import app
from songfinder.config import Config
from songfinder.coverart import CoverArtArchive, CoverArtResolver
from songfinder.debounce import DebounceState, SuggestionDebouncer
from songfinder.musicbrainz import (
    MusicBrainzClient,
    ProviderError,
    SearchError,
    SearchKind,
    SearchRequest,
    TransportError,
    build_query,
)
from songfinder.query_parser import Channel, SearchFilter, parse_search_query
from songfinder.records import SongRecord
