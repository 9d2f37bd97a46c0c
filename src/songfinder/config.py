from __future__ import annotations

import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from songfinder.coverart import SUPPORTED_SIZES


class MusicBrainzConfig(BaseModel):
    """MusicBrainz web service configuration."""

    base_url: str = Field(default="https://musicbrainz.org/ws/2")
    # MusicBrainz requires a descriptive User-Agent with contact information
    user_agent: str = Field(default="songfinder/0.1.0 ( https://github.com/songfinder/songfinder )")
    timeout_s: float = Field(default=30.0, gt=0)
    default_limit: int = Field(default=25, ge=1, le=100)


class CoverArtConfig(BaseModel):
    """Cover art URL construction."""

    host: str = Field(default="https://coverartarchive.org")
    size: int = Field(default=250)
    placeholder: str = Field(default="/default-album-art.jpg")

    @field_validator("size")
    @classmethod
    def check_size(cls, size: int) -> int:
        if size not in SUPPORTED_SIZES:
            raise ValueError(f"must be one of {sorted(SUPPORTED_SIZES)}")
        return size


class SuggestionsConfig(BaseModel):
    """Live suggestion behaviour."""

    quiet_window_ms: int = Field(default=300, ge=0)
    limit: int = Field(default=5, ge=1, le=100)

    @property
    def quiet_window_s(self) -> float:
        return self.quiet_window_ms / 1000


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING")  # DEBUG, INFO, WARNING, ERROR
    sanitize: bool = Field(default=True)


class Config(BaseModel):
    """
    Main configuration for songfinder.

    Loads from TOML file with optional environment variable overrides.
    """

    musicbrainz: MusicBrainzConfig = Field(default_factory=MusicBrainzConfig)
    cover_art: CoverArtConfig = Field(default_factory=CoverArtConfig)
    suggestions: SuggestionsConfig = Field(default_factory=SuggestionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """
        Load configuration from TOML file with environment variable overrides.

        Environment variables take precedence and follow the pattern:
        SONGFINDER_<SECTION>_<KEY> (e.g., SONGFINDER_SUGGESTIONS_QUIET_WINDOW_MS)
        """
        config_dict: dict[str, object] = {}

        if config_path and config_path.exists():
            config_dict = tomllib.loads(config_path.read_text())

        config_dict = cls._merge_env_overrides(config_dict)
        return cls.model_validate(config_dict)

    @staticmethod
    def _section(config_dict: dict[str, object], name: str) -> dict[str, object]:
        section = config_dict.setdefault(name, {})
        if not isinstance(section, dict):
            section = {}
            config_dict[name] = section
        return section

    @classmethod
    def _merge_env_overrides(cls, config_dict: dict[str, object]) -> dict[str, object]:
        """
        Merge environment variable overrides into config dictionary.

        Returns the dictionary with env vars applied, ready for Pydantic validation.
        """
        env_prefix = "SONGFINDER_"

        musicbrainz = cls._section(config_dict, "musicbrainz")
        if base_url := os.getenv(f"{env_prefix}MUSICBRAINZ_BASE_URL"):
            musicbrainz["base_url"] = base_url
        if user_agent := os.getenv(f"{env_prefix}MUSICBRAINZ_USER_AGENT"):
            musicbrainz["user_agent"] = user_agent
        if timeout := os.getenv(f"{env_prefix}MUSICBRAINZ_TIMEOUT_S"):
            musicbrainz["timeout_s"] = timeout
        if default_limit := os.getenv(f"{env_prefix}MUSICBRAINZ_DEFAULT_LIMIT"):
            musicbrainz["default_limit"] = default_limit

        cover_art = cls._section(config_dict, "cover_art")
        if host := os.getenv(f"{env_prefix}COVER_ART_HOST"):
            cover_art["host"] = host
        if size := os.getenv(f"{env_prefix}COVER_ART_SIZE"):
            cover_art["size"] = size
        if placeholder := os.getenv(f"{env_prefix}COVER_ART_PLACEHOLDER"):
            cover_art["placeholder"] = placeholder

        suggestions = cls._section(config_dict, "suggestions")
        if quiet_window := os.getenv(f"{env_prefix}SUGGESTIONS_QUIET_WINDOW_MS"):
            suggestions["quiet_window_ms"] = quiet_window
        if suggestion_limit := os.getenv(f"{env_prefix}SUGGESTIONS_LIMIT"):
            suggestions["limit"] = suggestion_limit

        logging_config = cls._section(config_dict, "logging")
        if log_level := os.getenv(f"{env_prefix}LOGGING_LEVEL"):
            logging_config["level"] = log_level
        if log_sanitize := os.getenv(f"{env_prefix}LOGGING_SANITIZE"):
            logging_config["sanitize"] = log_sanitize.lower() in ("true", "1", "yes")

        return config_dict


## Tests


def test_config_defaults():
    config = Config()
    assert config.musicbrainz.base_url == "https://musicbrainz.org/ws/2"
    assert config.musicbrainz.default_limit == 25
    assert config.suggestions.quiet_window_ms == 300
    assert config.suggestions.quiet_window_s == 0.3
    assert config.cover_art.placeholder == "/default-album-art.jpg"


def test_config_load_nonexistent_file():
    config = Config.load(Path("/nonexistent/config.toml"))
    assert config.suggestions.limit == 5
