"""Pydantic models for configuration validation."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_PLAYCOUNT_BASE_URL = "https://api.spotscraper.com/track"
DEFAULT_CATALOG_URL_TEMPLATE = "https://open.spotify.com/track/{id}"


class LogLevel(StrEnum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    NOTSET = "NOTSET"


class PlayCountConfig(BaseModel):
    """Play-count provider, credential pool, cache and retry settings."""

    base_url: str = DEFAULT_PLAYCOUNT_BASE_URL
    api_keys: list[str] = Field(default_factory=list)
    api_key_header: str = "x-api-key"
    daily_limit: int = Field(default=10, ge=1)
    reset_window_hours: float = Field(default=24, gt=0)
    cache_ttl_days: float = Field(default=7, gt=0)
    retry_attempts: int = Field(default=3, ge=1)
    backoff_base_seconds: float = Field(default=2.0, ge=0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    catalog_url_template: str = DEFAULT_CATALOG_URL_TEMPLATE

    @field_validator("api_keys", mode="before")
    @classmethod
    def split_api_keys(cls, v: Any) -> list[str]:
        """Accept a list or a comma-separated string (as produced by ${ENV} refs)."""
        if v is None:
            return []
        if isinstance(v, str):
            return [key.strip() for key in v.split(",") if key.strip()]
        if isinstance(v, (list, tuple)):
            keys: list[str] = []
            for i, item in enumerate(v):
                if not isinstance(item, str):
                    msg = f"api_keys[{i}] must be str, got {type(item).__name__}"
                    raise ValueError(msg)
                if stripped := item.strip():
                    keys.append(stripped)
            return keys
        msg = f"api_keys must be a string or a list, got {type(v).__name__}"
        raise ValueError(msg)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so ``{base_url}/{id}`` is well formed."""
        return v.rstrip("/")


class CatalogConfig(BaseModel):
    """Catalog (Spotify Web API) settings."""

    client_id: str = ""
    client_secret: str = ""
    market: str = "US"
    search_limit: int = Field(default=5, ge=1, le=50)
    api_base_url: str = "https://api.spotify.com/v1"
    token_url: str = "https://accounts.spotify.com/api/token"  # noqa: S105
    request_timeout_seconds: float = Field(default=30.0, gt=0)


class OverrideRuleConfig(BaseModel):
    """One alias/override entry for the parser and matcher."""

    triggers: list[str] = Field(min_length=1)
    title: str
    artist: str


class MatchingConfig(BaseModel):
    """Candidate matching settings."""

    overrides: list[OverrideRuleConfig] = Field(default_factory=list)


class ResolutionConfig(BaseModel):
    """Batch resolution settings."""

    concurrency: int = Field(default=4, ge=1)


class LogLevelsConfig(BaseModel):
    """Log levels configuration."""

    console: LogLevel = LogLevel.INFO
    main_file: LogLevel = LogLevel.DEBUG


class LoggingConfig(BaseModel):
    """Logging configuration."""

    logs_base_dir: str = "logs"
    main_log_file: str = "main/main.log"
    file_logging: bool = True
    levels: LogLevelsConfig = Field(default_factory=LogLevelsConfig)


class AppConfig(BaseModel):
    """Main application configuration model."""

    playcount: PlayCountConfig = Field(default_factory=PlayCountConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
