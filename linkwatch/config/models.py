"""Pydantic models describing linkwatch runtime configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

DAY_IN_SECONDS = 24 * 60 * 60
YEAR_IN_SECONDS = 365 * DAY_IN_SECONDS

DEFAULT_PREVIEW_PROPERTIES = ["image", "site-name", "title", "description", "locale"]


class MonitorConfig(BaseModel):
    """Settings read by the queue, scheduler, fetcher and extractor."""

    home_url: str = "http://localhost/"
    database_path: Path = Field(default=Path("linkwatch.db"))
    cache_duration: int = Field(
        default=YEAR_IN_SECONDS,
        description="Seconds a resolved entry stays cached, clamped to [1 day, 1 year].",
    )
    error_ttl: int | None = Field(
        default=None,
        description="Seconds an entry resolved to `error` stays cached; defaults to cache_duration.",
    )
    sweep_interval: float = 90.0
    request_timeout: float = 15.0
    preview_properties: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PREVIEW_PROPERTIES)
    )
    fetch_workers: int = 8
    verify_ssl: bool = True
    user_agent: str | None = None

    @field_validator("cache_duration", mode="before")
    @classmethod
    def _clamp_cache_duration(cls, value: Any) -> int:
        if value in (None, ""):
            return YEAR_IN_SECONDS
        seconds = abs(int(value))
        return min(max(seconds, DAY_IN_SECONDS), YEAR_IN_SECONDS)

    @field_validator("database_path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("preview_properties", mode="before")
    @classmethod
    def _normalise_properties(cls, value: Any) -> list[str]:
        if value in (None, ""):
            return list(DEFAULT_PREVIEW_PROPERTIES)
        if isinstance(value, str):
            value = value.split(",")
        return [str(item).strip().lower().replace("_", "-") for item in value if str(item).strip()]

    @field_validator("home_url")
    @classmethod
    def _validate_home_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("home_url must be an absolute http(s) URL")
        return value

    @model_validator(mode="after")
    def _validate_positive(self) -> "MonitorConfig":
        if self.sweep_interval <= 0:
            raise ValueError("sweep_interval must be > 0")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        if self.fetch_workers < 1:
            raise ValueError("fetch_workers must be >= 1")
        if self.error_ttl is not None and self.error_ttl < 1:
            raise ValueError("error_ttl must be >= 1")
        return self

    @property
    def effective_error_ttl(self) -> int:
        return self.error_ttl if self.error_ttl is not None else self.cache_duration

    def resolved_database_path(self, base_dir: Path) -> Path:
        """Return the cache database path relative to the project data directory."""

        if not self.database_path.is_absolute():
            return (base_dir / self.database_path).resolve()
        return self.database_path


__all__ = [
    "DAY_IN_SECONDS",
    "DEFAULT_PREVIEW_PROPERTIES",
    "MonitorConfig",
    "YEAR_IN_SECONDS",
]
