"""Configuration models (pydantic BaseModel)."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator


class AppSection(BaseModel):
    """Application identity."""

    name: str = "standhub"
    environment: str = "development"


class ApiSection(BaseModel):
    """Backend function endpoint settings."""

    base_url: str
    timeout_seconds: float = Field(default=10.0, gt=0)
    api_key: str = ""


class AuthSection(BaseModel):
    """Session refresh cadence.

    All durations are in seconds.
    """

    check_interval_seconds: float = Field(default=180.0, gt=0)
    refresh_threshold_seconds: float = Field(default=600.0, ge=0)
    min_refresh_interval_seconds: float = Field(default=300.0, ge=0)
    max_retries: int = Field(default=3, ge=0)
    initial_delay_seconds: float = Field(default=1.0, ge=0)


class StorageSection(BaseModel):
    """Token storage backend. No path means in-memory storage."""

    path: str | None = None


class LogSection(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class ObservabilitySection(BaseModel):
    """Observability settings."""

    log: LogSection = Field(default_factory=LogSection)


class AppConfig(BaseModel):
    """Complete configuration."""

    app: AppSection = Field(default_factory=AppSection)
    api: ApiSection
    auth: AuthSection = Field(default_factory=AuthSection)
    storage: StorageSection = Field(default_factory=StorageSection)
    observability: ObservabilitySection = Field(default_factory=ObservabilitySection)

    @model_validator(mode="after")
    def _strip_base_url(self) -> AppConfig:
        self.api.base_url = self.api.base_url.rstrip("/")
        return self

    @classmethod
    def default(cls, base_url: str) -> AppConfig:
        """Build a configuration with default settings for ``base_url``."""
        return cls(api=ApiSection(base_url=base_url))
