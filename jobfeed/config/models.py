"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from jobfeed.domain.models import FeedConfig


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class PostStatusOption(str, Enum):
    """Status given to newly imported listings."""

    PUBLISH = "publish"
    DRAFT = "draft"


class ImportSettings(BaseModel):
    """Settings consumed by the importer and normalizer."""

    import_limit: int = Field(
        50, ge=1, description="Maximum jobs imported per feed per run"
    )
    deduplication_enabled: bool = Field(
        True, description="Skip jobs matching an existing listing"
    )
    request_delay: float = Field(
        0, ge=0, le=300, description="Seconds to wait between feeds in a scheduled run"
    )
    description_min_length: int = Field(
        100, ge=0, description="Minimum plain-text description length (WhatJobs)"
    )
    default_post_status: PostStatusOption = Field(
        PostStatusOption.DRAFT.value, description="Status of imported listings"
    )
    expiry_days: int = Field(
        30, ge=1, le=365, description="Listing lifetime when the source gives no expiry"
    )

    model_config = {"use_enum_values": True}

    @field_validator("default_post_status", mode="before")
    @classmethod
    def fallback_to_draft(cls, v: Any) -> Any:
        """Unknown statuses fall back to draft."""
        if isinstance(v, PostStatusOption):
            return v.value
        if isinstance(v, str) and v.strip().lower() in ("publish", "draft"):
            return v.strip().lower()
        return PostStatusOption.DRAFT.value


class HttpConfig(BaseModel):
    """HTTP client settings shared by all providers."""

    timeout: int = Field(20, ge=5, le=300, description="Request timeout (seconds)")
    user_agent: str = Field(
        "JobFeedImporter/1.0",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        """Strip whitespace from user agent."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class ScheduleConfig(BaseModel):
    """Scheduled import settings."""

    interval_minutes: int = Field(
        60, ge=5, le=1440, description="Minutes between scheduled imports"
    )
    misfire_grace_seconds: int = Field(
        300, ge=1, description="How late a run may start and still execute"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class FeedDefinition(BaseModel):
    """A feed declared in the configuration file.

    ``provider`` may be omitted; it is then detected from ``url``.
    """

    name: str = Field(..., min_length=1, description="Human-readable feed name")
    provider: Optional[str] = Field(None, description="Provider id (whatjobs, generic_rss)")
    url: Optional[str] = Field(None, description="Feed URL")
    args: Dict[str, Any] = Field(default_factory=dict, description="Provider options")
    auth: Dict[str, str] = Field(default_factory=dict, repr=False, description="Credentials")
    active: bool = Field(True, description="Whether to import this feed")

    @field_validator("name")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from string fields."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    @field_validator("provider", "url")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def validate_target(self):
        """A feed needs either a URL or an explicit provider."""
        if not self.url and not self.provider:
            raise ValueError(f"Feed '{self.name}' needs a url or a provider")
        return self

    def to_feed_config(self, provider_id: str) -> FeedConfig:
        return FeedConfig(
            name=self.name,
            provider_id=provider_id,
            url=self.url,
            args=dict(self.args),
            auth=dict(self.auth),
            active=self.active,
        )


class AppConfig(BaseModel):
    """Root configuration object for the job feed importer."""

    feeds: List[FeedDefinition] = Field(
        default_factory=list, description="Feeds created in the feed store on start-up"
    )
    importer: ImportSettings = Field(
        default_factory=ImportSettings, description="Import settings"
    )
    http: HttpConfig = Field(default_factory=HttpConfig, description="HTTP client settings")
    schedule: ScheduleConfig = Field(
        default_factory=ScheduleConfig, description="Scheduled import settings"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @model_validator(mode="after")
    def validate_unique_feed_names(self):
        """Feed names identify seeded feeds, so they must be unique."""
        seen = set()
        for feed in self.feeds:
            key = feed.name.lower()
            if key in seen:
                raise ValueError(f"Duplicate feed name: '{feed.name}' appears multiple times")
            seen.add(key)
        return self

    def get_active_feeds(self) -> List[FeedDefinition]:
        """Get list of active feed definitions."""
        return [feed for feed in self.feeds if feed.active]
