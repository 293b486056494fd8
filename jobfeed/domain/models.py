"""Core domain models for feeds and job records.

This module defines the data structures used throughout the application:
- FeedConfig: a configured feed bound to one provider
- RawJobRecord: provider output before normalization
- CanonicalJobRecord: normalized listing ready to be stored
- Taxonomy: the classification axes a listing is filed under
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from jobfeed.utils.timestamps import ensure_utc

PostStatus = Literal["publish", "draft"]


class Taxonomy(str, Enum):
    """Classification axes assigned to stored listings."""

    CATEGORY = "job_listing_category"
    TYPE = "job_listing_type"
    REGION = "job_listing_region"


class FeedConfig(BaseModel):
    """A configured feed.

    ``args`` holds provider-specific options (keyword, location, limit,
    default_category, default_region, description_min_length, ...).
    ``auth`` holds credentials and is kept out of repr() so it never ends up
    in a log line by accident.
    """

    id: Optional[int] = Field(None, description="Feed store identifier")
    name: str = Field(..., description="Human-readable feed name")
    provider_id: str = Field(..., description="Registry id of the provider")
    url: Optional[str] = Field(None, description="Feed URL (required for RSS feeds)")
    args: Dict[str, Any] = Field(default_factory=dict, description="Provider options")
    auth: Dict[str, str] = Field(default_factory=dict, repr=False, description="Credentials")
    active: bool = Field(True, description="Whether scheduled runs import this feed")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True}

    @field_validator("name", "provider_id")
    @classmethod
    def strip_required(cls, v: str) -> str:
        """Strip whitespace and reject empty values."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty or whitespace-only")
        return v.strip()

    @field_validator("url")
    @classmethod
    def strip_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @field_validator("created_at", "updated_at")
    @classmethod
    def utc_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    def arg(self, key: str, default: Any = None) -> Any:
        """Return a provider option, treating blank strings as missing."""
        value = self.args.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        return value


class RawJobRecord(BaseModel):
    """Job data as a provider extracted it, before normalization.

    Every text field defaults to an empty string; providers only fill in
    what their source carries.
    """

    title: str = ""
    description: str = ""
    snippet: str = ""
    company: str = ""
    location: str = ""
    url: str = ""
    job_type: str = ""
    salary: str = ""
    postcode: str = ""
    logo: str = ""
    age: str = ""
    age_days: int = 999
    site: str = ""
    category: str = ""
    subcategory: str = ""
    country: str = ""
    state: str = ""
    city: str = ""
    date: str = ""
    expires: str = ""
    posted_at: Optional[datetime] = None

    model_config = {"str_strip_whitespace": True}

    @field_validator("posted_at")
    @classmethod
    def utc_posted_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def display_title(self) -> str:
        """Title used in log lines; ``"Unknown"`` when missing."""
        return self.title or "Unknown"


class CanonicalJobRecord(BaseModel):
    """Normalized listing as written to the content store."""

    title: str = Field(..., description="Listing title")
    description: str = Field("", description="Sanitized HTML description")
    location: str = ""
    company: str = ""
    application_url: str = ""
    expiry_date: date = Field(..., description="Date after which the listing expires")
    salary: str = ""
    is_remote: bool = False
    job_type: Optional[str] = Field(None, description="Localized job type label")
    category: Optional[str] = None
    region: Optional[str] = None
    company_logo_url: str = ""
    status: PostStatus = "draft"
    feed_id: Optional[int] = None
    provider_id: str = Field(..., description="Provider that produced the record")
    imported_at: datetime = Field(..., description="Import time (UTC)")
    posted_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Listing title cannot be empty")
        return v.strip()

    @field_validator("imported_at", "posted_at")
    @classmethod
    def utc_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    def taxonomy_terms(self) -> List[Tuple[Taxonomy, str]]:
        """Return the (taxonomy, term name) pairs this listing is filed under."""
        terms: List[Tuple[Taxonomy, str]] = []
        if self.category:
            terms.append((Taxonomy.CATEGORY, self.category))
        if self.job_type:
            terms.append((Taxonomy.TYPE, self.job_type))
        if self.region:
            terms.append((Taxonomy.REGION, self.region))
        return terms
