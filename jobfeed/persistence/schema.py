"""Database schema definition and ORM models.

Tables:
- feeds: configured feeds (args and auth stored as JSON)
- listings: imported job listings
- terms: taxonomy terms, unique per (name, taxonomy)
- listing_terms: listing <-> term assignments

Datetimes are stored as ISO 8601 UTC strings with a 'Z' suffix; expiry dates
as ISO dates.
"""

from datetime import date

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from jobfeed.domain.models import CanonicalJobRecord, FeedConfig
from jobfeed.logging import get_logger
from jobfeed.utils.timestamps import format_timestamp, parse_timestamp

logger = get_logger(__name__, component="database")

Base = declarative_base()


class FeedModel(Base):
    """ORM model for the feeds table."""

    __tablename__ = "feeds"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    provider_id = Column(String(50), nullable=False)
    url = Column(Text, nullable=True)
    args = Column(JSON, nullable=False, default=dict)
    auth = Column(JSON, nullable=False, default=dict)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_feeds_active", "active"),)

    def to_domain(self) -> FeedConfig:
        return FeedConfig(
            id=self.id,
            name=self.name,
            provider_id=self.provider_id,
            url=self.url,
            args=dict(self.args or {}),
            auth=dict(self.auth or {}),
            active=bool(self.active),
            created_at=parse_timestamp(self.created_at),
            updated_at=parse_timestamp(self.updated_at),
        )

    def apply(self, feed: FeedConfig) -> None:
        """Copy the editable fields of a feed onto this row."""
        self.name = feed.name
        self.provider_id = feed.provider_id
        self.url = feed.url
        self.args = dict(feed.args)
        self.auth = dict(feed.auth)
        self.active = feed.active


class ListingModel(Base):
    """ORM model for the listings table."""

    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String(255), nullable=False, default="")
    company = Column(String(255), nullable=False, default="")
    application_url = Column(Text, nullable=False, default="")
    expiry_date = Column(String(10), nullable=False)
    salary = Column(String(255), nullable=False, default="")
    is_remote = Column(Boolean, nullable=False, default=False)
    job_type = Column(String(100), nullable=True)
    category = Column(String(255), nullable=True)
    region = Column(String(255), nullable=True)
    company_logo_url = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="draft")

    # Provenance; not a foreign key so listings outlive deleted feeds
    feed_id = Column(Integer, nullable=True)
    provider_id = Column(String(50), nullable=False)
    imported_at = Column(String(50), nullable=False)
    posted_at = Column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_listings_title", "title"),
        Index("idx_listings_feed", "feed_id"),
    )

    def to_domain(self) -> CanonicalJobRecord:
        return CanonicalJobRecord(
            title=self.title,
            description=self.description,
            location=self.location,
            company=self.company,
            application_url=self.application_url,
            expiry_date=date.fromisoformat(self.expiry_date),
            salary=self.salary,
            is_remote=bool(self.is_remote),
            job_type=self.job_type,
            category=self.category,
            region=self.region,
            company_logo_url=self.company_logo_url,
            status=self.status,
            feed_id=self.feed_id,
            provider_id=self.provider_id,
            imported_at=parse_timestamp(self.imported_at),
            posted_at=parse_timestamp(self.posted_at),
        )

    @classmethod
    def from_domain(cls, record: CanonicalJobRecord) -> "ListingModel":
        return cls(
            title=record.title,
            description=record.description,
            location=record.location,
            company=record.company,
            application_url=record.application_url,
            expiry_date=record.expiry_date.isoformat(),
            salary=record.salary,
            is_remote=record.is_remote,
            job_type=record.job_type,
            category=record.category,
            region=record.region,
            company_logo_url=record.company_logo_url,
            status=record.status,
            feed_id=record.feed_id,
            provider_id=record.provider_id,
            imported_at=format_timestamp(record.imported_at),
            posted_at=format_timestamp(record.posted_at),
        )


class TermModel(Base):
    """ORM model for the terms table."""

    __tablename__ = "terms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    taxonomy = Column(String(50), nullable=False)

    __table_args__ = (UniqueConstraint("name", "taxonomy", name="uq_terms_name_taxonomy"),)


class ListingTermModel(Base):
    """ORM model for listing/term assignments."""

    __tablename__ = "listing_terms"

    listing_id = Column(
        Integer, ForeignKey("listings.id", ondelete="CASCADE"), primary_key=True
    )
    term_id = Column(Integer, ForeignKey("terms.id", ondelete="CASCADE"), primary_key=True)
    taxonomy = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_listing_terms_taxonomy", "listing_id", "taxonomy"),)


def create_schema(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine)
    logger.debug(
        "Database schema ready",
        extra={"event": "database.schema.ready", "tables": sorted(Base.metadata.tables)},
    )
