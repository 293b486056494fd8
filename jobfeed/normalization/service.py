"""Job normalization service: deduplication and RawJobRecord -> CanonicalJobRecord.

This module implements the normalization logic that:
1. Detects jobs already present in the content store
2. Sanitizes descriptions and plain-text fields
3. Derives expiry date, remote flag and job type label
4. Resolves the taxonomy terms a listing is filed under
"""

from datetime import date, datetime, timedelta
from typing import Callable, Optional

from jobfeed.config.models import ImportSettings
from jobfeed.domain.models import CanonicalJobRecord, FeedConfig, RawJobRecord
from jobfeed.domain.stores import ContentStore
from jobfeed.logging import get_logger
from jobfeed.utils.timestamps import ensure_utc, parse_datetime, utc_now

from .formatting import format_description, sanitize_text, sanitize_url

logger = get_logger(__name__, component="normalization")

DEFAULT_EXPIRY_DAYS = 30

JOB_TYPE_LABELS = {
    "full time": "Tempo Integral",
    "full-time": "Tempo Integral",
    "part time": "Meio Período",
    "part-time": "Meio Período",
    "contract": "Contrato",
    "contractor": "Contrato",
    "freelance": "Freelance",
    "temporary": "Temporário",
    "internship": "Estágio",
    "intern": "Estágio",
}

REMOTE_KEYWORDS = ("remoto", "remote", "home office", "trabalho remoto", "teletrabalho")


def normalize_job_type(job_type: Optional[str]) -> Optional[str]:
    """Map a source job type to its localized label.

    Known synonyms map to a fixed label; anything else is returned
    title-cased. Blank input yields None.

    Example:
        >>> normalize_job_type("Full-Time")
        'Tempo Integral'
        >>> normalize_job_type("seasonal")
        'Seasonal'
    """
    if not job_type or not job_type.strip():
        return None
    key = job_type.strip().lower()
    return JOB_TYPE_LABELS.get(key, job_type.strip().title())


def is_remote_job(title: str, description: str, location: str) -> bool:
    """True if any remote keyword appears in title, description or location."""
    haystack = f"{title} {description} {location}".lower()
    return any(keyword in haystack for keyword in REMOTE_KEYWORDS)


def calculate_expiry_date(
    expires: Optional[str], imported_at: datetime, default_days: int = DEFAULT_EXPIRY_DAYS
) -> date:
    """Expiry from the source's date when parseable, else import time + default_days."""
    parsed = parse_datetime(expires) if expires else None
    if parsed is not None:
        return parsed.date()
    if expires:
        logger.debug(
            "Unparseable expiry date, using default",
            extra={"event": "normalization.expiry.unparseable", "expires": expires},
        )
    return (ensure_utc(imported_at) + timedelta(days=default_days)).date()


class JobNormalizer:
    """Converts provider records into listings and checks for duplicates.

    Args:
        content_store: Store queried for existing listings
        settings: Import settings (post status, expiry default)
        clock: Source of the current UTC time
    """

    def __init__(
        self,
        content_store: ContentStore,
        settings: Optional[ImportSettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.content_store = content_store
        self.settings = settings or ImportSettings()
        self.clock = clock

    def is_duplicate(self, raw: RawJobRecord) -> bool:
        """Check the content store for a listing with the same title, company and location.

        An empty company or location acts as a wildcard and matches any
        stored value.
        """
        title = sanitize_text(raw.title)
        company = sanitize_text(raw.company) or None
        location = sanitize_text(raw.location) or None

        existing_id = self.content_store.find_by_title_company_location(title, company, location)
        if existing_id is not None:
            logger.debug(
                "Duplicate job found",
                extra={
                    "event": "normalization.duplicate",
                    "job_title": title,
                    "listing_id": existing_id,
                },
            )
            return True
        return False

    def to_canonical(
        self,
        raw: RawJobRecord,
        feed: FeedConfig,
        imported_at: Optional[datetime] = None,
    ) -> CanonicalJobRecord:
        """Normalize a raw record for storage.

        Args:
            raw: Provider output
            feed: Feed the record came from (provenance and default taxonomy)
            imported_at: Import timestamp; defaults to the clock

        Returns:
            CanonicalJobRecord

        Raises:
            pydantic.ValidationError: If the record has no usable title
        """
        imported_at = ensure_utc(imported_at) if imported_at else self.clock()

        title = sanitize_text(raw.title)
        location = sanitize_text(raw.location)
        description = format_description(raw.description or raw.snippet)

        region = sanitize_text(str(feed.arg("default_region", ""))) or sanitize_text(raw.state)
        category = sanitize_text(str(feed.arg("default_category", "")))

        company_logo_url = ""
        if feed.provider_id == "whatjobs":
            company_logo_url = sanitize_url(raw.logo)

        return CanonicalJobRecord(
            title=title,
            description=description,
            location=location,
            company=sanitize_text(raw.company),
            application_url=sanitize_url(raw.url),
            expiry_date=calculate_expiry_date(
                raw.expires, imported_at, self.settings.expiry_days
            ),
            salary=sanitize_text(raw.salary),
            is_remote=is_remote_job(raw.title, raw.description, raw.location),
            job_type=normalize_job_type(raw.job_type),
            category=category or None,
            region=region or None,
            company_logo_url=company_logo_url,
            status=self.settings.default_post_status,
            feed_id=feed.id,
            provider_id=feed.provider_id,
            imported_at=imported_at,
            posted_at=raw.posted_at,
        )
