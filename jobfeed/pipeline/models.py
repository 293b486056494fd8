"""Result types returned by the importer.

Failures are reported through these results instead of exceptions: a failed
job yields a FAILED JobImportResult, a failed feed a FeedImportResult with
error_message set, and a run always returns an ImportRunResult.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class JobImportStatus(str, Enum):
    """Outcome of importing one job."""

    IMPORTED = "imported"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass
class JobImportResult:
    """
    Outcome of a single job.

    Attributes:
        status: IMPORTED, DUPLICATE or FAILED
        title: Job title ("Unknown" when the source had none)
        listing_id: Id of the stored listing (IMPORTED only)
        error: Failure reason (FAILED only)
    """

    status: JobImportStatus
    title: str
    listing_id: Optional[int] = None
    error: Optional[str] = None

    @property
    def imported(self) -> bool:
        return self.status is JobImportStatus.IMPORTED


@dataclass
class FeedImportResult:
    """
    Outcome of importing one feed.

    Attributes:
        feed_id: Feed store id
        feed_name: Feed name
        provider_id: Provider used
        total_found: Jobs returned by the provider (after provider filtering)
        attempted: Jobs processed (total_found capped at the import limit)
        imported_count: Listings created
        duplicate_count: Jobs skipped as duplicates
        errors: Per-job failure messages, in processing order
        error_message: Feed-level failure (fetch, parse, configuration); None on success
        duration_seconds: Time spent on the feed
    """

    feed_id: Optional[int]
    feed_name: str
    provider_id: str
    total_found: int = 0
    attempted: int = 0
    imported_count: int = 0
    duplicate_count: int = 0
    errors: List[str] = field(default_factory=list)
    error_message: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        """True when the feed was fetched and parsed, even if some jobs failed."""
        return self.error_message is None

    @property
    def failed_count(self) -> int:
        return len(self.errors)

    def record(self, job_result: JobImportResult) -> None:
        """Fold one job outcome into the feed counters."""
        self.attempted += 1
        if job_result.status is JobImportStatus.IMPORTED:
            self.imported_count += 1
        elif job_result.status is JobImportStatus.DUPLICATE:
            self.duplicate_count += 1
        else:
            self.errors.append(f"{job_result.title}: {job_result.error}")


@dataclass
class ImportRunResult:
    """
    Aggregate results from a scheduled import run.

    Attributes:
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        feed_results: Per-feed results in processing order
        feeds_processed: Number of active feeds the run covered
        total_imported: Listings created across all feeds
        total_duplicates: Duplicates skipped across all feeds
        failed_feeds: Feeds that ended with a feed-level error
        total_duration_seconds: Total time for the entire run
        skipped: Whether the run was skipped because another run held the lock
    """

    run_started_at: datetime
    run_finished_at: datetime
    feed_results: List[FeedImportResult] = field(default_factory=list)
    feeds_processed: int = 0
    total_imported: int = 0
    total_duplicates: int = 0
    failed_feeds: int = 0
    total_duration_seconds: float = 0.0
    skipped: bool = False

    def __post_init__(self):
        """Aggregate totals from feed results and compute the duration."""
        if self.feed_results:
            self.total_imported = sum(r.imported_count for r in self.feed_results)
            self.total_duplicates = sum(r.duplicate_count for r in self.feed_results)
            self.failed_feeds = sum(1 for r in self.feed_results if not r.succeeded)

        if self.total_duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.total_duration_seconds = delta.total_seconds()


@dataclass
class ConnectionTestResult:
    """
    Result of a feed connection test.

    Attributes:
        success: Whether the feed was fetched and parsed
        message: Human-readable summary
        jobs_found: Jobs the provider returned
        sample_titles: Up to three job titles
        request_url: Request URL with caller identity and credentials masked
    """

    success: bool
    message: str
    jobs_found: int = 0
    sample_titles: List[str] = field(default_factory=list)
    request_url: Optional[str] = None
