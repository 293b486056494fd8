"""Feed import orchestration."""

import threading
import time
from typing import Callable, List, Optional
from uuid import uuid4

from jobfeed.config.models import HttpConfig, ImportSettings
from jobfeed.domain.models import CanonicalJobRecord, FeedConfig, RawJobRecord
from jobfeed.domain.stores import ContentStore, FeedStore
from jobfeed.logging import get_logger
from jobfeed.logging.context import log_context
from jobfeed.normalization.service import JobNormalizer
from jobfeed.providers.base import BaseProvider, FeedRequest, RequestContext
from jobfeed.providers.exceptions import ProviderConfigurationError, ProviderError
from jobfeed.providers.registry import ProviderRegistry
from jobfeed.utils.timestamps import utc_now

from .models import (
    ConnectionTestResult,
    FeedImportResult,
    ImportRunResult,
    JobImportResult,
    JobImportStatus,
)

logger = get_logger(__name__, component="importer")

SAMPLE_SIZE = 3


class FeedImporter:
    """
    Imports jobs from configured feeds into the content store.

    Each feed is fetched through the provider its provider_id names in the
    registry; every job is deduplicated, normalized and stored on its own.
    A failing job never stops its feed and a failing feed never stops the
    run: both are reported through the returned results.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        feed_store: FeedStore,
        content_store: ContentStore,
        settings: Optional[ImportSettings] = None,
        http: Optional[HttpConfig] = None,
        request_context: Optional[RequestContext] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the importer.

        Args:
            registry: Provider registry used to resolve feed providers
            feed_store: Source of active feeds for scheduled runs
            content_store: Destination for imported listings
            settings: Import settings (limit, deduplication, delay, ...)
            http: HTTP settings handed to providers
            request_context: Caller identity forwarded to providers that need one
            sleep: Function used for the inter-feed delay
        """
        self.registry = registry
        self.feed_store = feed_store
        self.content_store = content_store
        self.settings = settings or ImportSettings()
        self.http = http or HttpConfig()
        self.request_context = request_context
        self.normalizer = JobNormalizer(content_store, self.settings)
        self._sleep = sleep
        self._lock = threading.Lock()

    def import_single_job(
        self, raw: RawJobRecord, feed: FeedConfig, provider_id: Optional[str] = None
    ) -> JobImportResult:
        """
        Deduplicate, normalize and store one job.

        Args:
            raw: Job as returned by the provider
            feed: Feed the job came from
            provider_id: Provider that produced the job (defaults to the feed's)

        Returns:
            JobImportResult with status IMPORTED, DUPLICATE or FAILED
        """
        title = raw.display_title
        provider_id = provider_id or feed.provider_id

        try:
            if self.settings.deduplication_enabled and self.normalizer.is_duplicate(raw):
                logger.debug(
                    f"Skipping duplicate job: {title}",
                    extra={"event": "import.job.duplicate", "job_title": title},
                )
                return JobImportResult(status=JobImportStatus.DUPLICATE, title=title)

            record = self.normalizer.to_canonical(raw, feed)
            listing_id = self.content_store.create_listing(record)
            self._assign_terms(listing_id, record)

        except Exception as e:
            logger.error(
                f"Failed to import job '{title}': {e}",
                extra={
                    "event": "import.job.failed",
                    "feed_id": feed.id,
                    "provider_id": provider_id,
                    "job_title": title,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
                exc_info=True,
            )
            return JobImportResult(status=JobImportStatus.FAILED, title=title, error=str(e))

        logger.debug(
            f"Imported job: {title}",
            extra={
                "event": "import.job.imported",
                "job_title": title,
                "listing_id": listing_id,
                "post_status": record.status,
            },
        )
        return JobImportResult(status=JobImportStatus.IMPORTED, title=title, listing_id=listing_id)

    def import_feed(self, feed: FeedConfig) -> FeedImportResult:
        """
        Import one feed.

        Fetches the feed, keeps the first ``import_limit`` jobs in source
        order and imports each of them.

        Args:
            feed: Feed to import

        Returns:
            FeedImportResult; error_message is set when the feed could not be
            fetched, parsed or configured
        """
        started = time.monotonic()
        result = FeedImportResult(
            feed_id=feed.id, feed_name=feed.name, provider_id=feed.provider_id
        )

        with log_context(feed_id=feed.id, feed_name=feed.name, provider_id=feed.provider_id):
            logger.info(
                f"Importing feed: {feed.name}",
                extra={"event": "import.feed.started"},
            )

            try:
                provider = self._create_provider(feed)
                request = provider.prepare_request(feed, self.request_context)
                jobs = provider.fetch_and_parse(request)
            except ProviderError as e:
                result.error_message = str(e)
                result.duration_seconds = time.monotonic() - started
                logger.error(
                    f"Feed import failed: {feed.name}: {e}",
                    extra={
                        "event": "import.feed.failed",
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                )
                return result

            result.total_found = len(jobs)
            if not jobs:
                logger.info(
                    "Feed returned no jobs",
                    extra={"event": "import.feed.empty"},
                )

            for raw in jobs[: self.settings.import_limit]:
                result.record(self.import_single_job(raw, feed, provider.PROVIDER_ID or None))

            result.duration_seconds = time.monotonic() - started
            logger.info(
                f"Feed imported: {result.imported_count} of {result.total_found} jobs",
                extra={
                    "event": "import.feed.completed",
                    "total_found": result.total_found,
                    "attempted": result.attempted,
                    "imported": result.imported_count,
                    "duplicates": result.duplicate_count,
                    "failed": result.failed_count,
                    "duration_ms": int(result.duration_seconds * 1000),
                },
            )

        return result

    def run_scheduled_import(self) -> ImportRunResult:
        """
        Import every active feed, one after another.

        Only one run executes at a time; a call made while a run is in
        progress returns immediately with ``skipped=True``. Between feeds the
        importer waits ``request_delay`` seconds.

        Returns:
            ImportRunResult with per-feed results and totals
        """
        run_started_at = utc_now()
        run_id = uuid4().hex

        if not self._lock.acquire(blocking=False):
            with log_context(run_id=run_id):
                logger.warning(
                    "Import run skipped: previous run still in progress",
                    extra={"event": "import.run.skipped", "reason": "lock_held"},
                )
            return ImportRunResult(
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                skipped=True,
            )

        try:
            with log_context(run_id=run_id):
                feeds = self.feed_store.list_active_feeds()
                logger.info(
                    f"Import run started with {len(feeds)} active feeds",
                    extra={"event": "import.run.started", "active_feed_count": len(feeds)},
                )

                feed_results: List[FeedImportResult] = []
                for index, feed in enumerate(feeds):
                    if index > 0 and self.settings.request_delay > 0:
                        self._sleep(self.settings.request_delay)
                    feed_results.append(self._import_feed_isolated(feed))

                result = ImportRunResult(
                    run_started_at=run_started_at,
                    run_finished_at=utc_now(),
                    feed_results=feed_results,
                    feeds_processed=len(feeds),
                )

                logger.info(
                    "Import run completed",
                    extra={
                        "event": "import.run.completed",
                        "feeds_processed": result.feeds_processed,
                        "failed_feeds": result.failed_feeds,
                        "total_imported": result.total_imported,
                        "total_duplicates": result.total_duplicates,
                        "duration_ms": int(result.total_duration_seconds * 1000),
                    },
                )
                return result
        finally:
            self._lock.release()

    def test_feed(self, feed: FeedConfig) -> ConnectionTestResult:
        """
        Fetch a feed without importing anything.

        Returns:
            ConnectionTestResult with the job count, up to three sample
            titles and the masked request URL
        """
        request: Optional[FeedRequest] = None
        try:
            provider = self._create_provider(feed)
            request = provider.prepare_request(feed, self.request_context)
            jobs = provider.fetch_and_parse(request)
        except ProviderError as e:
            logger.warning(
                f"Connection test failed for {feed.name}: {e}",
                extra={
                    "event": "import.feed.test_failed",
                    "feed_id": feed.id,
                    "provider_id": feed.provider_id,
                    "error_type": type(e).__name__,
                },
            )
            return ConnectionTestResult(
                success=False,
                message=str(e),
                request_url=request.display_url() if request else None,
            )

        logger.info(
            f"Connection test succeeded for {feed.name}",
            extra={
                "event": "import.feed.test_succeeded",
                "feed_id": feed.id,
                "provider_id": feed.provider_id,
                "jobs_found": len(jobs),
            },
        )
        return ConnectionTestResult(
            success=True,
            message=f"Connection successful! Found {len(jobs)} jobs.",
            jobs_found=len(jobs),
            sample_titles=[job.display_title for job in jobs[:SAMPLE_SIZE]],
            request_url=request.display_url(),
        )

    def _import_feed_isolated(self, feed: FeedConfig) -> FeedImportResult:
        """Import a feed, turning any unexpected exception into a failed result."""
        started = time.monotonic()
        try:
            return self.import_feed(feed)
        except Exception as e:
            with log_context(feed_id=feed.id, feed_name=feed.name, provider_id=feed.provider_id):
                logger.error(
                    f"Unexpected error importing feed {feed.name}: {e}",
                    extra={
                        "event": "import.feed.failed",
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                    exc_info=True,
                )
            return FeedImportResult(
                feed_id=feed.id,
                feed_name=feed.name,
                provider_id=feed.provider_id,
                error_message=str(e),
                duration_seconds=time.monotonic() - started,
            )

    def _create_provider(self, feed: FeedConfig) -> BaseProvider:
        """Instantiate the feed's provider with the HTTP settings.

        Raises:
            ProviderConfigurationError: If the provider is unknown or cannot be built
        """
        descriptor = self.registry.resolve_by_id(feed.provider_id)
        if descriptor is None:
            known = ", ".join(d.id for d in self.registry.list_all())
            raise ProviderConfigurationError(
                f"Unknown provider: {feed.provider_id}. Registered providers: {known}"
            )

        try:
            return descriptor.create(
                timeout=self.http.timeout,
                user_agent=self.http.user_agent,
                description_min_length=self.settings.description_min_length,
            )
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderConfigurationError(
                f"Failed to create {descriptor.id} provider: {e}"
            ) from e

    def _assign_terms(self, listing_id: int, record: CanonicalJobRecord) -> None:
        for taxonomy, name in record.taxonomy_terms():
            term_id = self.content_store.get_or_create_term(name, taxonomy)
            self.content_store.assign_terms(listing_id, [term_id], taxonomy)
