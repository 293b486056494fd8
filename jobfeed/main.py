"""Main entry point for the job feed importer service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

from jobfeed.config.environment import EnvironmentConfig
from jobfeed.config.exceptions import ConfigurationError
from jobfeed.config.loader import load_config
from jobfeed.config.models import AppConfig
from jobfeed.logging import get_logger
from jobfeed.logging.config import configure_logging
from jobfeed.persistence.database import close_database, init_database
from jobfeed.persistence.stores import SqlContentStore, SqlFeedStore
from jobfeed.pipeline import FeedImporter
from jobfeed.providers.base import RequestContext
from jobfeed.providers.registry import ProviderRegistry, create_default_registry
from jobfeed.scheduler import ImportScheduler

logger = get_logger(__name__, component="cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="job-feed-importer",
        description="Job Feed Importer - imports job listings from XML APIs and RSS feeds",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--manual-run",
        action="store_true",
        help="Import all active feeds once and exit",
    )
    mode.add_argument(
        "--feed",
        type=int,
        metavar="ID",
        help="Import a single feed by id and exit",
    )
    mode.add_argument(
        "--test-feed",
        type=int,
        metavar="ID",
        help="Fetch a feed without importing and report what it returns",
    )
    mode.add_argument(
        "--list-providers",
        action="store_true",
        help="List registered providers and exit",
    )
    return parser


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def seed_feeds(
    app_config: AppConfig, feed_store: SqlFeedStore, registry: ProviderRegistry
) -> int:
    """
    Create configured feeds that are not in the feed store yet.

    Feeds are matched by name; existing feeds are left untouched. A feed
    without an explicit provider gets the provider detected from its URL.

    Returns:
        Number of feeds created

    Raises:
        ConfigurationError: If a feed names an unknown provider
    """
    created = 0
    for definition in app_config.feeds:
        if feed_store.get_by_name(definition.name) is not None:
            continue

        provider_id = definition.provider or registry.resolve_by_url(definition.url)
        if provider_id not in registry:
            known = ", ".join(d.id for d in registry.list_all())
            raise ConfigurationError(
                f"Feed '{definition.name}' uses unknown provider '{provider_id}'",
                suggestions=[f"Use one of: {known}", "Or omit provider to detect it from the url"],
            )

        feed_id = feed_store.create(definition.to_feed_config(provider_id))
        created += 1
        logger.info(
            f"Created feed '{definition.name}'",
            extra={"event": "feeds.seeded", "feed_id": feed_id, "provider_id": provider_id},
        )
    return created


def build_request_context(env_config: EnvironmentConfig) -> Optional[RequestContext]:
    """Caller identity from CLIENT_IP / CLIENT_USER_AGENT, or None when unset."""
    if not env_config.client_ip and not env_config.client_user_agent:
        return None
    return RequestContext(
        client_ip=env_config.client_ip,
        user_agent=env_config.client_user_agent,
    )


def list_providers(registry: ProviderRegistry) -> int:
    for descriptor in registry.list_all():
        fallback = " (fallback)" if descriptor.id == registry.fallback_id else ""
        print(f"{descriptor.id:<14} {descriptor.category.value:<4} {descriptor.name}{fallback}")
    return 0


def run_manual(importer: FeedImporter) -> int:
    logger.info("Executing manual import", extra={"event": "service.manual_run.starting"})
    result = importer.run_scheduled_import()

    logger.info(
        f"Manual import completed: {result.total_imported} imported from "
        f"{result.feeds_processed} feeds, {result.failed_feeds} failed",
        extra={
            "event": "service.manual_run.completed",
            "duration_seconds": result.total_duration_seconds,
            "feeds_processed": result.feeds_processed,
            "failed_feeds": result.failed_feeds,
            "total_imported": result.total_imported,
            "total_duplicates": result.total_duplicates,
        },
    )
    return 1 if result.failed_feeds else 0


def run_single_feed(importer: FeedImporter, feed_store: SqlFeedStore, feed_id: int) -> int:
    feed = feed_store.get(feed_id)
    if feed is None:
        print(f"Feed {feed_id} not found", file=sys.stderr)
        return 1

    result = importer.import_feed(feed)
    if not result.succeeded:
        print(f"Import failed: {result.error_message}", file=sys.stderr)
        return 1

    print(
        f"{feed.name}: {result.imported_count} imported, "
        f"{result.duplicate_count} duplicates, {result.failed_count} failed "
        f"({result.total_found} found)"
    )
    return 0


def run_connection_test(importer: FeedImporter, feed_store: SqlFeedStore, feed_id: int) -> int:
    feed = feed_store.get(feed_id)
    if feed is None:
        print(f"Feed {feed_id} not found", file=sys.stderr)
        return 1

    result = importer.test_feed(feed)
    print(result.message)
    if result.request_url:
        print(f"Request URL: {result.request_url}")
    for title in result.sample_titles:
        print(f"  - {title}")
    return 0 if result.success else 1


def run_daemon(importer: FeedImporter, app_config: AppConfig) -> int:
    shutdown_event = threading.Event()
    scheduler = ImportScheduler(
        run_import=importer.run_scheduled_import,
        interval_minutes=app_config.schedule.interval_minutes,
        misfire_grace_seconds=app_config.schedule.misfire_grace_seconds,
        shutdown_event=shutdown_event,
    )

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        scheduler.shutdown(wait=False)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler.start()
    logger.info(
        "Scheduler started. Press Ctrl+C to stop",
        extra={"event": "service.daemon_mode.started"},
    )

    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        scheduler.shutdown(wait=False)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)
    registry = create_default_registry()

    if args.list_providers:
        return list_providers(registry)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Job feed importer starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "feed_count": len(app_config.feeds),
            },
        )

        init_database(env_config.database_url)
        try:
            feed_store = SqlFeedStore()
            seed_feeds(app_config, feed_store, registry)

            importer = FeedImporter(
                registry=registry,
                feed_store=feed_store,
                content_store=SqlContentStore(),
                settings=app_config.importer,
                http=app_config.http,
                request_context=build_request_context(env_config),
            )

            if args.manual_run:
                exit_code = run_manual(importer)
            elif args.feed is not None:
                exit_code = run_single_feed(importer, feed_store, args.feed)
            elif args.test_feed is not None:
                exit_code = run_connection_test(importer, feed_store, args.test_feed)
            else:
                exit_code = run_daemon(importer, app_config)
        finally:
            close_database()

        logger.info(
            "Job feed importer stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e.message}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "service.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
