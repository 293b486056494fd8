"""Unit tests for the main entry point.

Tests the main() function including:
- CLI argument parsing
- Configuration loading with priority (CLI > env > config)
- Seeding configured feeds into the feed store
- Manual run, single feed, connection test and daemon modes
- Exit code handling
- Error handling
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from jobfeed.config.environment import EnvironmentConfig
from jobfeed.config.exceptions import ConfigurationError
from jobfeed.config.models import AppConfig, FeedDefinition, LoggingConfig
from jobfeed.main import (
    build_parser,
    build_request_context,
    load_runtime_config,
    main,
    seed_feeds,
)
from jobfeed.persistence import SqlFeedStore, close_database, init_database
from jobfeed.pipeline import ConnectionTestResult, FeedImportResult, ImportRunResult
from jobfeed.providers import create_default_registry

NOW = datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_database():
    """Create a temporary in-memory database for testing."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


@pytest.fixture
def runtime_config():
    """Patch configuration loading with an in-memory setup."""
    app_config = AppConfig(
        feeds=[FeedDefinition(name="Example RSS", url="https://jobs.example.com/feed.rss")]
    )
    env_config = EnvironmentConfig(database_url="sqlite:///:memory:", log_level="INFO")
    with patch("jobfeed.main.load_runtime_config", return_value=(app_config, env_config)), patch(
        "jobfeed.main.configure_logging"
    ):
        yield app_config, env_config


def run_result(**kwargs) -> ImportRunResult:
    return ImportRunResult(run_started_at=NOW, run_finished_at=NOW, **kwargs)


class TestParser:
    """Tests for CLI argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.config is None
        assert args.log_level is None
        assert not args.manual_run
        assert args.feed is None

    def test_modes_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--manual-run", "--feed", "1"])


class TestLoadRuntimeConfig:
    """Test suite for load_runtime_config helper."""

    def test_log_level_priority(self, tmp_path):
        """Test log level priority: CLI > env > config."""
        app_config = AppConfig(logging=LoggingConfig(level="WARNING"))
        env_config = EnvironmentConfig(log_level="INFO")

        with patch("jobfeed.main.load_config", return_value=(app_config, env_config)):
            _, env = load_runtime_config(tmp_path / "config.yaml", "DEBUG")
            assert env.log_level == "DEBUG"

            env_config.log_level = "INFO"
            _, env = load_runtime_config(tmp_path / "config.yaml", None)
            assert env.log_level == "INFO"

            env_config.log_level = None
            _, env = load_runtime_config(tmp_path / "config.yaml", None)
            assert env.log_level == "WARNING"


class TestSeedFeeds:
    """Tests for creating configured feeds in the feed store."""

    def test_creates_missing_feeds_with_detected_provider(self, temp_database):
        app_config = AppConfig(
            feeds=[
                FeedDefinition(name="RSS", url="https://jobs.example.com/feed.rss"),
                FeedDefinition(
                    name="WhatJobs",
                    url="https://api.whatjobs.com/api/v1/jobs.xml",
                    auth={"publisher_id": "ab12345"},
                ),
                FeedDefinition(name="Explicit", provider="whatjobs", active=False),
            ]
        )
        store = SqlFeedStore()

        created = seed_feeds(app_config, store, create_default_registry())

        assert created == 3
        assert store.get_by_name("RSS").provider_id == "generic_rss"
        assert store.get_by_name("WhatJobs").provider_id == "whatjobs"
        assert store.get_by_name("WhatJobs").auth == {"publisher_id": "ab12345"}
        assert store.get_by_name("Explicit").active is False

    def test_existing_feeds_untouched(self, temp_database):
        app_config = AppConfig(feeds=[FeedDefinition(name="RSS", url="https://a.example.com/feed")])
        store = SqlFeedStore()
        seed_feeds(app_config, store, create_default_registry())

        changed = AppConfig(feeds=[FeedDefinition(name="RSS", url="https://b.example.com/feed")])
        assert seed_feeds(changed, store, create_default_registry()) == 0
        assert store.get_by_name("RSS").url == "https://a.example.com/feed"

    def test_unknown_provider(self, temp_database):
        app_config = AppConfig(feeds=[FeedDefinition(name="Indeed", provider="indeed")])
        with pytest.raises(ConfigurationError, match="unknown provider 'indeed'"):
            seed_feeds(app_config, SqlFeedStore(), create_default_registry())


class TestRequestContext:
    """Tests for the caller identity built from the environment."""

    def test_none_without_values(self):
        assert build_request_context(EnvironmentConfig()) is None

    def test_values_passed(self):
        context = build_request_context(
            EnvironmentConfig(client_ip="34.12.56.78", client_user_agent="Mozilla/5.0")
        )
        assert context.client_ip == "34.12.56.78"
        assert context.user_agent == "Mozilla/5.0"


class TestMain:
    """Test suite for main() function."""

    def test_list_providers(self, capsys):
        assert main(["--list-providers"]) == 0
        output = capsys.readouterr().out
        assert "whatjobs" in output
        assert "generic_rss" in output
        assert "(fallback)" in output

    @patch("jobfeed.main.FeedImporter")
    def test_manual_run_success(self, mock_importer_cls, runtime_config):
        importer = mock_importer_cls.return_value
        importer.run_scheduled_import.return_value = run_result(
            feed_results=[FeedImportResult(feed_id=1, feed_name="Example RSS", provider_id="generic_rss", imported_count=3)],
            feeds_processed=1,
        )

        assert main(["--manual-run"]) == 0
        importer.run_scheduled_import.assert_called_once_with()

        kwargs = mock_importer_cls.call_args.kwargs
        assert kwargs["settings"] is runtime_config[0].importer
        assert kwargs["request_context"] is None

    @patch("jobfeed.main.FeedImporter")
    def test_manual_run_with_failed_feed(self, mock_importer_cls, runtime_config):
        mock_importer_cls.return_value.run_scheduled_import.return_value = run_result(
            feed_results=[
                FeedImportResult(
                    feed_id=1,
                    feed_name="Example RSS",
                    provider_id="generic_rss",
                    error_message="HTTP 500 from generic_rss",
                )
            ],
            feeds_processed=1,
        )

        assert main(["--manual-run"]) == 1

    @patch("jobfeed.main.FeedImporter")
    def test_single_feed(self, mock_importer_cls, runtime_config, capsys):
        mock_importer_cls.return_value.import_feed.return_value = FeedImportResult(
            feed_id=1, feed_name="Example RSS", provider_id="generic_rss", total_found=4, imported_count=4
        )

        assert main(["--feed", "1"]) == 0

        feed = mock_importer_cls.return_value.import_feed.call_args.args[0]
        assert feed.name == "Example RSS"
        assert "4 imported" in capsys.readouterr().out

    @patch("jobfeed.main.FeedImporter")
    def test_single_feed_not_found(self, mock_importer_cls, runtime_config, capsys):
        assert main(["--feed", "99"]) == 1
        assert "Feed 99 not found" in capsys.readouterr().err

    @patch("jobfeed.main.FeedImporter")
    def test_connection_test(self, mock_importer_cls, runtime_config, capsys):
        mock_importer_cls.return_value.test_feed.return_value = ConnectionTestResult(
            success=True,
            message="Connection successful! Found 2 jobs.",
            jobs_found=2,
            sample_titles=["Engineer", "Designer"],
            request_url="https://jobs.example.com/feed.rss",
        )

        assert main(["--test-feed", "1"]) == 0

        output = capsys.readouterr().out
        assert "Connection successful! Found 2 jobs." in output
        assert "  - Designer" in output

    @patch("jobfeed.main.signal.signal")
    @patch("jobfeed.main.ImportScheduler")
    @patch("jobfeed.main.FeedImporter")
    def test_daemon_mode(self, mock_importer_cls, mock_scheduler_cls, mock_signal, runtime_config):
        def scheduler_stops_at_once(**kwargs):
            kwargs["shutdown_event"].set()
            return MagicMock()

        mock_scheduler_cls.side_effect = scheduler_stops_at_once

        assert main([]) == 0

        scheduler_kwargs = mock_scheduler_cls.call_args.kwargs
        assert scheduler_kwargs["interval_minutes"] == 60
        assert scheduler_kwargs["misfire_grace_seconds"] == 300
        assert scheduler_kwargs["run_import"] == mock_importer_cls.return_value.run_scheduled_import
        assert mock_signal.call_count == 2

    @patch("jobfeed.main.load_runtime_config")
    def test_configuration_error(self, mock_load_config, capsys):
        mock_load_config.side_effect = ConfigurationError(
            "Configuration file not found", suggestions=["Copy config.example.yaml to config.yaml"]
        )

        assert main(["--manual-run"]) == 1
        assert "Configuration Error" in capsys.readouterr().err

    @patch("jobfeed.main.load_runtime_config")
    def test_keyboard_interrupt(self, mock_load_config):
        mock_load_config.side_effect = KeyboardInterrupt()
        assert main([]) == 0

    @patch("jobfeed.main.load_runtime_config")
    def test_unexpected_error(self, mock_load_config, capsys):
        mock_load_config.side_effect = RuntimeError("disk on fire")
        assert main(["--manual-run"]) == 1
        assert "Fatal error: disk on fire" in capsys.readouterr().err

    @patch("jobfeed.main.configure_logging")
    @patch("jobfeed.main.load_runtime_config")
    def test_log_level_override(self, mock_load_config, mock_configure_logging):
        """Test that --log-level is passed to load_runtime_config."""
        mock_load_config.return_value = (AppConfig(), EnvironmentConfig(log_level="DEBUG"))
        mock_configure_logging.side_effect = RuntimeError("exit early")

        assert main(["--log-level", "DEBUG", "--manual-run"]) == 1

        assert mock_load_config.call_args.args[1] == "DEBUG"
        assert mock_configure_logging.call_args.kwargs["level"] == "DEBUG"
