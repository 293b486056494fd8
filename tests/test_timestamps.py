"""Unit tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

import pytest

from jobfeed.utils.timestamps import (
    ensure_utc,
    format_timestamp,
    parse_datetime,
    parse_timestamp,
    utc_now,
)


class TestUtcNow:
    """Tests for utc_now()."""

    def test_utc_now_returns_utc_datetime(self):
        now = utc_now()
        assert now.tzinfo == timezone.utc


class TestEnsureUtc:
    """Tests for ensure_utc()."""

    def test_none(self):
        assert ensure_utc(None) is None

    def test_naive_treated_as_utc(self):
        assert ensure_utc(datetime(2025, 1, 1, 12, 0)) == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_other_timezone_converted(self):
        plus_two = timezone(timedelta(hours=2))
        result = ensure_utc(datetime(2025, 1, 1, 12, 0, tzinfo=plus_two))
        assert result.hour == 10
        assert result.tzinfo == timezone.utc


class TestParseDatetime:
    """Tests for parse_datetime()."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2025-11-04T12:00:00Z", datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)),
            ("2025-11-04T14:00:00+02:00", datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)),
            ("2025-11-04", datetime(2025, 11, 4, tzinfo=timezone.utc)),
            ("Tue, 04 Nov 2025 12:00:00 GMT", datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)),
            ("Tue, 04 Nov 2025 09:00:00 -0300", datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)),
        ],
    )
    def test_supported_formats(self, value, expected):
        assert parse_datetime(value) == expected

    @pytest.mark.parametrize("value", ["", "   ", None, "yesterday", "31/12/2025"])
    def test_unparseable(self, value):
        assert parse_datetime(value) is None


class TestStorageFormat:
    """Tests for format_timestamp() and parse_timestamp()."""

    def test_format(self):
        dt = datetime(2025, 11, 4, 12, 30, 15, 123456, tzinfo=timezone.utc)
        assert format_timestamp(dt) == "2025-11-04T12:30:15.123456Z"

    def test_format_none(self):
        assert format_timestamp(None) is None

    def test_parse_without_microseconds(self):
        assert parse_timestamp("2025-11-04T12:30:15Z") == datetime(
            2025, 11, 4, 12, 30, 15, tzinfo=timezone.utc
        )

    def test_parse_empty(self):
        assert parse_timestamp("") is None
