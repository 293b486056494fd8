"""Utility functions for time handling and log masking."""

from .masking import mask_ip, mask_secret, mask_url, mask_user_agent, redact_database_url
from .timestamps import ensure_utc, format_timestamp, parse_datetime, parse_timestamp, utc_now

__all__ = [
    # Timestamps
    "utc_now",
    "ensure_utc",
    "parse_datetime",
    "format_timestamp",
    "parse_timestamp",
    # Masking
    "mask_ip",
    "mask_user_agent",
    "mask_secret",
    "mask_url",
    "redact_database_url",
]
