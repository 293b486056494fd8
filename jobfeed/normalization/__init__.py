"""Normalization and deduplication of provider records."""

from .formatting import (
    format_description,
    html_to_text,
    sanitize_html,
    sanitize_text,
    sanitize_url,
    strip_tags,
)
from .service import (
    JOB_TYPE_LABELS,
    REMOTE_KEYWORDS,
    JobNormalizer,
    calculate_expiry_date,
    is_remote_job,
    normalize_job_type,
)

__all__ = [
    "JobNormalizer",
    "normalize_job_type",
    "is_remote_job",
    "calculate_expiry_date",
    "JOB_TYPE_LABELS",
    "REMOTE_KEYWORDS",
    "format_description",
    "sanitize_html",
    "sanitize_text",
    "sanitize_url",
    "strip_tags",
    "html_to_text",
]
