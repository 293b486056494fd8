"""Import pipeline: orchestration and result types."""

from .models import (
    ConnectionTestResult,
    FeedImportResult,
    ImportRunResult,
    JobImportResult,
    JobImportStatus,
)
from .runner import FeedImporter

__all__ = [
    "FeedImporter",
    "JobImportStatus",
    "JobImportResult",
    "FeedImportResult",
    "ImportRunResult",
    "ConnectionTestResult",
]
