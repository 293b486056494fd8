"""Domain models and store interfaces."""

from .models import CanonicalJobRecord, FeedConfig, PostStatus, RawJobRecord, Taxonomy
from .stores import ContentStore, FeedStore

__all__ = [
    "FeedConfig",
    "RawJobRecord",
    "CanonicalJobRecord",
    "Taxonomy",
    "PostStatus",
    "FeedStore",
    "ContentStore",
]
