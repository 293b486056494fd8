"""Store interfaces consumed by the importer.

The importer depends only on these abstract classes. The SQL
implementations live in jobfeed.persistence.stores; tests use in-memory
fakes.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .models import CanonicalJobRecord, FeedConfig, Taxonomy


class FeedStore(ABC):
    """Persistent list of configured feeds."""

    @abstractmethod
    def list_active_feeds(self) -> List[FeedConfig]:
        """Return active feeds in a stable order (ascending id)."""

    @abstractmethod
    def list_all(self) -> List[FeedConfig]:
        """Return every feed, active or not."""

    @abstractmethod
    def get(self, feed_id: int) -> Optional[FeedConfig]:
        """Return one feed, or None if it does not exist."""

    @abstractmethod
    def create(self, feed: FeedConfig) -> int:
        """Store a new feed and return its id."""

    @abstractmethod
    def update(self, feed: FeedConfig) -> int:
        """Overwrite an existing feed (matched by ``feed.id``) and return its id."""

    @abstractmethod
    def delete(self, feed_id: int) -> bool:
        """Delete a feed. Returns False if it did not exist."""


class ContentStore(ABC):
    """Destination for normalized listings and their taxonomy terms."""

    @abstractmethod
    def create_listing(self, record: CanonicalJobRecord) -> int:
        """Store a listing and return its id."""

    @abstractmethod
    def find_by_title_company_location(
        self, title: str, company: Optional[str], location: Optional[str]
    ) -> Optional[int]:
        """Find a published or draft listing matching a job.

        Title must match exactly. A ``None`` company or location matches any
        stored value; otherwise the stored value must be equal.

        Returns:
            Id of a matching listing, or None
        """

    @abstractmethod
    def get_or_create_term(self, name: str, taxonomy: Taxonomy) -> int:
        """Return the id of the term ``name`` in ``taxonomy``, creating it if needed."""

    @abstractmethod
    def assign_terms(self, listing_id: int, term_ids: Sequence[int], taxonomy: Taxonomy) -> None:
        """Replace the listing's terms within ``taxonomy`` with ``term_ids``."""
