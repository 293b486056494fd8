"""SQL-backed implementations of the feed and content stores.

Every call opens its own session, so each store operation commits (or rolls
back) independently of the others.
"""

from typing import List, Optional, Sequence

from jobfeed.domain.models import CanonicalJobRecord, FeedConfig, Taxonomy
from jobfeed.domain.stores import ContentStore, FeedStore

from .database import get_session
from .repositories import FeedRepository, ListingRepository


class SqlFeedStore(FeedStore):
    """FeedStore backed by the feeds table."""

    def list_active_feeds(self) -> List[FeedConfig]:
        with get_session() as session:
            return FeedRepository(session).list_active()

    def list_all(self) -> List[FeedConfig]:
        with get_session() as session:
            return FeedRepository(session).list_all()

    def get(self, feed_id: int) -> Optional[FeedConfig]:
        with get_session() as session:
            return FeedRepository(session).get(feed_id)

    def get_by_name(self, name: str) -> Optional[FeedConfig]:
        with get_session() as session:
            return FeedRepository(session).get_by_name(name)

    def create(self, feed: FeedConfig) -> int:
        with get_session() as session:
            return FeedRepository(session).create(feed).id

    def update(self, feed: FeedConfig) -> int:
        with get_session() as session:
            return FeedRepository(session).update(feed).id

    def delete(self, feed_id: int) -> bool:
        with get_session() as session:
            return FeedRepository(session).delete(feed_id)


class SqlContentStore(ContentStore):
    """ContentStore backed by the listings and terms tables."""

    def create_listing(self, record: CanonicalJobRecord) -> int:
        with get_session() as session:
            return ListingRepository(session).create_listing(record)

    def find_by_title_company_location(
        self, title: str, company: Optional[str], location: Optional[str]
    ) -> Optional[int]:
        with get_session() as session:
            return ListingRepository(session).find_by_title_company_location(
                title, company, location
            )

    def get_or_create_term(self, name: str, taxonomy: Taxonomy) -> int:
        with get_session() as session:
            return ListingRepository(session).get_or_create_term(name, taxonomy)

    def assign_terms(self, listing_id: int, term_ids: Sequence[int], taxonomy: Taxonomy) -> None:
        with get_session() as session:
            ListingRepository(session).assign_terms(listing_id, term_ids, taxonomy)

    def get_listing(self, listing_id: int) -> Optional[CanonicalJobRecord]:
        with get_session() as session:
            return ListingRepository(session).get(listing_id)

    def list_terms(self, listing_id: int, taxonomy: Optional[Taxonomy] = None) -> List[str]:
        with get_session() as session:
            return ListingRepository(session).list_terms(listing_id, taxonomy)

    def count_listings(self) -> int:
        with get_session() as session:
            return ListingRepository(session).count()
