"""Data access layer (repositories) for persistence operations.

Repositories work inside a caller-provided session and return domain models
rather than ORM models. SQLAlchemy errors are re-raised as PersistenceError
subclasses.
"""

from typing import List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from jobfeed.domain.models import CanonicalJobRecord, FeedConfig, Taxonomy
from jobfeed.logging import get_logger
from jobfeed.utils.timestamps import format_timestamp, utc_now

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import FeedModel, ListingModel, ListingTermModel, TermModel

logger = get_logger(__name__, component="database")

# Listings considered by duplicate detection
LIVE_STATUSES = ("publish", "draft")


class FeedRepository:
    """Repository for feed CRUD operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, feed: FeedConfig) -> FeedConfig:
        """Insert a new feed.

        Returns:
            The stored feed, with id and timestamps set

        Raises:
            DataIntegrityError: If a feed with the same name exists
            PersistenceError: If database error occurs
        """
        now = format_timestamp(utc_now())
        model = FeedModel(created_at=now, updated_at=now)
        model.apply(feed)
        try:
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to create feed '{feed.name}': {e}") from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to create feed: {e}") from e

    def get(self, feed_id: int) -> Optional[FeedConfig]:
        try:
            model = self.session.get(FeedModel, feed_id)
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to retrieve feed {feed_id}: {e}") from e

    def get_by_name(self, name: str) -> Optional[FeedConfig]:
        try:
            stmt = select(FeedModel).where(FeedModel.name == name)
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to retrieve feed '{name}': {e}") from e

    def update(self, feed: FeedConfig) -> FeedConfig:
        """Overwrite an existing feed.

        Raises:
            RecordNotFoundError: If feed.id is missing or unknown
            DataIntegrityError: If the new name collides with another feed
        """
        if feed.id is None:
            raise RecordNotFoundError("Cannot update a feed without an id")

        try:
            model = self.session.get(FeedModel, feed.id)
            if model is None:
                raise RecordNotFoundError(f"Feed {feed.id} not found")
            model.apply(feed)
            model.updated_at = format_timestamp(utc_now())
            self.session.flush()
            return model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to update feed {feed.id}: {e}") from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to update feed {feed.id}: {e}") from e

    def delete(self, feed_id: int) -> bool:
        try:
            result = self.session.execute(delete(FeedModel).where(FeedModel.id == feed_id))
            return result.rowcount > 0
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete feed {feed_id}: {e}") from e

    def list_active(self) -> List[FeedConfig]:
        """Active feeds ordered by id."""
        try:
            stmt = select(FeedModel).where(FeedModel.active.is_(True)).order_by(FeedModel.id)
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list active feeds: {e}") from e

    def list_all(self) -> List[FeedConfig]:
        try:
            stmt = select(FeedModel).order_by(FeedModel.id)
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list feeds: {e}") from e


class ListingRepository:
    """Repository for listings and their taxonomy terms."""

    def __init__(self, session: Session):
        self.session = session

    def create_listing(self, record: CanonicalJobRecord) -> int:
        """Insert a listing and return its id.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = ListingModel.from_domain(record)
            self.session.add(model)
            self.session.flush()
            return model.id
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to create listing '{record.title}': {e}") from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to create listing: {e}") from e

    def get(self, listing_id: int) -> Optional[CanonicalJobRecord]:
        try:
            model = self.session.get(ListingModel, listing_id)
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to retrieve listing {listing_id}: {e}") from e

    def find_by_title_company_location(
        self, title: str, company: Optional[str], location: Optional[str]
    ) -> Optional[int]:
        """Id of a published or draft listing with this title, company and location.

        A None company or location is not filtered on.
        """
        stmt = select(ListingModel.id).where(
            ListingModel.title == title,
            ListingModel.status.in_(LIVE_STATUSES),
        )
        if company is not None:
            stmt = stmt.where(ListingModel.company == company)
        if location is not None:
            stmt = stmt.where(ListingModel.location == location)

        try:
            return self.session.execute(stmt.order_by(ListingModel.id).limit(1)).scalar()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up listing '{title}': {e}") from e

    def get_or_create_term(self, name: str, taxonomy: Taxonomy) -> int:
        taxonomy_value = Taxonomy(taxonomy).value
        try:
            stmt = select(TermModel.id).where(
                TermModel.name == name, TermModel.taxonomy == taxonomy_value
            )
            term_id = self.session.execute(stmt).scalar()
            if term_id is not None:
                return term_id

            term = TermModel(name=name, taxonomy=taxonomy_value)
            self.session.add(term)
            self.session.flush()
            logger.debug(
                f"Created term '{name}'",
                extra={"event": "database.term.created", "taxonomy": taxonomy_value},
            )
            return term.id
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to create term '{name}': {e}") from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to get or create term '{name}': {e}") from e

    def assign_terms(
        self, listing_id: int, term_ids: Sequence[int], taxonomy: Taxonomy
    ) -> None:
        """Replace the listing's terms within one taxonomy.

        Raises:
            RecordNotFoundError: If the listing does not exist
        """
        taxonomy_value = Taxonomy(taxonomy).value
        try:
            if self.session.get(ListingModel, listing_id) is None:
                raise RecordNotFoundError(f"Listing {listing_id} not found")

            self.session.execute(
                delete(ListingTermModel).where(
                    ListingTermModel.listing_id == listing_id,
                    ListingTermModel.taxonomy == taxonomy_value,
                )
            )
            for term_id in dict.fromkeys(term_ids):
                self.session.add(
                    ListingTermModel(listing_id=listing_id, term_id=term_id, taxonomy=taxonomy_value)
                )
            self.session.flush()
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to assign terms to listing {listing_id}: {e}") from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to assign terms to listing {listing_id}: {e}") from e

    def list_terms(self, listing_id: int, taxonomy: Optional[Taxonomy] = None) -> List[str]:
        """Names of the terms assigned to a listing, optionally within one taxonomy."""
        stmt = (
            select(TermModel.name)
            .join(ListingTermModel, ListingTermModel.term_id == TermModel.id)
            .where(ListingTermModel.listing_id == listing_id)
            .order_by(TermModel.name)
        )
        if taxonomy is not None:
            stmt = stmt.where(ListingTermModel.taxonomy == Taxonomy(taxonomy).value)
        try:
            return list(self.session.execute(stmt).scalars())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list terms for listing {listing_id}: {e}") from e

    def count(self) -> int:
        try:
            return self.session.execute(select(func.count()).select_from(ListingModel)).scalar_one()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to count listings: {e}") from e
