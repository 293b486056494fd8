"""Unit tests for the persistence layer.

Tests cover:
- Database initialization and session management
- Feed CRUD through FeedRepository and SqlFeedStore
- Listing storage, duplicate lookup and taxonomy terms
"""

from datetime import date, datetime, timezone

import pytest

from jobfeed.domain.models import CanonicalJobRecord, FeedConfig, Taxonomy
from jobfeed.persistence import (
    DatabaseConnectionError,
    DataIntegrityError,
    FeedRepository,
    ListingRepository,
    RecordNotFoundError,
    SqlContentStore,
    SqlFeedStore,
    close_database,
    get_engine,
    get_session,
    init_database,
)

IMPORTED_AT = datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_database():
    """Create a temporary in-memory database for testing."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


def make_record(title="Engineer", company="Acme Corp", location="London", **kwargs):
    defaults = dict(
        title=title,
        company=company,
        location=location,
        description="<p>Build things.</p>",
        expiry_date=date(2025, 12, 4),
        provider_id="generic_rss",
        imported_at=IMPORTED_AT,
    )
    defaults.update(kwargs)
    return CanonicalJobRecord(**defaults)


def make_feed(name="Example RSS", **kwargs):
    defaults = dict(
        name=name,
        provider_id="generic_rss",
        url="https://jobs.example.com/feed",
        args={"default_category": "Technology"},
    )
    defaults.update(kwargs)
    return FeedConfig(**defaults)


class TestDatabase:
    """Tests for engine and session management."""

    def test_session_before_init(self):
        close_database()
        with pytest.raises(DatabaseConnectionError):
            with get_session():
                pass

    def test_engine_before_init(self):
        close_database()
        with pytest.raises(DatabaseConnectionError):
            get_engine()

    def test_invalid_url(self):
        with pytest.raises(DatabaseConnectionError):
            init_database("")

    def test_file_database_creates_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "jobs.db"
        init_database(f"sqlite:///{db_path}")
        try:
            assert db_path.parent.exists()
            assert SqlFeedStore().list_all() == []
        finally:
            close_database()

    def test_rollback_on_error(self, temp_database):
        with pytest.raises(RuntimeError):
            with get_session() as session:
                FeedRepository(session).create(make_feed())
                raise RuntimeError("abort")

        assert SqlFeedStore().list_all() == []

    def test_close_is_idempotent(self, temp_database):
        close_database()
        close_database()


class TestFeedStore:
    """Tests for feed CRUD."""

    def test_create_and_get(self, temp_database):
        store = SqlFeedStore()
        feed_id = store.create(make_feed(auth={"publisher_id": "ab12345"}))

        feed = store.get(feed_id)
        assert feed.id == feed_id
        assert feed.name == "Example RSS"
        assert feed.args == {"default_category": "Technology"}
        assert feed.auth == {"publisher_id": "ab12345"}
        assert feed.active is True
        assert feed.created_at.tzinfo is not None

    def test_get_missing(self, temp_database):
        assert SqlFeedStore().get(999) is None

    def test_get_by_name(self, temp_database):
        store = SqlFeedStore()
        feed_id = store.create(make_feed())

        assert store.get_by_name("Example RSS").id == feed_id
        assert store.get_by_name("Other") is None

    def test_duplicate_name_rejected(self, temp_database):
        store = SqlFeedStore()
        store.create(make_feed())
        with pytest.raises(DataIntegrityError):
            store.create(make_feed())

    def test_update(self, temp_database):
        store = SqlFeedStore()
        feed_id = store.create(make_feed())
        feed = store.get(feed_id)

        store.update(feed.model_copy(update={"active": False, "url": "https://jobs.example.com/v2"}))

        updated = store.get(feed_id)
        assert updated.active is False
        assert updated.url == "https://jobs.example.com/v2"

    def test_update_missing(self, temp_database):
        with pytest.raises(RecordNotFoundError):
            SqlFeedStore().update(make_feed().model_copy(update={"id": 42}))

    def test_delete(self, temp_database):
        store = SqlFeedStore()
        feed_id = store.create(make_feed())

        assert store.delete(feed_id) is True
        assert store.delete(feed_id) is False
        assert store.get(feed_id) is None

    def test_list_active_ordered_by_id(self, temp_database):
        store = SqlFeedStore()
        first = store.create(make_feed("B feed"))
        store.create(make_feed("Inactive", active=False))
        third = store.create(make_feed("A feed"))

        assert [feed.id for feed in store.list_active_feeds()] == [first, third]
        assert len(store.list_all()) == 3


class TestContentStore:
    """Tests for listing storage and duplicate lookup."""

    def test_create_and_get_listing(self, temp_database):
        store = SqlContentStore()
        listing_id = store.create_listing(
            make_record(job_type="Contrato", is_remote=True, feed_id=3, salary="£60k")
        )

        listing = store.get_listing(listing_id)
        assert listing.title == "Engineer"
        assert listing.expiry_date == date(2025, 12, 4)
        assert listing.imported_at == IMPORTED_AT
        assert listing.is_remote is True
        assert listing.job_type == "Contrato"
        assert listing.feed_id == 3
        assert listing.status == "draft"
        assert store.count_listings() == 1

    def test_find_exact(self, temp_database):
        store = SqlContentStore()
        listing_id = store.create_listing(make_record())

        assert store.find_by_title_company_location("Engineer", "Acme Corp", "London") == listing_id
        assert store.find_by_title_company_location("Engineer", "Globex", "London") is None
        assert store.find_by_title_company_location("Engineer", "Acme Corp", "Paris") is None
        assert store.find_by_title_company_location("Designer", "Acme Corp", "London") is None

    def test_find_with_wildcards(self, temp_database):
        store = SqlContentStore()
        listing_id = store.create_listing(make_record())

        assert store.find_by_title_company_location("Engineer", None, None) == listing_id
        assert store.find_by_title_company_location("Engineer", None, "London") == listing_id
        assert store.find_by_title_company_location("Engineer", "Acme Corp", None) == listing_id

    def test_stored_blank_company_only_matches_wildcard(self, temp_database):
        store = SqlContentStore()
        listing_id = store.create_listing(make_record(company=""))

        assert store.find_by_title_company_location("Engineer", "Acme Corp", "London") is None
        assert store.find_by_title_company_location("Engineer", None, "London") == listing_id

    def test_published_listings_match(self, temp_database):
        store = SqlContentStore()
        listing_id = store.create_listing(make_record(status="publish"))
        assert store.find_by_title_company_location("Engineer", "Acme Corp", "London") == listing_id


class TestTerms:
    """Tests for taxonomy terms."""

    def test_get_or_create_term_reuses_existing(self, temp_database):
        store = SqlContentStore()
        first = store.get_or_create_term("Technology", Taxonomy.CATEGORY)
        second = store.get_or_create_term("Technology", Taxonomy.CATEGORY)
        other_taxonomy = store.get_or_create_term("Technology", Taxonomy.REGION)

        assert first == second
        assert other_taxonomy != first

    def test_assign_terms(self, temp_database):
        store = SqlContentStore()
        listing_id = store.create_listing(make_record())
        category = store.get_or_create_term("Technology", Taxonomy.CATEGORY)
        region = store.get_or_create_term("Remote", Taxonomy.REGION)

        store.assign_terms(listing_id, [category], Taxonomy.CATEGORY)
        store.assign_terms(listing_id, [region], Taxonomy.REGION)

        assert store.list_terms(listing_id) == ["Remote", "Technology"]
        assert store.list_terms(listing_id, Taxonomy.CATEGORY) == ["Technology"]

    def test_assign_replaces_within_taxonomy(self, temp_database):
        store = SqlContentStore()
        listing_id = store.create_listing(make_record())
        old = store.get_or_create_term("Technology", Taxonomy.CATEGORY)
        new = store.get_or_create_term("Engineering", Taxonomy.CATEGORY)
        region = store.get_or_create_term("Remote", Taxonomy.REGION)

        store.assign_terms(listing_id, [old], Taxonomy.CATEGORY)
        store.assign_terms(listing_id, [region], Taxonomy.REGION)
        store.assign_terms(listing_id, [new], Taxonomy.CATEGORY)

        assert store.list_terms(listing_id, Taxonomy.CATEGORY) == ["Engineering"]
        assert store.list_terms(listing_id, Taxonomy.REGION) == ["Remote"]

    def test_assign_to_missing_listing(self, temp_database):
        store = SqlContentStore()
        term_id = store.get_or_create_term("Technology", Taxonomy.CATEGORY)
        with pytest.raises(RecordNotFoundError):
            store.assign_terms(999, [term_id], Taxonomy.CATEGORY)

    def test_repository_shares_session(self, temp_database):
        with get_session() as session:
            repo = ListingRepository(session)
            listing_id = repo.create_listing(make_record())
            term_id = repo.get_or_create_term("Technology", Taxonomy.CATEGORY)
            repo.assign_terms(listing_id, [term_id], Taxonomy.CATEGORY)

        assert SqlContentStore().list_terms(listing_id) == ["Technology"]
