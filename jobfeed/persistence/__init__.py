"""Persistence layer for feeds and imported listings.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None

    # Repositories (work inside a session)
    - FeedRepository, ListingRepository

    # Stores (open a session per call; what the importer uses)
    - SqlFeedStore, SqlContentStore

Example usage:
    >>> from jobfeed.persistence import init_database, SqlFeedStore
    >>> init_database("sqlite:///./data/job_feeds.db")
    >>> feeds = SqlFeedStore().list_active_feeds()
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import FeedRepository, ListingRepository
from .stores import SqlContentStore, SqlFeedStore

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repositories
    "FeedRepository",
    "ListingRepository",
    # Stores
    "SqlFeedStore",
    "SqlContentStore",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
