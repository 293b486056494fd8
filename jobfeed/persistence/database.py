"""Database engine and session management.

init_database() is called once at start-up; every store operation then opens
its own short-lived session through get_session(), so each write is its own
transaction.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from jobfeed.logging import get_logger
from jobfeed.utils.masking import redact_database_url

from .exceptions import DatabaseConnectionError

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None

logger = get_logger(__name__, component="database")

MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def init_database(database_url: str) -> None:
    """Create the engine, verify the connection and create missing tables.

    For SQLite file databases the parent directory is created if needed;
    in-memory SQLite databases share one connection so every session sees
    the same data.

    Args:
        database_url: SQLAlchemy URL (e.g., "sqlite:///./data/job_feeds.db")

    Raises:
        DatabaseConnectionError: If the database cannot be initialized
    """
    global _engine, _session_factory

    if not database_url or not isinstance(database_url, str):
        raise DatabaseConnectionError("Database URL must be a non-empty string")

    safe_url = redact_database_url(database_url)
    logger.info(
        "Initializing database",
        extra={"event": "database.initializing", "database_url": safe_url},
    )

    try:
        _engine = _create_engine(database_url)
        _check_connection(_engine)

        _session_factory = sessionmaker(
            bind=_engine,
            autoflush=True,
            expire_on_commit=False,
        )

        from .schema import create_schema

        create_schema(_engine)

    except DatabaseConnectionError:
        raise
    except Exception as e:
        logger.error(
            f"Failed to initialize database: {e}",
            extra={"event": "database.init_failed", "database_url": safe_url},
            exc_info=True,
        )
        raise DatabaseConnectionError(f"Failed to initialize database: {e}") from e

    logger.info(
        "Database initialized",
        extra={"event": "database.initialized", "database_url": safe_url},
    )


def _create_engine(database_url: str) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    if database_url in MEMORY_URLS:
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_file = Path(database_url.replace("sqlite:///", "", 1))
        if not db_file.parent.exists():
            logger.info(
                f"Creating database directory: {db_file.parent}",
                extra={"event": "database.directory_created"},
            )
            db_file.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            database_url,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def _check_connection(engine: Engine) -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error.

    Raises:
        DatabaseConnectionError: If init_database() has not been called

    Example:
        >>> with get_session() as session:
        ...     feeds = FeedRepository(session).list_active()
    """
    if _session_factory is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_session()"
        )

    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.warning(
            f"Database session rolled back: {e}",
            extra={
                "event": "database.session.rolled_back",
                "error_type": type(e).__name__,
            },
        )
        raise
    finally:
        session.close()


def get_engine() -> Engine:
    """Return the initialized engine.

    Raises:
        DatabaseConnectionError: If init_database() has not been called
    """
    if _engine is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_engine()"
        )
    return _engine


def close_database() -> None:
    """Dispose of the engine. Safe to call more than once."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database connections closed", extra={"event": "database.closed"})
