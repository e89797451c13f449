"""
Database session management for the Book Lending Tracker.

Every repository operation runs inside its own ``session_scope()``: the scope
commits when the block completes and rolls back on any exception, so a
multi-table write is either fully visible or not visible at all.
"""

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import LendingConfig, get_config
from .errors import RepositoryException, StorageError
from .schema import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabaseManager:
    """
    Manages the engine and session factory of the entity store.

    Engines and factories are created lazily on first use.
    """

    def __init__(self, database_url: str | None = None, config: LendingConfig | None = None):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy database URL. If None, uses the configured one.
            config: Settings to use instead of the global configuration
        """
        config = config or get_config()
        self.case_sensitive_like = config.search_case_sensitive

        if database_url is None:
            database_url = config.get_database_url()

            if not config.database_url:
                db_path = config.database_path.absolute()
                db_path.parent.mkdir(exist_ok=True, parents=True)
                logger.info("Using SQLite database at: %s", db_path)

        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def is_memory(self) -> bool:
        return self.database_url in ("sqlite://", "sqlite:///:memory:")

    @property
    def engine(self) -> Engine:
        """
        Get or create the database engine.

        SQLite engines enable foreign keys on every connection; in-memory
        databases share one connection so every session sees the same data.
        """
        if self._engine is None:
            if self.database_url.startswith("sqlite"):
                engine_kwargs = {"connect_args": {"check_same_thread": False}}
                if self.is_memory:
                    engine_kwargs["poolclass"] = StaticPool

                self._engine = create_engine(self.database_url, **engine_kwargs)

                @event.listens_for(self._engine, "connect")
                def set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
                    # SQLAlchemy emits BEGIN itself so SAVEPOINTs nest correctly
                    dbapi_connection.isolation_level = None
                    cursor = dbapi_connection.cursor()
                    cursor.execute("PRAGMA foreign_keys=ON")
                    if self.case_sensitive_like:
                        cursor.execute("PRAGMA case_sensitive_like=ON")
                    cursor.close()

                @event.listens_for(self._engine, "begin")
                def do_begin(conn):
                    conn.exec_driver_sql("BEGIN")
            else:
                self._engine = create_engine(
                    self.database_url,
                    pool_size=10,
                    max_overflow=20,
                    pool_pre_ping=True,  # Verify connections before use
                )

            logger.info("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autoflush=False,
                # Keep returned rows usable after the scope closes
                expire_on_commit=False,
            )
        return self._session_factory

    def create_session(self) -> Session:
        """Create a new database session; the caller owns its lifecycle."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for database operations.

        ```python
        with db_manager.session_scope() as session:
            session.add(record)
        # Committed here, or rolled back if the block raised
        ```

        Raises:
            StorageError: If the store fails; the transaction is rolled back first
            RepositoryException: Domain failures, re-raised after rollback
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
            logger.debug("Database transaction committed successfully")
        except RepositoryException as e:
            session.rollback()
            logger.warning("Transaction aborted: %s", e)
            raise
        except SQLAlchemyError as e:
            logger.exception("Database error, rolling back")
            session.rollback()
            raise StorageError(f"Database transaction failed: {e!s}") from e
        except Exception:
            logger.exception("Unexpected error, rolling back")
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, drop_existing: bool = False) -> None:
        """
        Initialize the database schema.

        Args:
            drop_existing: If True, drop all tables before creating
        """
        engine = self.engine

        if drop_existing:
            logger.warning("Dropping all existing tables...")
            Base.metadata.drop_all(bind=engine)

        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialization complete")

    def verify_connection(self) -> bool:
        """Return True if a trivial query succeeds against the store."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection verified")
            return True
        except SQLAlchemyError:
            logger.exception("Database connection failed")
            return False

    def close(self) -> None:
        """Dispose of the engine and forget the session factory."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


_db_manager: DatabaseManager | None = None


def get_db_manager(database_url: str | None = None) -> DatabaseManager:
    """
    Get the global database manager instance.

    Args:
        database_url: Database URL (only used on first call)
    """
    global _db_manager  # noqa: PLW0603 - Singleton pattern for database manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)

    return _db_manager


def reset_db_manager() -> None:
    """Close and forget the global database manager."""
    global _db_manager  # noqa: PLW0603

    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Convenience context manager over the global database manager."""
    with get_db_manager().session_scope() as session:
        yield session


def safe_flush(session: Session, operation: str) -> None:
    """
    Flush pending changes, translating store failures.

    Raises:
        StorageError: If the flush fails
    """
    try:
        session.flush()
    except SQLAlchemyError as e:
        raise StorageError(f"Database operation '{operation}' failed: {e!s}") from e


def safe_query(session: Session, query_func: Callable[[Session], T], error_msg: str) -> T:
    """
    Execute a query, translating store failures.

    Args:
        session: The database session
        query_func: Function that performs the query
        error_msg: Message prefix for the raised error

    Raises:
        StorageError: If the query fails
    """
    try:
        return query_func(session)
    except SQLAlchemyError as e:
        logger.exception("Query failed")
        raise StorageError(f"{error_msg}: Database query failed") from e
