"""
Database package for the Book Lending Tracker.

This package provides:
- SQLAlchemy schema definitions (schema.py)
- Session management and transactional scopes (session.py)
- The books repository façade and the components behind it
- Account registration and lookup
"""

from .account_repository import AccountRepository
from .author_linker import AuthorLinker
from .availability import AvailabilityStateMachine
from .book_query import BookFilter, BookQueryBuilder
from .books_repository import BooksRepository
from .errors import (
    DuplicateError,
    NotFoundError,
    RepositoryException,
    StorageError,
    UnsupportedActionError,
)
from .repository import PageParams, PaginatedResponse, SessionRepository
from .schema import (
    Account,
    Author,
    Base,
    Book,
    BookAuthor,
    BookTrackingEvent,
    Profile,
)
from .session import (
    DatabaseManager,
    get_db_manager,
    reset_db_manager,
    safe_flush,
    safe_query,
    session_scope,
)
from .track_history import TrackHistoryAssembler

__all__ = [
    "Account",
    "AccountRepository",
    "Author",
    "AuthorLinker",
    "AvailabilityStateMachine",
    "Base",
    "Book",
    "BookAuthor",
    "BookFilter",
    "BookQueryBuilder",
    "BookTrackingEvent",
    "BooksRepository",
    "DatabaseManager",
    "DuplicateError",
    "NotFoundError",
    "PageParams",
    "PaginatedResponse",
    "Profile",
    "RepositoryException",
    "SessionRepository",
    "StorageError",
    "TrackHistoryAssembler",
    "UnsupportedActionError",
    "get_db_manager",
    "reset_db_manager",
    "safe_flush",
    "safe_query",
    "session_scope",
]
