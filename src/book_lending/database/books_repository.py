"""
Books repository for the Book Lending Tracker.

This is the public data-access contract used by presentation code. Every
operation opens its own transactional scope through the DatabaseManager:

1. **Reads**: single books, filtered pages and their total counts, lending
   history. Missing books yield ``None`` or placeholder results.
2. **Catalog writes**: add, upsert-style update and delete. Book rows and
   author links are written in one transaction.
3. **Lending**: take and put, which flip the availability flag and append a
   tracking event atomically.

Missing books or accounts never raise; store failures surface as
``StorageError`` after the transaction has been rolled back.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from ..config import LendingConfig, get_config
from ..database.schema import Book as BookDB
from ..database.session import DatabaseManager, get_db_manager, safe_flush, safe_query
from ..models.book import Book as BookModel
from ..models.tracking import BookAction, BookTrackList
from .author_linker import AuthorLinker
from .availability import AvailabilityStateMachine
from .book_query import BookFilter, BookQueryBuilder
from .repository import PageParams, PaginatedResponse
from .track_history import TrackHistoryAssembler

logger = logging.getLogger(__name__)


class BooksRepository:
    """
    Façade over the query builder, author linker, availability state machine
    and history assembler.
    """

    def __init__(self, db_manager: DatabaseManager | None = None, config: LendingConfig | None = None):
        config = config or get_config()
        self.db = db_manager or get_db_manager()

        # Search collation follows the manager, which sets up LIKE on its connections
        if config.search_case_sensitive != self.db.case_sensitive_like:
            config = config.model_copy(update={"search_case_sensitive": self.db.case_sensitive_like})
        self.config = config

    def _page(self, offset: int, count: int | None) -> PageParams:
        return PageParams(offset=offset, limit=self.config.default_page_size if count is None else count)

    # === Reads ===

    def get_book(self, book_id: UUID) -> BookModel | None:
        """Get a book with its author names, or None if it does not exist."""
        with self.db.session_scope() as session:
            record = safe_query(session, lambda s: s.get(BookDB, book_id), "Failed to get book")
            if record is None:
                return None
            return BookQueryBuilder(session, self.config).to_models([record])[0]

    def get_books(
        self,
        search_string: str | None = "",
        only_available: bool = False,
        user_id: UUID | None = None,
        offset: int = 0,
        count: int | None = None,
    ) -> list[BookModel]:
        """
        Get one page of books matching the filters.

        Args:
            search_string: Substring of name, year or an author name
            only_available: Only books that can be taken
            user_id: Only books currently held by this account
            offset: Number of matches to skip
            count: Page size; None uses the configured default
        """
        book_filter = BookFilter(search=search_string, only_available=only_available, owner_id=user_id)
        with self.db.session_scope() as session:
            return BookQueryBuilder(session, self.config).fetch(book_filter, self._page(offset, count))

    def get_available_books(
        self, search_string: str | None = "", offset: int = 0, count: int | None = None
    ) -> list[BookModel]:
        return self.get_books(search_string, True, None, offset, count)

    def get_books_by_user(
        self, user_id: UUID, search_string: str | None = "", offset: int = 0, count: int | None = None
    ) -> list[BookModel]:
        return self.get_books(search_string, False, user_id, offset, count)

    def get_books_total_count(self, search_string: str | None = "") -> int:
        return self._count(BookFilter(search=search_string))

    def get_available_books_total_count(self, search_string: str | None = "") -> int:
        return self._count(BookFilter(search=search_string, only_available=True))

    def get_books_by_user_total_count(self, user_id: UUID, search_string: str | None = "") -> int:
        return self._count(BookFilter(search=search_string, owner_id=user_id))

    def _count(self, book_filter: BookFilter) -> int:
        with self.db.session_scope() as session:
            return BookQueryBuilder(session, self.config).count(book_filter)

    def get_books_page(
        self,
        search_string: str | None = "",
        only_available: bool = False,
        user_id: UUID | None = None,
        offset: int = 0,
        count: int | None = None,
    ) -> PaginatedResponse[BookModel]:
        """Get a page of books and the total match count from one read scope."""
        book_filter = BookFilter(search=search_string, only_available=only_available, owner_id=user_id)
        page = self._page(offset, count)
        with self.db.session_scope() as session:
            builder = BookQueryBuilder(session, self.config)
            items = builder.fetch(book_filter, page)
            total = builder.count(book_filter)
        return PaginatedResponse[BookModel](items=items, total=total, offset=page.offset, limit=page.limit)

    def get_book_track(self, account_id: UUID, book_id: UUID, tracks_count: int = 0) -> BookTrackList:
        """Lending history of a book; ``tracks_count`` of 0 returns every entry."""
        with self.db.session_scope() as session:
            return TrackHistoryAssembler(session, self.config).get_history(account_id, book_id, tracks_count)

    # === Catalog writes ===

    def add_book(self, book: BookModel) -> None:
        """Insert a book and link its authors in one transaction."""
        with self.db.session_scope() as session:
            self._insert_book(session, book)

    def update_book(self, book: BookModel) -> None:
        """
        Overwrite a book's name, year and authors.

        A book id that does not exist is inserted instead (upsert). Author
        links are replaced wholesale; the availability flag of an existing book
        is only changed by take/put.
        """
        with self.db.session_scope() as session:
            record = safe_query(session, lambda s: s.get(BookDB, book.id), "Failed to get book for update")
            if record is None:
                logger.info("Book %s not found, adding it instead of updating", book.id)
                self._insert_book(session, book)
                return

            record.name = book.name
            record.year = book.year
            AuthorLinker(session, self.config).replace_authors(record.id, book.authors)
            safe_flush(session, "update book")
            logger.info("Updated book %s", book.id)

    def delete_book(self, book_id: UUID) -> bool:
        """
        Delete a book row.

        Author links and tracking events of the book are kept.

        Returns:
            True if a book was deleted, False if none existed
        """
        with self.db.session_scope() as session:
            record = safe_query(session, lambda s: s.get(BookDB, book_id), "Failed to get book for deletion")
            if record is None:
                return False
            session.delete(record)
            safe_flush(session, "delete book")
            logger.info("Deleted book %s", book_id)
            return True

    def _insert_book(self, session: Session, book: BookModel) -> None:
        # Books start available; only take/put move the flag afterwards
        record = BookDB(id=book.id, name=book.name, year=book.year, is_available=True)
        session.add(record)
        safe_flush(session, "add book")
        AuthorLinker(session, self.config).reconcile_authors(record.id, book.authors)
        logger.info("Added book %s (%s)", book.id, book.name)

    # === Lending ===

    def do_book_action(self, action: BookAction | str, account_id: UUID, book_id: UUID) -> None:
        """
        Apply a Took or Put action to a book.

        Raises:
            UnsupportedActionError: If the action is not Took or Put
        """
        with self.db.session_scope() as session:
            AvailabilityStateMachine(session, self.config).apply_action(action, account_id, book_id)

    def take_book(self, account_id: UUID, book_id: UUID) -> None:
        self.do_book_action(BookAction.TOOK, account_id, book_id)

    def put_book(self, account_id: UUID, book_id: UUID) -> None:
        self.do_book_action(BookAction.PUT, account_id, book_id)
