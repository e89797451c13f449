"""
Book query construction for the Book Lending Tracker.

One filter set drives both the page query and its count twin, so the total
shown next to a page always counts the same books the pages walk through:

- search: substring of the name, of the year as text, or of any linked
  author's name
- owner: books currently held by an account (unavailable, latest event is
  that account's Took)
- only_available: books whose availability flag is set

Pages are ordered by name, then id, which keeps offsets stable between calls.
"""

from collections.abc import Sequence
from uuid import UUID

from pydantic import BaseModel, field_validator
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from ..database.schema import Author as AuthorDB
from ..database.schema import Book as BookDB
from ..database.schema import BookAuthor as BookAuthorDB
from ..database.session import safe_query
from ..models.book import Book as BookModel
from .author_linker import AuthorLinker
from .availability import held_book_ids
from .repository import PageParams, SessionRepository


class BookFilter(BaseModel):
    """Filters shared by book pages and book counts."""

    search: str | None = ""
    only_available: bool = False
    owner_id: UUID | None = None

    @field_validator("search", mode="before")
    @classmethod
    def empty_search(cls, v: str | None) -> str:
        """A missing search string matches every book."""
        return "" if v is None else v


class BookQueryBuilder(SessionRepository):
    """Builds and runs filtered, paginated book queries."""

    def _contains(self, column, term: str) -> ColumnElement[bool]:
        # LIKE wildcards in user input are matched literally
        if self.config.search_case_sensitive:
            return column.contains(term, autoescape=True)
        return column.icontains(term, autoescape=True)

    def filter_clauses(self, book_filter: BookFilter) -> list[ColumnElement[bool]]:
        """WHERE clauses over the books table for ``book_filter``."""
        clauses: list[ColumnElement[bool]] = []

        if book_filter.owner_id is not None:
            clauses.append(BookDB.is_available.is_(False))
            clauses.append(BookDB.id.in_(held_book_ids(book_filter.owner_id)))

        if book_filter.search:
            book_ids_by_author = (
                select(BookAuthorDB.book_id)
                .join(AuthorDB, BookAuthorDB.author_id == AuthorDB.id)
                .where(self._contains(AuthorDB.name, book_filter.search))
            )
            clauses.append(
                or_(
                    self._contains(BookDB.name, book_filter.search),
                    self._contains(cast(BookDB.year, String), book_filter.search),
                    BookDB.id.in_(book_ids_by_author),
                )
            )

        if book_filter.only_available:
            clauses.append(BookDB.is_available.is_(True))

        return clauses

    def build_query(self, book_filter: BookFilter, page: PageParams | None = None):
        """Ordered SELECT of book rows for one page of ``book_filter``."""
        query = select(BookDB).where(*self.filter_clauses(book_filter)).order_by(BookDB.name, BookDB.id)

        if page is not None:
            page.validate_params()
            query = query.offset(page.offset)
            if page.limit is not None:
                query = query.limit(page.limit)

        return query

    def build_count_query(self, book_filter: BookFilter):
        return select(func.count()).select_from(BookDB).where(*self.filter_clauses(book_filter))

    def fetch(self, book_filter: BookFilter, page: PageParams | None = None) -> list[BookModel]:
        query = self.build_query(book_filter, page)
        records = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to get books",
        )
        return self.to_models(records)

    def count(self, book_filter: BookFilter) -> int:
        query = self.build_count_query(book_filter)
        return (
            safe_query(
                self.session,
                lambda s: s.execute(query).scalar(),
                "Failed to count books",
            )
            or 0
        )

    def to_models(self, records: Sequence[BookDB]) -> list[BookModel]:
        """Convert book rows to models, loading author names in one query."""
        names = AuthorLinker(self.session, self.config).author_names_by_book(
            record.id for record in records
        )
        return [
            BookModel(
                id=record.id,
                name=record.name,
                authors=names.get(record.id, []),
                year=record.year,
                is_available=record.is_available,
            )
            for record in records
        ]
