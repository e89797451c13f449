"""
Author linking for the Book Lending Tracker.

Books carry a free-text list of author names. The linker maps each name to a
row of the authors table, creating it on first use, and makes sure exactly one
book_authors row exists per (book, author) pair. Authors are never removed,
even when no book references them any more.
"""

import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from ..database.schema import Author as AuthorDB
from ..database.schema import BookAuthor as BookAuthorDB
from ..database.session import safe_flush, safe_query
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class AuthorLinker(SessionRepository):
    """Reconciles a book's author names with the authors and link tables."""

    def get_or_create_author(self, name: str) -> AuthorDB:
        """
        Return the author row for ``name``, inserting it if missing.

        The insert runs in a savepoint against the unique name constraint; if
        a concurrent transaction created the same name first, the savepoint is
        rolled back and the committed row is read instead.
        """
        query = select(AuthorDB).where(AuthorDB.name == name)
        author = safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to get author by name",
        )
        if author is not None:
            return author

        try:
            with self.session.begin_nested():
                author = AuthorDB(name=name)
                self.session.add(author)
            logger.debug("Created author %r", name)
            return author
        except IntegrityError:
            logger.debug("Author %r created concurrently, re-reading", name)
            return safe_query(
                self.session,
                lambda s: s.execute(query).scalar_one(),
                "Failed to re-read author after conflict",
            )

    def linked_author_ids(self, book_id: UUID) -> set[int]:
        query = select(BookAuthorDB.author_id).where(BookAuthorDB.book_id == book_id)
        return set(
            safe_query(
                self.session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to get book author links",
            )
        )

    def reconcile_authors(self, book_id: UUID, author_names: Iterable[str] | None) -> list[AuthorDB]:
        """
        Ensure ``book_id`` is linked to every author in ``author_names``.

        Links that already exist are left untouched, so running this twice
        with the same names adds nothing. An empty or missing list is a no-op.

        Returns:
            The author rows now linked for the given names
        """
        if not author_names:
            return []

        linked = self.linked_author_ids(book_id)
        authors: list[AuthorDB] = []

        for name in author_names:
            author = self.get_or_create_author(name)
            authors.append(author)
            if author.id in linked:
                continue
            self.session.add(BookAuthorDB(book_id=book_id, author_id=author.id))
            linked.add(author.id)

        safe_flush(self.session, "link book authors")
        return authors

    def clear_links(self, book_id: UUID) -> int:
        """Remove every author link of a book; the authors themselves stay."""
        result = safe_query(
            self.session,
            lambda s: s.execute(delete(BookAuthorDB).where(BookAuthorDB.book_id == book_id)),
            "Failed to remove book author links",
        )
        return result.rowcount

    def replace_authors(self, book_id: UUID, author_names: Iterable[str] | None) -> list[AuthorDB]:
        """Replace all author links of a book with ``author_names``."""
        self.clear_links(book_id)
        return self.reconcile_authors(book_id, author_names)

    def author_names_by_book(self, book_ids: Iterable[UUID]) -> dict[UUID, list[str]]:
        """Map each book id to its linked author names, sorted by name."""
        book_ids = list(book_ids)
        if not book_ids:
            return {}

        query = (
            select(BookAuthorDB.book_id, AuthorDB.name)
            .join(AuthorDB, BookAuthorDB.author_id == AuthorDB.id)
            .where(BookAuthorDB.book_id.in_(book_ids))
            .order_by(AuthorDB.name)
        )
        rows = safe_query(
            self.session,
            lambda s: s.execute(query).all(),
            "Failed to get author names",
        )

        names: dict[UUID, list[str]] = {book_id: [] for book_id in book_ids}
        for book_id, name in rows:
            names[book_id].append(name)
        return names
