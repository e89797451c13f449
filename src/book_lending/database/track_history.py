"""
Lending history assembly for the Book Lending Tracker.

The history of a book is read in one query that joins tracking events with
accounts and profiles; ordering (newest first) and truncation are applied to
the joined rows.
"""

import logging
from uuid import UUID, uuid4

from sqlalchemy import select

from ..database.schema import Account as AccountDB
from ..database.schema import Book as BookDB
from ..database.schema import BookTrackingEvent as EventDB
from ..database.schema import Profile as ProfileDB
from ..database.session import safe_query
from ..models.tracking import BookAction, BookTrack, BookTrackList
from .availability import AvailabilityStateMachine
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class TrackHistoryAssembler(SessionRepository):
    """Builds the BookTrackList read model."""

    def get_history(self, account_id: UUID, book_id: UUID, max_entries: int = 0) -> BookTrackList:
        """
        Assemble the lending history of a book for ``account_id``.

        Args:
            account_id: Account asking for the history
            book_id: Book whose history is read
            max_entries: Keep only the most recent entries; 0 keeps all

        Returns:
            The history; a placeholder with a sentinel id if the book is missing
        """
        book = safe_query(
            self.session,
            lambda s: s.get(BookDB, book_id),
            "Failed to get book for history",
        )
        if book is None:
            logger.debug("History requested for missing book %s", book_id)
            return BookTrackList(book_id=uuid4())

        result = BookTrackList(
            book_id=book.id,
            book_name=book.name,
            is_book_available=book.is_available,
        )

        holder = AvailabilityStateMachine(self.session, self.config).current_holder(book_id)
        result.can_be_putted = holder is not None and holder == account_id

        if not self._has_profile(account_id):
            logger.debug("Account %s has no resolvable profile, omitting tracks", account_id)
            return result

        result.tracks = self.get_tracks(book, max_entries)
        return result

    def get_tracks(self, book: BookDB, max_entries: int = 0) -> list[BookTrack]:
        query = (
            select(EventDB.action, EventDB.action_time, AccountDB.login, ProfileDB.email)
            .join(AccountDB, EventDB.account_id == AccountDB.id)
            .join(ProfileDB, AccountDB.profile_id == ProfileDB.id)
            .where(EventDB.book_id == book.id)
            .order_by(EventDB.action_time.desc(), EventDB.id.desc())
        )
        if max_entries > 0:
            query = query.limit(max_entries)

        rows = safe_query(
            self.session,
            lambda s: s.execute(query).all(),
            "Failed to get book tracks",
        )
        return [
            BookTrack(
                book_id=book.id,
                book_name=book.name,
                login=row.login,
                email=row.email,
                action_time=row.action_time,
                action=BookAction(row.action),
            )
            for row in rows
        ]

    def _has_profile(self, account_id: UUID) -> bool:
        query = (
            select(ProfileDB.id)
            .join(AccountDB, AccountDB.profile_id == ProfileDB.id)
            .where(AccountDB.id == account_id)
        )
        profile_id = safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to resolve account profile",
        )
        return profile_id is not None
