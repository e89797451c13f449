"""
Availability state machine for the Book Lending Tracker.

A book is either Available or Unavailable:

    Available --Took--> Unavailable
    Unavailable --Put--> Available

Applying an action is a blind write of the target flag plus the append of one
tracking event; the current state is not checked, so a second Took keeps the
book unavailable and appends a second event. The flag and the event are written
in the caller's session and become visible together when it commits.
"""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, select

from ..database.schema import Account as AccountDB
from ..database.schema import Book as BookDB
from ..database.schema import BookTrackingEvent as EventDB
from ..database.session import safe_flush, safe_query
from ..models.tracking import BookAction
from .repository import SessionRepository, UnsupportedActionError

logger = logging.getLogger(__name__)

# Flag value each action leaves on the book row
TRANSITIONS: dict[BookAction, bool] = {
    BookAction.TOOK: False,
    BookAction.PUT: True,
}


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the form stored in book_tracking."""
    return datetime.now(UTC).replace(tzinfo=None)


def coerce_action(action: BookAction | str) -> BookAction:
    """
    Resolve ``action`` to a supported BookAction.

    Raises:
        UnsupportedActionError: For anything outside Took/Put
    """
    if isinstance(action, BookAction):
        return action
    try:
        return BookAction(action)
    except ValueError:
        raise UnsupportedActionError(action) from None


def latest_events_subquery():
    """
    Latest tracking event of every book.

    Events are ranked per book by action time, then by id for events that
    share a timestamp; rank 1 is the book's current state in the log.
    """
    ranked = select(
        EventDB.book_id,
        EventDB.account_id,
        EventDB.action,
        func.row_number()
        .over(
            partition_by=EventDB.book_id,
            order_by=(EventDB.action_time.desc(), EventDB.id.desc()),
        )
        .label("rank"),
    ).subquery("ranked_events")

    return (
        select(ranked.c.book_id, ranked.c.account_id, ranked.c.action)
        .where(ranked.c.rank == 1)
        .subquery("latest_events")
    )


def held_book_ids(account_id: UUID):
    """Select the ids of books whose latest event is a Took by ``account_id``."""
    latest = latest_events_subquery()
    return select(latest.c.book_id).where(
        latest.c.action == BookAction.TOOK.value,
        latest.c.account_id == account_id,
    )


class AvailabilityStateMachine(SessionRepository):
    """Applies Took/Put transitions and records them in the tracking log."""

    def apply_action(
        self, action: BookAction | str, account_id: UUID, book_id: UUID
    ) -> EventDB | None:
        """
        Apply ``action`` to a book on behalf of an account.

        A missing account or book makes the call a silent no-op.

        Args:
            action: Took or Put
            account_id: Acting account
            book_id: Target book

        Returns:
            The appended tracking event, or None when nothing was recorded

        Raises:
            UnsupportedActionError: If the action is not Took or Put
        """
        action = coerce_action(action)

        account = safe_query(
            self.session,
            lambda s: s.get(AccountDB, account_id),
            "Failed to get account for book action",
        )
        if account is None:
            logger.info("Ignoring %s: account %s not found", action.value, account_id)
            return None

        book = safe_query(
            self.session,
            lambda s: s.get(BookDB, book_id),
            "Failed to get book for book action",
        )
        if book is None:
            logger.info("Ignoring %s: book %s not found", action.value, book_id)
            return None

        book.is_available = TRANSITIONS[action]

        tracking_event = EventDB(
            book_id=book_id,
            account_id=account_id,
            action=action.value,
            action_time=utc_now(),
        )
        self.session.add(tracking_event)
        safe_flush(self.session, f"{action.value} book")

        logger.info("Account %s %s book %s", account_id, action.value, book_id)
        return tracking_event

    def take(self, account_id: UUID, book_id: UUID) -> EventDB | None:
        return self.apply_action(BookAction.TOOK, account_id, book_id)

    def put(self, account_id: UUID, book_id: UUID) -> EventDB | None:
        return self.apply_action(BookAction.PUT, account_id, book_id)

    def current_holder(self, book_id: UUID) -> UUID | None:
        """Account of the latest Took with no Put after it, if any."""
        query = (
            select(EventDB.account_id, EventDB.action)
            .where(EventDB.book_id == book_id)
            .order_by(EventDB.action_time.desc(), EventDB.id.desc())
            .limit(1)
        )
        latest = safe_query(
            self.session,
            lambda s: s.execute(query).first(),
            "Failed to get latest tracking event",
        )
        if latest is None or latest.action != BookAction.TOOK.value:
            return None
        return latest.account_id
