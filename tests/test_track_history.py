"""Tests for lending history assembly."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from book_lending.database.schema import Book as BookDB
from book_lending.database.schema import BookTrackingEvent as EventDB
from book_lending.database.track_history import TrackHistoryAssembler
from book_lending.models import BookAction


@pytest.fixture
def book(session):
    record = BookDB(id=uuid4(), name="Neverwhere", year=1996, is_available=True)
    session.add(record)
    session.flush()
    return record


def record_event(session, book, account_id, action, at):
    session.add(EventDB(book_id=book.id, account_id=account_id, action=action.value, action_time=at))
    session.flush()


class TestGetHistory:
    """Test the assembled read model."""

    def test_entries_newest_first(self, session, book, insert_account):
        alice = insert_account(session, "alice", email="alice@example.com")
        start = datetime(2024, 3, 1, 12, 0)
        record_event(session, book, alice, BookAction.TOOK, start)
        record_event(session, book, alice, BookAction.PUT, start + timedelta(days=3))

        history = TrackHistoryAssembler(session).get_history(alice, book.id)

        assert [t.action for t in history.tracks] == [BookAction.PUT, BookAction.TOOK]
        assert [t.action_time for t in history.tracks] == [start + timedelta(days=3), start]
        assert all(t.book_name == "Neverwhere" for t in history.tracks)
        assert history.tracks[0].email == "alice@example.com"

    def test_timestamp_ties_ordered_by_insertion(self, session, book, insert_account):
        alice = insert_account(session, "alice")
        bob = insert_account(session, "bob")
        at = datetime(2024, 3, 1, 12, 0)
        record_event(session, book, alice, BookAction.TOOK, at)
        record_event(session, book, bob, BookAction.TOOK, at)

        history = TrackHistoryAssembler(session).get_history(bob, book.id)

        assert [t.login for t in history.tracks] == ["bob", "alice"]
        assert history.can_be_putted is True

    def test_max_entries_keeps_most_recent(self, session, book, insert_account):
        alice = insert_account(session, "alice")
        start = datetime(2024, 3, 1)
        actions = [BookAction.TOOK, BookAction.PUT, BookAction.TOOK, BookAction.PUT]
        for day, action in enumerate(actions):
            record_event(session, book, alice, action, start + timedelta(days=day))

        history = TrackHistoryAssembler(session).get_history(alice, book.id, max_entries=3)

        assert len(history.tracks) == 3
        assert history.tracks[0].action_time == start + timedelta(days=3)
        assert history.tracks[-1].action_time == start + timedelta(days=1)

    def test_zero_max_entries_keeps_all(self, session, book, insert_account):
        alice = insert_account(session, "alice")
        for day in range(5):
            record_event(session, book, alice, BookAction.TOOK, datetime(2024, 3, 1) + timedelta(days=day))

        assert len(TrackHistoryAssembler(session).get_history(alice, book.id, max_entries=0).tracks) == 5

    def test_can_be_putted_only_for_current_holder(self, session, book, insert_account):
        alice = insert_account(session, "alice")
        bob = insert_account(session, "bob")
        record_event(session, book, alice, BookAction.TOOK, datetime(2024, 3, 1))
        assembler = TrackHistoryAssembler(session)

        assert assembler.get_history(alice, book.id).can_be_putted is True
        assert assembler.get_history(bob, book.id).can_be_putted is False

        record_event(session, book, alice, BookAction.PUT, datetime(2024, 3, 2))
        assert assembler.get_history(alice, book.id).can_be_putted is False

    def test_unknown_account_sees_no_tracks(self, session, book, insert_account):
        alice = insert_account(session, "alice")
        record_event(session, book, alice, BookAction.TOOK, datetime(2024, 3, 1))

        history = TrackHistoryAssembler(session).get_history(uuid4(), book.id)

        assert history.book_name == "Neverwhere"
        assert history.can_be_putted is False
        assert history.tracks == []

    def test_missing_book_placeholder(self, session, insert_account):
        alice = insert_account(session, "alice")
        missing_id = uuid4()

        history = TrackHistoryAssembler(session).get_history(alice, missing_id)

        assert history.book_id != missing_id
        assert history.exists is False
        assert history.is_book_available is None
        assert history.can_be_putted is False
