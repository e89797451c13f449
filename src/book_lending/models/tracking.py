"""
Lending history models for the Book Lending Tracker.

- BookAction: the two transitions of the availability state machine
- BookTrack: one tracking event joined with the acting account's identity
- BookTrackList: read model assembled for a single book and requesting account
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class BookAction(str, Enum):
    """Action recorded in the tracking log."""

    TOOK = "Took"
    PUT = "Put"


class BookTrack(BaseModel):
    """A single entry of a book's lending history."""

    book_id: UUID
    book_name: str | None = None
    login: str = Field(..., description="Login of the account that acted")
    email: str | None = Field(None, description="Email from the account's profile")
    action_time: datetime = Field(..., description="UTC time the action was recorded")
    action: BookAction


class BookTrackList(BaseModel):
    """
    Lending history of a book as seen by one account.

    When the book does not exist ``book_id`` is a freshly generated sentinel
    and ``book_name``/``is_book_available`` are ``None``; callers should check
    ``exists`` before treating the id as a real identity.
    """

    book_id: UUID
    book_name: str | None = None
    is_book_available: bool | None = None
    can_be_putted: bool = Field(
        default=False,
        description="The requesting account holds the book and may return it",
    )
    tracks: list[BookTrack] = Field(
        default_factory=list,
        description="Tracking entries, most recent first",
    )

    @property
    def exists(self) -> bool:
        return self.book_name is not None

    @property
    def last_track(self) -> BookTrack | None:
        return self.tracks[0] if self.tracks else None
