"""
Book Lending Tracker models.

Pydantic models returned by the repositories:
- Book: catalog entries with their author names
- Account: identities resolved for lending history
- BookAction, BookTrack, BookTrackList: the lending log read model
"""

from .account import Account, AccountCreateSchema
from .book import Book
from .tracking import BookAction, BookTrack, BookTrackList

__all__ = [
    "Account",
    "AccountCreateSchema",
    "Book",
    "BookAction",
    "BookTrack",
    "BookTrackList",
]
