"""
SQLAlchemy database schema for the Book Lending Tracker.

Tables:
- books: the catalog, with a cached availability flag
- authors: author names, unique by name
- book_authors: many-to-many link between books and authors
- book_tracking: append-only log of Took/Put actions
- accounts / profiles: identities resolved for lending history

``book_authors.book_id`` and ``book_tracking.book_id`` carry no
foreign key: deleting a book removes the book row only, and its links and
tracking events remain in place.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship

# Base class for all SQLAlchemy models
Base = declarative_base()


class Book(Base):
    """
    Books table - the lendable catalog.

    ``is_available`` mirrors the latest tracking event of the book and is kept
    on the row so availability filters need no join.
    """

    __tablename__ = "books"

    id = Column(Uuid, primary_key=True)
    name = Column(String(500), nullable=False)
    year = Column(Integer, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_book_name", "name"),
        Index("idx_book_availability", "is_available"),
    )


class Author(Base):
    """
    Authors table - one row per distinct author name.

    Rows are created lazily the first time a book references the name and are
    never deleted.
    """

    __tablename__ = "authors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)

    links = relationship("BookAuthor", back_populates="author")

    __table_args__ = (UniqueConstraint("name", name="unique_author_name"),)


class BookAuthor(Base):
    """Book/author link table; the (book_id, author_id) pair is the identity."""

    __tablename__ = "book_authors"

    book_id = Column(Uuid, primary_key=True)
    author_id = Column(Integer, ForeignKey("authors.id"), primary_key=True)

    author = relationship("Author", back_populates="links")

    __table_args__ = (
        Index("idx_book_author_book", "book_id"),
        Index("idx_book_author_author", "author_id"),
    )


class Profile(Base):
    """Profiles table - contact details of an account."""

    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True)
    email = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    account = relationship("Account", back_populates="profile", uselist=False)


class Account(Base):
    """Accounts table - the identities that take and put books."""

    __tablename__ = "accounts"

    id = Column(Uuid, primary_key=True)
    login = Column(String(100), nullable=False, unique=True)
    profile_id = Column(Uuid, ForeignKey("profiles.id"), nullable=True)

    profile = relationship("Profile", back_populates="account")

    __table_args__ = (Index("idx_account_login", "login"),)


class BookTrackingEvent(Base):
    """
    Book tracking table - immutable audit log of Took/Put actions.

    Rows are only ever inserted. ``id`` increases monotonically and orders
    events that share a timestamp.
    """

    __tablename__ = "book_tracking"

    id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Uuid, nullable=False)
    account_id = Column(Uuid, ForeignKey("accounts.id"), nullable=False)
    action = Column(String(10), nullable=False)
    action_time = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_tracking_book_time", "book_id", "action_time"),
        Index("idx_tracking_account", "account_id"),
        CheckConstraint("action IN ('Took', 'Put')", name="check_tracking_action"),
    )
