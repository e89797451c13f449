"""Test configuration and fixtures for the Book Lending Tracker.

1. Isolated databases - each test gets a fresh in-memory SQLite store
2. Configuration overrides - test-specific settings, reset after each test
3. Identity factories - accounts with and without profiles

The in-memory store shares one connection, so a test must not keep a
``session`` open while calling repository façades.
"""

import os
from collections.abc import Generator
from pathlib import Path
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from book_lending.config import LendingConfig, reset_config, set_config
from book_lending.database import (
    AccountRepository,
    BooksRepository,
    DatabaseManager,
    reset_db_manager,
)
from book_lending.database.schema import Account as AccountDB
from book_lending.database.schema import Profile as ProfileDB
from book_lending.models import AccountCreateSchema, Book

# === Configuration Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for each test."""
    return tmp_path / "test_book_lending.db"


@pytest.fixture
def test_config(test_db_path: Path) -> Generator[LendingConfig, None, None]:
    """Provide a test-specific configuration installed as the global one."""
    reset_config()

    config = LendingConfig(
        database_path=test_db_path,
        debug=True,
        log_level="DEBUG",
    )
    set_config(config)

    yield config

    reset_config()


# === Database Fixtures ===


@pytest.fixture
def db_manager(test_config: LendingConfig) -> Generator[DatabaseManager, None, None]:
    """Create a database manager over an in-memory SQLite store."""
    manager = DatabaseManager("sqlite:///:memory:", config=test_config)
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def session(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    """Provide a transactional session for component tests."""
    with db_manager.session_scope() as session:
        yield session


@pytest.fixture
def books_repo(db_manager: DatabaseManager, test_config: LendingConfig) -> BooksRepository:
    return BooksRepository(db_manager, test_config)


@pytest.fixture
def accounts_repo(db_manager: DatabaseManager) -> AccountRepository:
    return AccountRepository(db_manager)


# === Identity Fixtures ===


@pytest.fixture
def account_a(accounts_repo: AccountRepository):
    return accounts_repo.create_account(
        AccountCreateSchema(login="alice", email="alice@example.com", first_name="Alice")
    )


@pytest.fixture
def account_b(accounts_repo: AccountRepository):
    return accounts_repo.create_account(AccountCreateSchema(login="bob", email="bob@example.com"))


def add_account(session: Session, login: str, email: str | None = "user@example.com") -> UUID:
    """Insert an account directly; ``email=None`` leaves it without a profile."""
    profile = ProfileDB(id=uuid4(), email=email) if email is not None else None
    account = AccountDB(id=uuid4(), login=login, profile=profile)
    session.add(account)
    if profile is not None:
        session.add(profile)
    session.flush()
    return account.id


@pytest.fixture
def insert_account():
    """Expose ``add_account`` to tests that work on a raw session."""
    return add_account


# === Test Data Fixtures ===


@pytest.fixture
def dune(books_repo: BooksRepository) -> Book:
    book = Book(name="Dune", authors=["Herbert"], year=1965)
    books_repo.add_book(book)
    return book


@pytest.fixture
def sample_books(books_repo: BooksRepository) -> list[Book]:
    """A small catalog with shared and co-written authors."""
    books = [
        Book(name="Dune", authors=["Frank Herbert"], year=1965),
        Book(name="Dune Messiah", authors=["Frank Herbert"], year=1969),
        Book(name="Good Omens", authors=["Terry Pratchett", "Neil Gaiman"], year=1990),
        Book(name="Neverwhere", authors=["Neil Gaiman"], year=1996),
        Book(name="The Left Hand of Darkness", authors=["Ursula K. Le Guin"], year=1969),
        Book(name="100% Pure", authors=[], year=2001),
    ]
    for book in books:
        books_repo.add_book(book)
    return books


# === Cleanup Fixtures ===


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Reset global singletons and test environment variables after each test."""
    yield

    reset_config()
    reset_db_manager()

    for key in list(os.environ.keys()):
        if key.startswith("BOOK_LENDING_TEST_"):
            del os.environ[key]
