"""
Database seeding for the Book Lending Tracker.

Generates a catalog, a set of accounts and a lending history with Faker. All
writes go through the repositories, so the seeded history obeys the same
invariants as live data: every availability flag matches the latest tracking
event of its book.

Usage:
    python -m book_lending.database.seed [--database-url URL] [--books N]
"""

import argparse
import logging
import random
from uuid import UUID

from faker import Faker

from ..logging_config import configure_logging
from ..models.account import Account, AccountCreateSchema
from ..models.book import Book
from .account_repository import AccountRepository
from .books_repository import BooksRepository
from .session import DatabaseManager

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Logs progress through the seeding steps."""

    def __init__(self, total_steps: int) -> None:
        self.total_steps = total_steps
        self.current_step = 0

    def update(self, task: str, increment: int = 1) -> None:
        self.current_step += increment
        percentage = (self.current_step / self.total_steps) * 100
        logger.info("[%5.1f%%] %s", percentage, task)


def generate_accounts(fake: Faker, num_accounts: int) -> list[AccountCreateSchema]:
    accounts = []
    logins: set[str] = set()
    while len(accounts) < num_accounts:
        login = fake.user_name()
        if login in logins:
            continue
        logins.add(login)
        accounts.append(
            AccountCreateSchema(
                login=login,
                email=fake.email(),
                first_name=fake.first_name(),
                last_name=fake.last_name(),
            )
        )
    return accounts


def generate_books(fake: Faker, rng: random.Random, num_books: int, num_authors: int) -> list[Book]:
    """Books drawing from a shared pool of author names, so authors repeat."""
    author_pool = list({fake.name() for _ in range(num_authors)})
    books = []
    for _ in range(num_books):
        # Most books have one author, some are co-written
        authors = rng.sample(author_pool, k=rng.choices([1, 2, 3], weights=[80, 15, 5])[0])
        books.append(
            Book(
                name=fake.catch_phrase().title(),
                authors=authors,
                year=rng.randint(1900, 2024),
            )
        )
    return books


def generate_lending_history(
    rng: random.Random,
    repo: BooksRepository,
    accounts: list[Account],
    books: list[Book],
    num_actions: int,
) -> int:
    """
    Replay random takes and returns through the repository.

    Only valid transitions are generated: a book is taken while available and
    put back by its holder.
    """
    holders: dict[UUID, UUID] = {}
    actions = 0
    for _ in range(num_actions):
        book = rng.choice(books)
        holder = holders.get(book.id)
        if holder is None:
            account = rng.choice(accounts)
            repo.take_book(account.id, book.id)
            holders[book.id] = account.id
        else:
            repo.put_book(holder, book.id)
            del holders[book.id]
        actions += 1
    return actions


def seed_database(
    db_manager: DatabaseManager,
    num_accounts: int = 20,
    num_books: int = 200,
    num_authors: int = 80,
    num_actions: int = 400,
    seed: int = 42,
) -> dict[str, int]:
    """
    Seed the database with generated data.

    Returns:
        Number of accounts, books and tracking events created
    """
    fake = Faker()
    fake.seed_instance(seed)
    rng = random.Random(seed)
    progress = ProgressReporter(total_steps=4)

    db_manager.init_database()
    progress.update("Database tables created")

    account_repo = AccountRepository(db_manager)
    accounts = [account_repo.create_account(data) for data in generate_accounts(fake, num_accounts)]
    progress.update(f"Generated {len(accounts)} accounts")

    books_repo = BooksRepository(db_manager)
    books = generate_books(fake, rng, num_books, num_authors)
    for book in books:
        books_repo.add_book(book)
    progress.update(f"Generated {len(books)} books")

    actions = generate_lending_history(rng, books_repo, accounts, books, num_actions) if accounts and books else 0
    progress.update(f"Generated {actions} tracking events")

    return {"accounts": len(accounts), "books": len(books), "events": actions}


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the Book Lending Tracker database")
    parser.add_argument("--database-url", help="Override default database URL")
    parser.add_argument("--accounts", type=int, default=20)
    parser.add_argument("--books", type=int, default=200)
    parser.add_argument("--actions", type=int, default=400)
    args = parser.parse_args()

    configure_logging()
    db_manager = DatabaseManager(args.database_url)
    try:
        summary = seed_database(
            db_manager,
            num_accounts=args.accounts,
            num_books=args.books,
            num_actions=args.actions,
        )
        logger.info("Seeding complete: %s", summary)
    finally:
        db_manager.close()


if __name__ == "__main__":
    main()
