#!/usr/bin/env python3
"""
Initialize the Book Lending Tracker database.

This script:
1. Creates all database tables
2. Optionally loads a small sample catalog
3. Verifies the expected tables exist

Usage:
    python scripts/init_database.py [--drop-existing] [--sample-data] [--database-url URL]
"""

import argparse
import logging
import sys

from sqlalchemy import inspect

from book_lending.database import AccountRepository, BooksRepository, get_db_manager
from book_lending.database.repository import RepositoryException
from book_lending.logging_config import configure_logging
from book_lending.models import AccountCreateSchema, Book

logger = logging.getLogger(__name__)

EXPECTED_TABLES = {
    "accounts",
    "authors",
    "book_authors",
    "book_tracking",
    "books",
    "profiles",
}


def main():
    """Main entry point for database initialization."""
    parser = argparse.ArgumentParser(description="Initialize the Book Lending Tracker database")
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating new ones",
    )
    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Load sample data after creating tables",
    )
    parser.add_argument(
        "--database-url",
        help="Override default database URL",
    )

    args = parser.parse_args()
    configure_logging()

    logger.info("Initializing database manager...")
    db_manager = get_db_manager(args.database_url)

    if not db_manager.verify_connection():
        logger.error("Failed to connect to database")
        sys.exit(1)

    try:
        db_manager.init_database(drop_existing=args.drop_existing)

        if args.sample_data:
            logger.info("Loading sample data...")
            load_sample_data(db_manager)

        tables = set(inspect(db_manager.engine).get_table_names())
        logger.info("Created tables: %s", ", ".join(sorted(tables)))

        missing_tables = EXPECTED_TABLES - tables
        if missing_tables:
            logger.error("Missing expected tables: %s", missing_tables)
            sys.exit(1)

        logger.info("Database initialization complete")

    except RepositoryException:
        logger.exception("Database initialization failed")
        sys.exit(1)
    finally:
        db_manager.close()


def load_sample_data(db_manager):
    """
    Load a small sample catalog.

    This creates two accounts, four books, and one open loan.
    """
    accounts = AccountRepository(db_manager)
    books = BooksRepository(db_manager)

    alice = accounts.create_account(AccountCreateSchema(login="alice", email="alice@example.com"))
    accounts.create_account(AccountCreateSchema(login="bob", email="bob@example.com"))

    catalog = [
        Book(name="Dune", authors=["Frank Herbert"], year=1965),
        Book(name="The Left Hand of Darkness", authors=["Ursula K. Le Guin"], year=1969),
        Book(name="Good Omens", authors=["Terry Pratchett", "Neil Gaiman"], year=1990),
        Book(name="Neuromancer", authors=["William Gibson"], year=1984),
    ]
    for book in catalog:
        books.add_book(book)

    books.take_book(alice.id, catalog[0].id)

    logger.info("Created 2 accounts")
    logger.info("Created %d books", len(catalog))
    logger.info("Created 1 open loan")


if __name__ == "__main__":
    main()
