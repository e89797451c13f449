"""
Book Lending Tracker Package.

A catalog of books and authors with a take/return lifecycle per account,
backed by relational storage.

Key Components:
- models: Pydantic models returned to callers
- database: SQLAlchemy schema, sessions and the repositories
- config: Configuration management with pydantic-settings
"""

__version__ = "0.1.0"

from . import database

__all__ = [
    "__version__",
    "database",
]
