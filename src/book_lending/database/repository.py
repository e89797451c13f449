"""
Shared repository building blocks for the Book Lending Tracker.

Components that work inside a caller's transaction take a ``Session``
(``SessionRepository``); the public façades take a ``DatabaseManager`` and
open one transactional scope per operation.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..config import LendingConfig, get_config
from .errors import (
    DuplicateError,
    NotFoundError,
    RepositoryException,
    StorageError,
    UnsupportedActionError,
)

ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)

__all__ = [
    "DuplicateError",
    "NotFoundError",
    "PageParams",
    "PaginatedResponse",
    "RepositoryException",
    "SessionRepository",
    "StorageError",
    "UnsupportedActionError",
]


class PageParams(BaseModel):
    """Offset/limit window over an ordered result set; ``limit=None`` is unbounded."""

    offset: int = 0
    limit: int | None = 10

    def validate_params(self) -> None:
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")
        if self.limit is not None and self.limit < 0:
            raise ValueError("Limit must be >= 0")


class PaginatedResponse(BaseModel, Generic[ResponseSchemaType]):
    """A page of items together with the total match count."""

    items: list[ResponseSchemaType]
    total: int
    offset: int
    limit: int | None

    @property
    def has_next(self) -> bool:
        return self.offset + len(self.items) < self.total

    @property
    def has_previous(self) -> bool:
        return self.offset > 0


class SessionRepository:
    """Base for components that run inside an already-open session."""

    def __init__(self, session: Session, config: LendingConfig | None = None):
        """Initialize repository with database session."""
        self.session = session
        self.config = config or get_config()
