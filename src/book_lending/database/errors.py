"""Exceptions raised by the Book Lending Tracker data-access layer."""


class RepositoryException(Exception):
    """Base exception for repository operations."""


class NotFoundError(RepositoryException):
    """Raised when an entity is not found."""


class DuplicateError(RepositoryException):
    """Raised when attempting to create a duplicate entity."""


class StorageError(RepositoryException):
    """Raised when the entity store fails to execute or commit a statement."""


class UnsupportedActionError(RepositoryException):
    """Raised when an action outside the Took/Put set is applied to a book."""

    def __init__(self, action: object):
        self.action = action
        super().__init__(f"Action {action!r} is not supported")
