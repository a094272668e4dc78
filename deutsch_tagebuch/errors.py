"""Exception types shared by the services and the HTTP layer."""

from typing import Any, Optional


class TagebuchError(Exception):
    """Base class for all application errors."""


class ValidationError(TagebuchError, ValueError):
    """Caller supplied input that cannot be processed."""


class NotFoundError(TagebuchError, LookupError):
    """A requested row does not exist."""


class DuplicateError(TagebuchError):
    """A row with the same (case-insensitive) key already exists."""

    def __init__(self, message: str, existing: Optional[Any] = None) -> None:
        super().__init__(message)
        self.existing = existing


class PersistenceError(TagebuchError):
    """A store operation failed at the database level."""


class TranslationError(TagebuchError):
    """The translation backend failed or is not configured."""
