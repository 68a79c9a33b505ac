# brewtrack/errors.py
"""
Error taxonomy shared by the services, the query facade and the HTTP layer.

Services raise these unchanged; only the query facade rewrites the message of a
StorageError before it reaches a client.
"""
from typing import Optional


class BrewtrackError(Exception):
    """Base class for every error raised on purpose by brewtrack."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BrewtrackError):
    """The referenced row does not exist or belongs to another user."""

    @classmethod
    def for_entity(cls, entity: str) -> "NotFoundError":
        return cls(f"Specified {entity} does not exist.")


class ConflictError(BrewtrackError):
    """A sensor already has an open association."""


class ValidationError(BrewtrackError):
    """Invalid input, optionally tied to one field."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self):
        return {self.field or "non_field_errors": [self.message]}


class MalformedCursorError(ValidationError):
    """A pagination token could not be decoded."""

    def __init__(self, message: str = "Malformed pagination cursor.", field: Optional[str] = "after"):
        super().__init__(message, field)


class StorageError(BrewtrackError):
    """Failure of the persistence layer."""
