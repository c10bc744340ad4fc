"""
Error Taxonomy Module

Domain exceptions raised by the metadata engine and its service layer. The API
layer maps each class to an HTTP status in ``projmeta.main``; nothing below the
API layer knows about HTTP.
"""
from dataclasses import dataclass, asdict
from typing import List


@dataclass(frozen=True)
class FieldError:
    """A single validation failure tied to a dotted field path."""
    field: str
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


class MetadataError(Exception):
    """Base class for every error raised by the metadata subsystem."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class MetadataValidationError(MetadataError):
    """
    The payload failed validation.

    Always carries at least one FieldError. Validation is all-or-nothing, so a
    caller receiving this error has not had any part of the payload applied.
    """

    def __init__(self, errors: List[FieldError]):
        if not errors:
            raise ValueError("MetadataValidationError requires at least one FieldError")
        super().__init__("Validation failed")
        self.errors = list(errors)

    def to_details(self) -> List[dict]:
        return [error.to_dict() for error in self.errors]


class AuthenticationError(MetadataError):
    """No recognised principal is attached to the request."""


class AuthorizationError(MetadataError):
    """The principal is known but lacks the role the operation needs."""


class NotFoundError(MetadataError):
    """
    The project (or a referenced custom field) does not exist.

    Also raised when the principal may not read the project, so that project
    existence is not leaked.
    """


class PersistenceError(MetadataError):
    """The record store rejected a write after validation succeeded."""
