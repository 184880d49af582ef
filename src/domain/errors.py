"""Failure taxonomy shared by the domain services and the persistence gateway.

Every error carries a user-facing ``message``. The HTTP layer maps the
classes below to status codes; nothing here knows about HTTP.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for failures surfaced to API callers."""

    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    default_message = "Not found"


class InvalidInputError(DomainError):
    """Raised for missing or malformed input."""

    default_message = "Invalid input"


class InvalidDateError(InvalidInputError):
    """Raised when the desired start date lies in the past."""

    default_message = "Start date cannot be in the past"


class InvalidStatusError(InvalidInputError):
    """Raised when a status is not one of the application statuses."""

    default_message = "Invalid status"


class InvalidPaymentMethodError(InvalidInputError):
    """Raised when a payment method is not supported."""

    default_message = "Invalid payment method"


class OutOfRangeError(InvalidInputError):
    """Raised when a rating falls outside 1..5."""

    default_message = "Rating must be between 1 and 5"


class IneligibleStateError(DomainError):
    """Raised when a review is requested for an application that is not completed."""

    default_message = "Reviews can only be left for completed courses"


class DuplicateReviewError(DomainError):
    """Raised when the user already reviewed the application."""

    default_message = "You have already reviewed this application"


class AlreadyExistsError(DomainError):
    """Raised when a unique field is already taken.

    ``field`` names the violated column when it is known.
    """

    default_message = "Record already exists"

    def __init__(self, message: str | None = None, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    default_message = "Invalid login or password"


class PermissionDeniedError(DomainError):
    """Raised when an account lacks the role required for an action."""

    default_message = "Access denied. Insufficient privileges."


class PersistenceError(DomainError):
    """Raised for lower-layer storage failures."""

    default_message = "Database error"
