"""
Domain exceptions raised by the review engine.

Every failed precondition maps to exactly one of these. The engine does
not know about HTTP; app.main translates ErrorKind to a status code.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories exposed to the request boundary."""

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    VALIDATION = "validation"


class ReviewServiceError(Exception):
    """Base exception for review engine failures."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        """
        Initialize the error.

        Args:
            message: Human-readable explanation returned to the client
        """
        self.message = message
        super().__init__(message)


class NotFoundError(ReviewServiceError):
    """Recipe or review does not exist."""

    kind = ErrorKind.NOT_FOUND


class ForbiddenError(ReviewServiceError):
    """Ownership violation or expired edit window."""

    kind = ErrorKind.FORBIDDEN


class ConflictError(ReviewServiceError):
    """Duplicate review, already-flagged review or self-flag attempt."""

    kind = ErrorKind.CONFLICT


class InvalidInputError(ReviewServiceError):
    """Malformed rating, comment, flag reason or listing parameter."""

    kind = ErrorKind.VALIDATION
