"""Domain exceptions for filestore.

Base exception carries a human-readable message, a machine-readable code
and a details dict so callers can render failures uniformly.
"""

from typing import Any


class FilestoreException(Exception):
    """Base exception for all filestore errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. bucket, key, reason).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(FilestoreException):
    """Raised when caller input is invalid (e.g. bad base64, limit < 1)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)
