"""
Exceptions raised by the crime record engine and its collaborators.

Every error carries the HTTP status it maps to at the request boundary.
"""

from http import HTTPStatus
from typing import Any, Dict, Optional


class StreetSafetyError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details
        status_code: HTTP status used when the error reaches the API
    """

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a response body."""
        body: Dict[str, Any] = {"detail": self.message}
        if self.details:
            body["details"] = self.details
        return body

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(StreetSafetyError):
    """Missing or malformed input, e.g. an empty address on submission."""

    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(message, details=details)
        self.field = field


class GeocodingError(ValidationError):
    """A location string could not be resolved to coordinates."""

    def __init__(self, query: str, message: Optional[str] = None):
        super().__init__(
            message
            or f"Could not find coordinates for '{query}'. Please try a more specific address.",
            field="address",
        )
        self.query = query


class NotFoundError(StreetSafetyError):
    """Unknown record id."""

    status_code = HTTPStatus.NOT_FOUND

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(f"{resource} with id {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class AuthError(StreetSafetyError):
    """Bad credentials."""

    status_code = HTTPStatus.UNAUTHORIZED


class StoreError(StreetSafetyError):
    """The persistence layer failed."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
