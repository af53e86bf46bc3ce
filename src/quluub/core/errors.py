"""Domain errors raised by the Quluub services.

Services raise these instead of HTTP exceptions; a single handler registered
on the FastAPI application turns them into JSON error responses. Every error
carries the HTTP status it maps to and a short machine-readable kind.
"""

from __future__ import annotations

from typing import Any

from fastapi import status


class QuluubError(Exception):
    """Base exception for all domain-level failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    kind: str = "Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body sent to clients."""
        return {"detail": self.message, "error": self.kind}


class NotFoundError(QuluubError):
    """A referenced user or relationship does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    kind = "NotFound"


class DuplicateError(QuluubError):
    """The record being created already exists.

    For relationship requests the existing relationship is attached so the
    client can reconcile its view of the pair.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "Duplicate"

    def __init__(self, message: str, existing: Any | None = None) -> None:
        super().__init__(message)
        self.existing = existing

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.existing is not None:
            payload["relationship"] = self.existing
        return payload


class ForbiddenError(QuluubError):
    """The actor lacks the role required for the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    kind = "Forbidden"


class InvalidStateError(QuluubError):
    """The operation is not legal from the record's current state."""

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "InvalidState"


class InvalidTransitionError(InvalidStateError):
    """A requested status transition is not allowed."""

    kind = "InvalidTransition"


class AuthenticationError(QuluubError):
    """Login credentials did not match a user."""

    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "Unauthorized"


class UnavailableError(QuluubError):
    """The backing store failed transiently; nothing was written."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    kind = "Unavailable"
