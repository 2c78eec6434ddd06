"""Application error types.

Every error carries a stable ``code`` and the HTTP status it maps to, so the
exception handlers in ``fittrack.main`` can render them uniformly.
"""

from __future__ import annotations

from typing import Any


class FitTrackError(Exception):
    """Base error for all FitTrack exceptions."""

    code: str = "internal_error"
    message: str = "An internal error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        if request_id:
            body["request_id"] = request_id
        return body


class AuthenticationError(FitTrackError):
    """Missing, invalid or inactive credential (401)."""

    code = "unauthorized"
    message = "Invalid or inactive API key"
    status_code = 401


class ValidationError(FitTrackError):
    """Malformed or out-of-range input (400)."""

    code = "invalid_payload"
    message = "Invalid payload"
    status_code = 400


class NotFoundError(FitTrackError):
    """Resource not found (404)."""

    code = "not_found"
    message = "Resource not found"
    status_code = 404


class ConflictError(FitTrackError):
    """Resource already exists (409)."""

    code = "conflict"
    message = "Conflict"
    status_code = 409


class StorageError(FitTrackError):
    """A database write failed (500)."""

    code = "storage_error"
    message = "Failed to save data"
    status_code = 500
