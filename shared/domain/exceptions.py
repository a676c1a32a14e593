"""
Domain Error Taxonomy

Errors raised by domain services. Each carries the HTTP status it maps to
so the API layer can render it without knowing the concrete subclass.

- ValidationFailed: bad input shape or range (400)
- Forbidden: role or ownership check failed (403)
- NotFound: referenced record absent (404)
- Conflict: state or date conflict (409)
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400
    default_code = "error"
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None, *, errors: dict | None = None, code: str | None = None):
        self.message = message or self.default_message
        self.errors = errors or {}
        self.code = code or self.default_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload: dict = {"detail": self.message, "code": self.code}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationFailed(DomainError):
    status_code = 400
    default_code = "validation_error"
    default_message = "Validation failed."


class Forbidden(DomainError):
    status_code = 403
    default_code = "forbidden"
    default_message = "You do not have permission to perform this action."


class NotFound(DomainError):
    status_code = 404
    default_code = "not_found"
    default_message = "Not found."


class Conflict(DomainError):
    status_code = 409
    default_code = "conflict"
    default_message = "The request conflicts with the current state."
