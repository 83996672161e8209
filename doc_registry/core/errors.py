"""
Registry Errors

Typed failures raised by the operations layer. Each kind maps to exactly one
HTTP status in the application's exception handlers.
"""

from typing import Any


class RegistryError(Exception):
    """Base class for registry failures surfaced to callers."""

    code: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidArgumentError(RegistryError):
    """Malformed or missing input. Always correctable by the client."""

    code = "invalid_argument"
    status_code = 400

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class ConflictError(RegistryError):
    """A document with the requested id already exists in some lifecycle state."""

    code = "conflict"
    status_code = 409


class NotFoundOrDeniedError(RegistryError):
    """
    The document is absent, soft-deleted, or the caller lacks permission.

    The three cases are deliberately indistinguishable to callers.
    """

    code = "not_found_or_denied"
    status_code = 404

    def __init__(self, message: str = "Not found or access denied"):
        super().__init__(message)
