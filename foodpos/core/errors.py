"""
core/errors.py – Domain exceptions, each carrying its HTTP status.

Routes let these propagate; the app-level handler in main.py renders them as
{"success": false, "message": ...} plus any extra payload.
"""
from typing import Any


class PosError(Exception):
    status_code = 400

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_body(self) -> dict:
        return {"success": False, "message": self.message, **self.extra}


class InvalidInputError(PosError):
    """Missing or malformed request fields."""
    status_code = 400


class BusinessRuleError(PosError):
    """Request is well formed but violates a business rule."""
    status_code = 400


class NotFoundError(PosError):
    status_code = 404


class ConflictError(PosError):
    status_code = 409


class ConfirmationRequiredError(ConflictError):
    """Caller must repeat the request with an explicit opt-in (force=true)."""

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message, requiresConfirmation=True, **extra)


class AuthError(PosError):
    status_code = 401
