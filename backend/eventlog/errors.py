"""Typed service errors.

Services raise these instead of HTTPException so they can be called from
anywhere a Session is available. ``main.py`` renders each one as
``{"error": {"code", "message", "details"}, "timestamp", "path"}``.
"""
from typing import Any, Optional


class EventLogError(Exception):
    """Base error carrying a stable code and an HTTP status."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None, details: Any = None):
        self.message = message
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(message)


class ValidationFailed(EventLogError):
    code = "VALIDATION_ERROR"
    status_code = 400


class DuplicateName(EventLogError):
    code = "TAG_ALREADY_EXISTS"
    status_code = 409


class DuplicateUsername(EventLogError):
    code = "USERNAME_ALREADY_EXISTS"
    status_code = 409


class DuplicateEmail(EventLogError):
    code = "EMAIL_ALREADY_EXISTS"
    status_code = 409


class NotFound(EventLogError):
    status_code = 404

    def __init__(self, entity: str, entity_id: Any = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            f"{entity.capitalize()} not found",
            code=f"{entity.upper()}_NOT_FOUND",
        )


class InvalidReference(EventLogError):
    """A referenced user or tag id does not exist."""

    status_code = 400

    def __init__(self, kind: str, missing_ids: list[str]):
        self.kind = kind
        self.missing_ids = missing_ids
        label = "User" if kind == "user" else "Tag"
        super().__init__(
            f"{label} with ID {', '.join(missing_ids)} does not exist",
            code=f"INVALID_{kind.upper()}_ID",
            details={"missing_ids": missing_ids},
        )


class UpdateFailed(EventLogError):
    code = "UPDATE_FAILED"
    status_code = 500


class DeleteFailed(EventLogError):
    code = "DELETE_FAILED"
    status_code = 500


class InsufficientPermissions(EventLogError):
    code = "INSUFFICIENT_PERMISSIONS"
    status_code = 403


class AuthenticationFailed(EventLogError):
    code = "INVALID_CREDENTIALS"
    status_code = 401
