"""Domain errors raised by the services and mapped to HTTP responses in app.main."""
from typing import Optional


class ModerationError(Exception):
    """Base error for event moderation operations."""

    status_code = 500

    def __init__(self, message: str, code: str = "MODERATION_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(ModerationError):
    """Missing or malformed input; nothing was written."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class AuthenticationError(ModerationError):
    """Bearer credential missing, invalid, expired or for a deleted admin."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationError(ModerationError):
    """Actor role or ownership does not allow the operation."""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, "AUTHORIZATION_ERROR")


class NotFoundError(ModerationError):
    """Referenced record does not exist."""

    status_code = 404

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} not found", "NOT_FOUND")
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(ModerationError):
    """Transition is not legal from the current status, or the version is stale."""

    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, "CONFLICT")


class StoreError(ModerationError):
    """Persistence failure. The underlying cause is logged, not exposed."""

    status_code = 500

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message, "STORE_ERROR")


class StateError(ModerationError):
    """A transition would leave the event inconsistent; nothing was written."""

    status_code = 500

    def __init__(self, message: str = "Event state is inconsistent"):
        super().__init__(message, "STATE_ERROR")
