"""Error taxonomy shared by services and the HTTP layer.

Every error carries a human-readable ``message`` and the HTTP status it maps
to; ``taskflow.main`` turns them into ``{"message": ...}`` responses.
"""


class TaskflowError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(TaskflowError):
    """Raised when input is missing or malformed (always client-fixable)."""

    status_code = 400


class AuthenticationError(TaskflowError):
    """Raised on missing/invalid/expired tokens or bad credentials."""

    status_code = 401


class NotFoundError(TaskflowError):
    """Raised when a resource is absent or not owned by the caller (same response for both)."""

    status_code = 404


class InternalError(TaskflowError):
    """Raised on store or unexpected failures; message is passed through as-is."""

    status_code = 500
