"""Pydantic request/response schemas."""

from taskflow.schemas.auth import AuthResponse, CurrentUser, UserOut
from taskflow.schemas.health import HealthResponse
from taskflow.schemas.task import MessageResponse, TaskOut, TaskStats

__all__ = [
    "AuthResponse",
    "CurrentUser",
    "HealthResponse",
    "MessageResponse",
    "TaskOut",
    "TaskStats",
    "UserOut",
]
