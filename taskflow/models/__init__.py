"""SQLAlchemy ORM models."""

from taskflow.models.base import Base
from taskflow.models.task import Task, TaskPriority, TaskStatus
from taskflow.models.user import User

__all__ = ["Base", "Task", "TaskPriority", "TaskStatus", "User"]
