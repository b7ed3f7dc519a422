"""ORM model for tasks; every row is owned by exactly one user."""

import enum

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text

from taskflow.models.base import Base, new_id, utcnow


class TaskStatus(str, enum.Enum):
    TODO = "Todo"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Task(Base):
    """
    Persisted task. user_id is set from the authenticated caller at creation
    and never changes; updated_at is refreshed by the service on every mutation.
    """

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default=TaskStatus.TODO.value, index=True)
    priority = Column(String(16), nullable=False, default=TaskPriority.MEDIUM.value)
    due_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
