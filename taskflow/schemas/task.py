"""Pydantic response schemas for tasks and task statistics (camelCase on the wire)."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskOut(BaseModel):
    """A task as returned by the API."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    title: str
    description: str | None = None
    status: str
    priority: str
    due_date: date | None = None
    user_id: str
    created_at: datetime
    updated_at: datetime


class TaskStats(BaseModel):
    """Aggregate counts for the caller's tasks."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = Field(..., ge=0)
    completed: int = Field(..., ge=0)
    pending: int = Field(..., ge=0)
    by_priority: dict[str, int] = Field(
        default_factory=dict,
        description="Count per priority; priorities with no tasks are absent.",
    )


class MessageResponse(BaseModel):
    """Plain confirmation or error body."""

    message: str
