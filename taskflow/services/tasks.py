"""Task store: CRUD and aggregate counts, always scoped to one owning user."""

import logging
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from taskflow.core.errors import NotFoundError
from taskflow.models.base import utcnow
from taskflow.models.task import Task, TaskStatus
from taskflow.schemas.task import TaskStats
from taskflow.services.validation import (
    validate_filter,
    validate_task_create,
    validate_task_update,
)

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"

LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so search text matches literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class TaskStore:
    """
    Task operations bound to a single user id.

    Every query filters on user_id, so a task owned by someone else behaves
    exactly like a task that does not exist (NotFoundError).
    """

    def __init__(self, db: Session, user_id: str) -> None:
        self.db = db
        self.user_id = user_id

    def _owned(self) -> Query:
        return self.db.query(Task).filter(Task.user_id == self.user_id)

    def list(
        self,
        status: str | None = None,
        priority: str | None = None,
        search: str | None = None,
    ) -> list[Task]:
        """Return the caller's tasks, newest first, narrowed by status, priority and search text."""
        query = self._owned()
        status = validate_filter("status", status)
        if status is not None:
            query = query.filter(Task.status == status)
        priority = validate_filter("priority", priority)
        if priority is not None:
            query = query.filter(Task.priority == priority)
        if search:
            pattern = f"%{escape_like(search)}%"
            query = query.filter(
                or_(
                    Task.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Task.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        return query.order_by(Task.created_at.desc()).all()

    def get(self, task_id: str) -> Task:
        task = self._owned().filter(Task.id == task_id).first()
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        return task

    def create(self, payload: Any) -> Task:
        """Validate and insert a task; the owner is always the bound user."""
        fields = validate_task_create(payload).unwrap()
        task = Task(**fields, user_id=self.user_id)
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        logger.info("Task created", extra={"user_id": self.user_id, "task_id": task.id})
        return task

    def update(self, task_id: str, payload: Any) -> Task:
        """Apply the present fields; updated_at moves forward even when no field changes."""
        fields = validate_task_update(payload).unwrap()
        task = self.get(task_id)
        for name, value in fields.items():
            setattr(task, name, value)
        task.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(task)
        logger.info(
            "Task updated",
            extra={"user_id": self.user_id, "task_id": task.id, "fields": sorted(fields)},
        )
        return task

    def delete(self, task_id: str) -> None:
        task = self.get(task_id)
        self.db.delete(task)
        self.db.commit()
        logger.info("Task deleted", extra={"user_id": self.user_id, "task_id": task_id})

    def stats(self) -> TaskStats:
        """
        Count the caller's tasks with one grouped query over (priority, status).

        Priorities with no tasks do not appear in by_priority.
        """
        rows = (
            self.db.query(Task.priority, Task.status, func.count(Task.id))
            .filter(Task.user_id == self.user_id)
            .group_by(Task.priority, Task.status)
            .all()
        )
        total = 0
        completed = 0
        by_priority: dict[str, int] = {}
        for priority, status, count in rows:
            total += count
            if status == TaskStatus.COMPLETED.value:
                completed += count
            by_priority[priority] = by_priority.get(priority, 0) + count
        return TaskStats(
            total=total,
            completed=completed,
            pending=total - completed,
            by_priority=by_priority,
        )
