"""Task endpoints: filtered listing, stats, and per-task CRUD for the authenticated user."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from taskflow.api.v1.auth import get_current_user
from taskflow.core.database import get_db
from taskflow.schemas.auth import CurrentUser
from taskflow.schemas.task import MessageResponse, TaskOut, TaskStats
from taskflow.services.tasks import TaskStore

router = APIRouter()


def get_task_store(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TaskStore:
    """Dependency: task store bound to the authenticated caller."""
    return TaskStore(db, current_user.id)


@router.get("", response_model=list[TaskOut])
def list_tasks(
    store: Annotated[TaskStore, Depends(get_task_store)],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    priority: Annotated[str | None, Query()] = None,
    search: Annotated[str | None, Query()] = None,
) -> list[TaskOut]:
    """
    List the caller's tasks, newest first.

    status and priority accept an enum value or "all"; search matches title or
    description case-insensitively.
    """
    tasks = store.list(status=status_filter, priority=priority, search=search)
    return [TaskOut.model_validate(t) for t in tasks]


@router.get("/stats", response_model=TaskStats)
def get_stats(
    store: Annotated[TaskStore, Depends(get_task_store)],
) -> TaskStats:
    """Total, completed, pending and per-priority counts for the caller."""
    return store.stats()


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: str,
    store: Annotated[TaskStore, Depends(get_task_store)],
) -> TaskOut:
    return TaskOut.model_validate(store.get(task_id))


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    store: Annotated[TaskStore, Depends(get_task_store)],
    payload: Annotated[Any, Body()] = None,
) -> TaskOut:
    """Create a task owned by the caller; status defaults to Todo and priority to Medium."""
    return TaskOut.model_validate(store.create(payload))


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: str,
    store: Annotated[TaskStore, Depends(get_task_store)],
    payload: Annotated[Any, Body()] = None,
) -> TaskOut:
    """Partially update a task; only fields present in the body change."""
    return TaskOut.model_validate(store.update(task_id, payload))


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str,
    store: Annotated[TaskStore, Depends(get_task_store)],
) -> MessageResponse:
    store.delete(task_id)
    return MessageResponse(message="Task deleted")
