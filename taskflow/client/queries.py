"""Cached task reads and invalidating task writes, as consumed by the views."""

import logging
from typing import Any

from taskflow.client.api import ApiClient
from taskflow.client.cache import QueryCache, make_key

logger = logging.getLogger(__name__)

TASKS = "tasks"
TASK = "task"
TASK_STATS = "taskStats"

# Reads retry once; writes never retry so a slow success is not applied twice.
READ_RETRY = 1


def _active(value: str | None) -> str | None:
    if value is None or value == "" or value.lower() == "all":
        return None
    return value


def _clean_task_data(data: dict[str, Any]) -> dict[str, Any]:
    # Forms submit "" for an unset due date; the API expects the key to be absent.
    return {k: v for k, v in data.items() if not (k == "dueDate" and v == "")}


class TaskQueries:
    """Server-state access for tasks: reads go through the cache, writes invalidate it."""

    def __init__(self, api: ApiClient, cache: QueryCache | None = None) -> None:
        self.api = api
        self.cache = cache if cache is not None else QueryCache()

    def tasks(
        self,
        status: str | None = None,
        priority: str | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        filters = {
            "status": _active(status),
            "priority": _active(priority),
            "search": search or None,
        }
        return self.cache.fetch(
            make_key(TASKS, filters),
            lambda: self.api.get_tasks(**filters),
            retry=READ_RETRY,
        )

    def task(self, task_id: str) -> dict[str, Any]:
        return self.cache.fetch(
            make_key(TASK, {"id": task_id}),
            lambda: self.api.get_task(task_id),
            retry=READ_RETRY,
        )

    def stats(self) -> dict[str, Any]:
        return self.cache.fetch(
            make_key(TASK_STATS),
            self.api.get_task_stats,
            retry=READ_RETRY,
        )

    def _invalidate(self) -> None:
        dropped = sum(self.cache.invalidate(prefix) for prefix in (TASKS, TASK, TASK_STATS))
        logger.debug("Invalidated %d cached task queries", dropped)

    def create_task(self, data: dict[str, Any]) -> dict[str, Any]:
        task = self.api.create_task(_clean_task_data(data))
        self._invalidate()
        return task

    def update_task(self, task_id: str, data: dict[str, Any]) -> dict[str, Any]:
        task = self.api.update_task(task_id, _clean_task_data(data))
        self._invalidate()
        return task

    def delete_task(self, task_id: str) -> dict[str, Any]:
        result = self.api.delete_task(task_id)
        self._invalidate()
        return result
