"""Dashboard and Tasks views: pure functions from API data to display text and exports."""

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

PRIORITY_ORDER = ("High", "Medium", "Low")
RECENT_TASKS_LIMIT = 5


def percent(part: int, whole: int) -> int:
    """Rounded percentage; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return round(part * 100 / whole)


@dataclass(frozen=True)
class PriorityLine:
    priority: str
    count: int
    percent: int


@dataclass(frozen=True)
class DashboardSummary:
    """What the dashboard shows: headline counts, completion rate, priority split, recent tasks."""

    total: int
    completed: int
    pending: int
    completion_rate: int
    priorities: list[PriorityLine] = field(default_factory=list)
    recent: list[dict[str, Any]] = field(default_factory=list)


def build_dashboard(stats: dict[str, Any], tasks: list[dict[str, Any]]) -> DashboardSummary:
    """
    Combine /tasks/stats and /tasks into a summary.

    Priorities missing from byPriority are shown with a zero count here; the
    API itself omits them.
    """
    total = int(stats.get("total", 0))
    completed = int(stats.get("completed", 0))
    by_priority = stats.get("byPriority") or {}
    priorities = [
        PriorityLine(p, int(by_priority.get(p, 0)), percent(int(by_priority.get(p, 0)), total))
        for p in PRIORITY_ORDER
    ]
    return DashboardSummary(
        total=total,
        completed=completed,
        pending=int(stats.get("pending", total - completed)),
        completion_rate=percent(completed, total),
        priorities=priorities,
        recent=list(tasks[:RECENT_TASKS_LIMIT]),
    )


def render_dashboard(summary: DashboardSummary, user_name: str | None = None) -> str:
    lines = []
    if user_name:
        lines.append(f"Welcome back, {user_name}!")
        lines.append("")
    lines.append(f"Total tasks:      {summary.total}")
    lines.append(f"Completed:        {summary.completed}")
    lines.append(f"Pending:          {summary.pending}")
    lines.append(f"Completion rate:  {summary.completion_rate}%")
    lines.append("")
    lines.append("By priority:")
    for p in summary.priorities:
        lines.append(f"  {p.priority:<8} {p.count:>4}  ({p.percent}%)")
    lines.append("")
    lines.append("Recent tasks:")
    if not summary.recent:
        lines.append("  No tasks yet.")
    for t in summary.recent:
        lines.append(f"  [{t.get('status', '')}] {t.get('title', '')}")
    return "\n".join(lines)


def render_task_line(task: dict[str, Any]) -> str:
    due = task.get("dueDate") or "-"
    return (
        f"{task.get('id', '')}  {task.get('status', ''):<11}  "
        f"{task.get('priority', ''):<6}  due {due:<10}  {task.get('title', '')}"
    )


def render_task_list(tasks: list[dict[str, Any]]) -> str:
    if not tasks:
        return "No tasks found."
    return "\n".join(render_task_line(t) for t in tasks)


def render_task_detail(task: dict[str, Any]) -> str:
    rows = [
        ("ID", task.get("id")),
        ("Title", task.get("title")),
        ("Description", task.get("description") or ""),
        ("Status", task.get("status")),
        ("Priority", task.get("priority")),
        ("Due", task.get("dueDate") or "-"),
        ("Created", task.get("createdAt")),
        ("Updated", task.get("updatedAt")),
    ]
    return "\n".join(f"{label + ':':<13}{value}" for label, value in rows)


def default_export_name(today: date | None = None) -> str:
    return f"tasks-export-{(today or date.today()).isoformat()}.json"


def export_tasks(
    tasks: list[dict[str, Any]],
    path: Path | None = None,
    today: date | None = None,
) -> Path:
    """Write tasks as pretty-printed JSON; default file name carries today's date."""
    target = path if path is not None else Path(default_export_name(today))
    target.write_text(json.dumps(tasks, indent=2), encoding="utf-8")
    return target
