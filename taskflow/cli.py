"""
Command-line client for the Taskflow API. Examples:
  taskflow register "Alice" alice@example.org
  taskflow login alice@example.org
  taskflow dashboard
  taskflow tasks list --status Todo --search milk
  taskflow tasks create "Buy milk" --priority High --due 2026-11-01
  taskflow tasks export
"""
import argparse
import getpass
import logging
import sys
from http import HTTPStatus
from pathlib import Path
from typing import Any

import httpx

from taskflow.client.api import ApiClient, ApiError
from taskflow.client.queries import TaskQueries
from taskflow.client.session import SessionContext
from taskflow.client.settings import ClientSettings, get_client_settings
from taskflow.client.views import (
    build_dashboard,
    export_tasks,
    render_dashboard,
    render_task_detail,
    render_task_list,
)
from taskflow.core.logging import configure_logging

logger = logging.getLogger(__name__)

STATUS_CHOICES = ["all", "Todo", "In Progress", "Completed"]
PRIORITY_CHOICES = ["all", "Low", "Medium", "High"]


def _password(args: argparse.Namespace) -> str:
    return args.password if args.password is not None else getpass.getpass("Password: ")


def _task_fields(args: argparse.Namespace) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for attr, key in (
        ("title", "title"),
        ("description", "description"),
        ("status", "status"),
        ("priority", "priority"),
        ("due", "dueDate"),
    ):
        value = getattr(args, attr, None)
        if value is not None:
            fields[key] = value
    return fields


def cmd_register(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    data = api.register(args.name, args.email, _password(args))
    print(f"Registered and signed in as {data['user']['email']}.")
    return 0


def cmd_login(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    data = api.login(args.email, _password(args))
    print(f"Signed in as {data['user']['email']}.")
    return 0


def cmd_logout(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    try:
        api.logout()
    except ApiError as e:
        # An expired or revoked token still ends with the local session cleared.
        if e.status_code != HTTPStatus.UNAUTHORIZED:
            raise
        logger.debug("Server rejected logout token: %s", e.message)
    finally:
        queries.cache.clear()
    print("Signed out.")
    return 0


def cmd_whoami(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    user = api.me()
    print(f"{user['name']} <{user['email']}>")
    return 0


def cmd_dashboard(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    summary = build_dashboard(queries.stats(), queries.tasks())
    name = (api.session.user or {}).get("name")
    print(render_dashboard(summary, user_name=name))
    return 0


def cmd_tasks_list(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    tasks = queries.tasks(status=args.status, priority=args.priority, search=args.search)
    print(render_task_list(tasks))
    return 0


def cmd_tasks_show(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    print(render_task_detail(queries.task(args.id)))
    return 0


def cmd_tasks_create(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    task = queries.create_task(_task_fields(args))
    print(f"Task created: {task['id']}")
    return 0


def cmd_tasks_update(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    task = queries.update_task(args.id, _task_fields(args))
    print(f"Task updated: {task['id']}")
    return 0


def cmd_tasks_delete(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    result = queries.delete_task(args.id)
    print(result.get("message", "Task deleted"))
    return 0


def cmd_tasks_export(args: argparse.Namespace, api: ApiClient, queries: TaskQueries) -> int:
    tasks = queries.tasks(status=args.status, priority=args.priority, search=args.search)
    path = export_tasks(tasks, args.output)
    print(f"Exported {len(tasks)} tasks to {path}")
    return 0


def _add_filters(p: argparse.ArgumentParser) -> None:
    p.add_argument("--status", choices=STATUS_CHOICES, default="all")
    p.add_argument("--priority", choices=PRIORITY_CHOICES, default="all")
    p.add_argument("--search", default=None, help="Match title or description (case-insensitive)")


def _add_task_fields(p: argparse.ArgumentParser) -> None:
    p.add_argument("--description", default=None)
    p.add_argument("--status", choices=STATUS_CHOICES[1:], default=None)
    p.add_argument("--priority", choices=PRIORITY_CHOICES[1:], default=None)
    p.add_argument("--due", default=None, help="Due date (YYYY-MM-DD)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskflow", description="Taskflow command-line client.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests and cache activity")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("register", help="Create an account and sign in")
    p.add_argument("name")
    p.add_argument("email")
    p.add_argument("--password", default=None, help="Prompted for when omitted")
    p.set_defaults(func=cmd_register)

    p = sub.add_parser("login", help="Sign in")
    p.add_argument("email")
    p.add_argument("--password", default=None, help="Prompted for when omitted")
    p.set_defaults(func=cmd_login)

    sub.add_parser("logout", help="Sign out and forget the saved token").set_defaults(func=cmd_logout)
    sub.add_parser("whoami", help="Show the signed-in user").set_defaults(func=cmd_whoami)
    sub.add_parser("dashboard", help="Task counts and recent tasks").set_defaults(func=cmd_dashboard)

    tasks = sub.add_parser("tasks", help="Manage tasks")
    tsub = tasks.add_subparsers(dest="tasks_command", required=True)

    p = tsub.add_parser("list", help="List tasks, newest first")
    _add_filters(p)
    p.set_defaults(func=cmd_tasks_list)

    p = tsub.add_parser("show", help="Show one task")
    p.add_argument("id")
    p.set_defaults(func=cmd_tasks_show)

    p = tsub.add_parser("create", help="Create a task")
    p.add_argument("title")
    _add_task_fields(p)
    p.set_defaults(func=cmd_tasks_create)

    p = tsub.add_parser("update", help="Change fields of a task")
    p.add_argument("id")
    p.add_argument("--title", default=None)
    _add_task_fields(p)
    p.set_defaults(func=cmd_tasks_update)

    p = tsub.add_parser("delete", help="Delete a task permanently")
    p.add_argument("id")
    p.set_defaults(func=cmd_tasks_delete)

    p = tsub.add_parser("export", help="Write the (filtered) task list to a JSON file")
    _add_filters(p)
    p.add_argument("--output", type=Path, default=None, help="Default: tasks-export-YYYY-MM-DD.json")
    p.set_defaults(func=cmd_tasks_export)

    return parser


def main(
    argv: list[str] | None = None,
    settings: ClientSettings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "WARNING")
    settings = settings or get_client_settings()

    session = SessionContext.restore(settings.SESSION_FILE)
    with ApiClient(settings.API_URL, session, timeout=settings.TIMEOUT_SEC, transport=transport) as api:
        queries = TaskQueries(api)
        try:
            return args.func(args, api, queries)
        except ApiError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
