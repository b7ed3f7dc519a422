"""Dashboard/Tasks views and the taskflow CLI, end to end against the in-process API."""

import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from datetime import date
from pathlib import Path

from taskflow.cli import main
from taskflow.client.session import SessionContext
from taskflow.client.settings import ClientSettings
from taskflow.client.views import (
    build_dashboard,
    default_export_name,
    export_tasks,
    percent,
    render_dashboard,
    render_task_list,
)
from taskflow.core.security import create_access_token
from tests.helpers import ApiTestCase, bridge_transport


class TestViews(unittest.TestCase):
    def test_percent(self) -> None:
        self.assertEqual(percent(0, 0), 0)
        self.assertEqual(percent(1, 3), 33)
        self.assertEqual(percent(2, 3), 67)

    def test_dashboard_fills_missing_priorities_with_zero(self) -> None:
        stats = {"total": 3, "completed": 1, "pending": 2, "byPriority": {"High": 2, "Low": 1}}
        tasks = [{"id": str(i), "title": f"t{i}", "status": "Todo"} for i in range(7)]
        summary = build_dashboard(stats, tasks)
        self.assertEqual(summary.completion_rate, 33)
        self.assertEqual(
            [(p.priority, p.count, p.percent) for p in summary.priorities],
            [("High", 2, 67), ("Medium", 0, 0), ("Low", 1, 33)],
        )
        self.assertEqual(len(summary.recent), 5)
        text = render_dashboard(summary, user_name="Alice")
        self.assertIn("Welcome back, Alice!", text)
        self.assertIn("Completion rate:  33%", text)

    def test_empty_dashboard(self) -> None:
        summary = build_dashboard({"total": 0, "completed": 0, "pending": 0, "byPriority": {}}, [])
        self.assertEqual(summary.completion_rate, 0)
        self.assertIn("No tasks yet.", render_dashboard(summary))

    def test_render_empty_task_list(self) -> None:
        self.assertEqual(render_task_list([]), "No tasks found.")

    def test_export_default_name_and_content(self) -> None:
        self.assertEqual(default_export_name(date(2026, 10, 19)), "tasks-export-2026-10-19.json")
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "out.json"
            tasks = [{"id": "t1", "title": "Buy milk"}]
            self.assertEqual(export_tasks(tasks, target), target)
            self.assertEqual(json.loads(target.read_text()), tasks)


class TestCli(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp = Path(tmp.name)
        self.settings = ClientSettings(
            API_URL="http://testserver/api",
            SESSION_FILE=self.tmp / "session.json",
        )
        self.transport = bridge_transport(self.client)

    def run_cli(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv), settings=self.settings, transport=self.transport)
        return code, out.getvalue(), err.getvalue()

    def test_full_session(self) -> None:
        code, out, _ = self.run_cli("register", "Alice", "a@x.com", "--password", "pw123456")
        self.assertEqual(code, 0)
        self.assertIn("a@x.com", out)
        self.assertTrue(self.settings.SESSION_FILE.exists())

        code, out, _ = self.run_cli("tasks", "create", "Buy milk", "--priority", "High")
        self.assertEqual(code, 0)
        task_id = out.strip().rsplit(" ", 1)[-1]

        code, out, _ = self.run_cli("tasks", "list", "--status", "Todo")
        self.assertEqual(code, 0)
        self.assertIn("Buy milk", out)
        self.assertIn(task_id, out)

        code, out, _ = self.run_cli("tasks", "update", task_id, "--status", "Completed")
        self.assertEqual(code, 0)

        code, out, _ = self.run_cli("dashboard")
        self.assertEqual(code, 0)
        self.assertIn("Welcome back, Alice!", out)
        self.assertIn("Completed:        1", out)
        self.assertIn("Completion rate:  100%", out)

        export_path = self.tmp / "export.json"
        code, out, _ = self.run_cli("tasks", "export", "--output", str(export_path))
        self.assertEqual(code, 0)
        exported = json.loads(export_path.read_text())
        self.assertEqual([t["id"] for t in exported], [task_id])

        code, out, _ = self.run_cli("tasks", "delete", task_id)
        self.assertEqual(code, 0)
        self.assertIn("Task deleted", out)

        code, _, err = self.run_cli("tasks", "show", task_id)
        self.assertEqual(code, 1)
        self.assertIn("Task not found", err)

        code, out, _ = self.run_cli("logout")
        self.assertEqual(code, 0)
        self.assertFalse(self.settings.SESSION_FILE.exists())

    def test_logout_with_expired_token_still_signs_out(self) -> None:
        _, user = self.register(name="Bob", email="b@x.com")
        expired = create_access_token(sub=user["id"], expires_minutes=-5)
        SessionContext(self.settings.SESSION_FILE).start(expired, user)
        code, out, err = self.run_cli("logout")
        self.assertEqual(code, 0, err)
        self.assertIn("Signed out.", out)
        self.assertFalse(self.settings.SESSION_FILE.exists())

    def test_login_restores_identity_across_runs(self) -> None:
        self.register(name="Bob", email="b@x.com")
        code, _, _ = self.run_cli("login", "B@X.com", "--password", "pw123456")
        self.assertEqual(code, 0)
        code, out, _ = self.run_cli("whoami")
        self.assertEqual(code, 0)
        self.assertIn("Bob <b@x.com>", out)

    def test_errors_print_server_message(self) -> None:
        code, _, err = self.run_cli("tasks", "list")
        self.assertEqual(code, 1)
        self.assertIn("Error: Not authenticated", err)

        self.register(name="Bob", email="b@x.com")
        code, _, err = self.run_cli("login", "b@x.com", "--password", "wrong-pass")
        self.assertEqual(code, 1)
        self.assertIn("Invalid email or password", err)


if __name__ == "__main__":
    unittest.main()
