"""Integration tests for /tasks: CRUD, filters, ownership isolation, and stats."""

import unittest
from datetime import datetime
from unittest.mock import patch

from sqlalchemy.exc import SQLAlchemyError

from taskflow.services.tasks import TaskStore
from tests.helpers import ApiTestCase


class TestCreateAndGet(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.token, self.user = self.register(name="Alice", email="a@x.com")

    def test_buy_milk_scenario(self) -> None:
        login = self.client.post(
            "/api/auth/login", json={"email": "a@x.com", "password": "pw123456"}
        )
        token = login.json()["token"]
        task = self.create_task(token, title="Buy milk")
        self.assertEqual(task["status"], "Todo")
        self.assertEqual(task["priority"], "Medium")
        self.assertEqual(task["userId"], self.user["id"])
        self.assertIsNone(task["dueDate"])

        todo = self.client.get("/api/tasks", params={"status": "Todo"}, headers=self.auth(token))
        self.assertEqual([t["id"] for t in todo.json()], [task["id"]])
        done = self.client.get(
            "/api/tasks", params={"status": "Completed"}, headers=self.auth(token)
        )
        self.assertEqual(done.json(), [])

    def test_create_then_get_round_trips_fields(self) -> None:
        fields = {
            "title": "Quarterly report",
            "description": "Numbers for Q3",
            "status": "In Progress",
            "priority": "High",
            "dueDate": "2026-11-01",
        }
        created = self.create_task(self.token, **fields)
        resp = self.client.get(f"/api/tasks/{created['id']}", headers=self.auth(self.token))
        self.assertEqual(resp.status_code, 200)
        fetched = resp.json()
        for key, value in fields.items():
            self.assertEqual(fetched[key], value, key)
        self.assertEqual(fetched["userId"], self.user["id"])
        for key in ("id", "createdAt", "updatedAt"):
            self.assertTrue(fetched[key])

    def test_owner_in_payload_is_ignored(self) -> None:
        bob_token, bob = self.register(name="Bob", email="b@x.com")
        task = self.create_task(self.token, title="Mine", userId=bob["id"])
        self.assertEqual(task["userId"], self.user["id"])
        bob_list = self.client.get("/api/tasks", headers=self.auth(bob_token)).json()
        self.assertEqual(bob_list, [])

    def test_create_validation_errors(self) -> None:
        cases = [
            ({}, '"title" is required'),
            ({"title": ""}, '"title" is not allowed to be empty'),
            ({"title": "x", "priority": "Urgent", "status": "Nope"}, '"priority" must be one of [Low, Medium, High]'),
            ({"title": "x", "dueDate": "tomorrow"}, '"dueDate" must be a valid date'),
        ]
        for body, message in cases:
            with self.subTest(body=body):
                resp = self.client.post("/api/tasks", json=body, headers=self.auth(self.token))
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.json(), {"message": message})
        self.assertEqual(self.client.get("/api/tasks", headers=self.auth(self.token)).json(), [])

    def test_malformed_json_is_400(self) -> None:
        resp = self.client.post(
            "/api/tasks",
            content=b"{not json",
            headers={**self.auth(self.token), "Content-Type": "application/json"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("message", resp.json())

    def test_get_unknown_id(self) -> None:
        resp = self.client.get("/api/tasks/does-not-exist", headers=self.auth(self.token))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"message": "Task not found"})


class TestListFilters(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.token, _ = self.register()
        self.milk = self.create_task(self.token, title="Buy milk", priority="Low")
        self.report = self.create_task(
            self.token,
            title="Write report",
            description="Include MILK price index",
            priority="High",
            status="In Progress",
        )
        self.gym = self.create_task(self.token, title="Gym", priority="High", status="Completed")

    def _list(self, **params: str) -> list[str]:
        resp = self.client.get("/api/tasks", params=params, headers=self.auth(self.token))
        self.assertEqual(resp.status_code, 200, resp.text)
        return [t["id"] for t in resp.json()]

    def test_newest_first(self) -> None:
        self.assertEqual(self._list(), [self.gym["id"], self.report["id"], self.milk["id"]])

    def test_all_means_no_filter(self) -> None:
        self.assertEqual(len(self._list(status="all", priority="all")), 3)

    def test_status_and_priority(self) -> None:
        self.assertEqual(self._list(priority="High"), [self.gym["id"], self.report["id"]])
        self.assertEqual(self._list(priority="High", status="Completed"), [self.gym["id"]])
        self.assertEqual(self._list(priority="Medium"), [])

    def test_search_title_or_description_case_insensitive(self) -> None:
        self.assertEqual(self._list(search="milk"), [self.report["id"], self.milk["id"]])
        self.assertEqual(self._list(search="GYM"), [self.gym["id"]])

    def test_search_combines_with_filters(self) -> None:
        self.assertEqual(self._list(search="milk", priority="Low"), [self.milk["id"]])

    def test_search_wildcards_are_literal(self) -> None:
        self.assertEqual(self._list(search="%"), [])
        self.assertEqual(self._list(search="_"), [])
        pct = self.create_task(self.token, title="Raise 5% target")
        self.assertEqual(self._list(search="5%"), [pct["id"]])

    def test_unknown_filter_value_is_400(self) -> None:
        resp = self.client.get(
            "/api/tasks", params={"status": "Done"}, headers=self.auth(self.token)
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("status", resp.json()["message"])


class TestUpdateAndDelete(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.token, self.user = self.register()
        self.task = self.create_task(
            self.token, title="Buy milk", description="2 liters", dueDate="2026-11-01"
        )

    def _put(self, task_id: str, body: object, token: str | None = None):
        return self.client.put(
            f"/api/tasks/{task_id}", json=body, headers=self.auth(token or self.token)
        )

    def test_partial_update(self) -> None:
        resp = self._put(self.task["id"], {"status": "Completed"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "Completed")
        self.assertEqual(body["title"], "Buy milk")
        self.assertEqual(body["description"], "2 liters")
        self.assertEqual(body["dueDate"], "2026-11-01")

    def test_empty_update_refreshes_updated_at_only(self) -> None:
        resp = self._put(self.task["id"], {})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        for key in ("title", "description", "status", "priority", "dueDate", "userId", "createdAt"):
            self.assertEqual(body[key], self.task[key], key)
        self.assertGreater(
            datetime.fromisoformat(body["updatedAt"]),
            datetime.fromisoformat(self.task["updatedAt"]),
        )

    def test_clear_due_date(self) -> None:
        body = self._put(self.task["id"], {"dueDate": None}).json()
        self.assertIsNone(body["dueDate"])

    def test_update_rejects_owner_change(self) -> None:
        resp = self._put(self.task["id"], {"userId": "someone-else"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"message": '"userId" is not allowed'})

    def test_update_invalid_field_leaves_task_unchanged(self) -> None:
        resp = self._put(self.task["id"], {"title": "New", "priority": "Urgent"})
        self.assertEqual(resp.status_code, 400)
        fetched = self.client.get(
            f"/api/tasks/{self.task['id']}", headers=self.auth(self.token)
        ).json()
        self.assertEqual(fetched["title"], "Buy milk")

    def test_update_unknown_and_foreign_ids_look_identical(self) -> None:
        bob_token, _ = self.register(name="Bob", email="b@x.com")
        foreign = self._put(self.task["id"], {"title": "Hijack"}, token=bob_token)
        unknown = self._put("no-such-task", {"title": "Hijack"}, token=bob_token)
        self.assertEqual(foreign.status_code, 404)
        self.assertEqual(unknown.status_code, 404)
        self.assertEqual(foreign.json(), unknown.json())
        fetched = self.client.get(
            f"/api/tasks/{self.task['id']}", headers=self.auth(self.token)
        ).json()
        self.assertEqual(fetched["title"], "Buy milk")

    def test_delete_twice(self) -> None:
        path = f"/api/tasks/{self.task['id']}"
        first = self.client.delete(path, headers=self.auth(self.token))
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json(), {"message": "Task deleted"})
        second = self.client.delete(path, headers=self.auth(self.token))
        self.assertEqual(second.status_code, 404)
        self.assertEqual(second.json(), {"message": "Task not found"})
        self.assertEqual(self.client.get(path, headers=self.auth(self.token)).status_code, 404)

    def test_foreign_delete_is_404_and_keeps_task(self) -> None:
        bob_token, _ = self.register(name="Bob", email="b@x.com")
        path = f"/api/tasks/{self.task['id']}"
        self.assertEqual(self.client.delete(path, headers=self.auth(bob_token)).status_code, 404)
        self.assertEqual(self.client.get(path, headers=self.auth(self.token)).status_code, 200)


class TestStatsAndIsolation(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice, _ = self.register(name="Alice", email="a@x.com")
        self.bob, _ = self.register(name="Bob", email="b@x.com")

    def _stats(self, token: str) -> dict:
        resp = self.client.get("/api/tasks/stats", headers=self.auth(token))
        self.assertEqual(resp.status_code, 200)
        return resp.json()

    def test_empty_stats(self) -> None:
        self.assertEqual(
            self._stats(self.alice),
            {"total": 0, "completed": 0, "pending": 0, "byPriority": {}},
        )

    def test_absent_priorities_are_omitted(self) -> None:
        for priority in ("High", "High", "Low"):
            self.create_task(self.alice, title=f"{priority} task", priority=priority)
        stats = self._stats(self.alice)
        self.assertEqual(stats["byPriority"], {"High": 2, "Low": 1})
        self.assertNotIn("Medium", stats["byPriority"])
        self.assertEqual(stats["total"], 3)
        self.assertEqual(stats["completed"], 0)
        self.assertEqual(stats["pending"], 3)

    def test_invariants_hold_and_follow_updates(self) -> None:
        ids = [
            self.create_task(self.alice, title="a", priority="Low")["id"],
            self.create_task(self.alice, title="b", status="Completed")["id"],
            self.create_task(self.alice, title="c", priority="High", status="In Progress")["id"],
        ]
        self.client.put(
            f"/api/tasks/{ids[0]}", json={"status": "Completed"}, headers=self.auth(self.alice)
        )
        self.client.delete(f"/api/tasks/{ids[2]}", headers=self.auth(self.alice))
        stats = self._stats(self.alice)
        self.assertEqual(stats["total"], 2)
        self.assertEqual(stats["completed"], 2)
        self.assertEqual(stats["total"], stats["completed"] + stats["pending"])
        self.assertEqual(sum(stats["byPriority"].values()), stats["total"])
        self.assertEqual(stats["byPriority"], {"Low": 1, "Medium": 1})

    def test_other_users_never_see_my_tasks(self) -> None:
        task = self.create_task(self.alice, title="Secret", priority="High")
        self.create_task(self.bob, title="Bob's", priority="Low")

        bob_list = self.client.get("/api/tasks", headers=self.auth(self.bob)).json()
        self.assertEqual([t["title"] for t in bob_list], ["Bob's"])
        bob_search = self.client.get(
            "/api/tasks", params={"search": "Secret"}, headers=self.auth(self.bob)
        ).json()
        self.assertEqual(bob_search, [])
        self.assertEqual(
            self.client.get(f"/api/tasks/{task['id']}", headers=self.auth(self.bob)).status_code,
            404,
        )
        self.assertEqual(
            self._stats(self.bob),
            {"total": 1, "completed": 0, "pending": 1, "byPriority": {"Low": 1}},
        )


class TestStoreFailure(ApiTestCase):
    def test_database_error_is_500_with_message(self) -> None:
        token, _ = self.register()
        with patch.object(TaskStore, "list", side_effect=SQLAlchemyError("boom")):
            resp = self.client.get("/api/tasks", headers=self.auth(token))
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"message": "boom"})


if __name__ == "__main__":
    unittest.main()
