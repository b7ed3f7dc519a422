"""Typed HTTP wrapper around the Taskflow REST API (httpx)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from taskflow.client.session import SessionContext

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when a request fails; message is the server's message when it sent one."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return f"HTTP error! status: {resp.status_code}"


class ApiClient:
    """
    One method per endpoint. Every request carries the session's bearer token
    when there is one; non-2xx responses raise ApiError.
    """

    def __init__(
        self,
        base_url: str,
        session: SessionContext,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.session = session
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        headers: dict[str, str] = {}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        try:
            resp = self._http.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise ApiError(f"Request failed: {e}") from e
        if resp.is_error:
            message = _error_message(resp)
            logger.debug("%s %s -> %s: %s", method, path, resp.status_code, message)
            raise ApiError(message, resp.status_code)
        return resp.json()

    # Authentication

    def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        data = self.request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        self.session.start(data["token"], data["user"])
        return data

    def login(self, email: str, password: str) -> dict[str, Any]:
        data = self.request("POST", "/auth/login", json={"email": email, "password": password})
        self.session.start(data["token"], data["user"])
        return data

    def logout(self) -> dict[str, Any]:
        """Tell the server, then drop the local session whether or not the call succeeded."""
        try:
            return self.request("POST", "/auth/logout")
        finally:
            self.session.clear()

    def me(self) -> dict[str, Any]:
        return self.request("GET", "/auth/me")

    # Tasks

    def get_tasks(
        self,
        status: str | None = None,
        priority: str | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {
            k: v
            for k, v in (("status", status), ("priority", priority), ("search", search))
            if v
        }
        return self.request("GET", "/tasks", params=params or None)

    def get_task(self, task_id: str) -> dict[str, Any]:
        return self.request("GET", f"/tasks/{task_id}")

    def create_task(self, data: dict[str, Any]) -> dict[str, Any]:
        return self.request("POST", "/tasks", json=data)

    def update_task(self, task_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return self.request("PUT", f"/tasks/{task_id}", json=data)

    def delete_task(self, task_id: str) -> dict[str, Any]:
        return self.request("DELETE", f"/tasks/{task_id}")

    def get_task_stats(self) -> dict[str, Any]:
        return self.request("GET", "/tasks/stats")
