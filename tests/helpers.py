"""Shared fixtures: in-memory database, FastAPI test client, and a client bridge to it."""

import unittest
from collections.abc import Generator
from typing import Any
from unittest.mock import patch

import httpx
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from taskflow.core.database import get_db
from taskflow.main import app
from taskflow.models import Base

DEFAULT_PASSWORD = "pw123456"


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database shared across threads (StaticPool keeps one connection)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def bridge_transport(client: TestClient) -> httpx.MockTransport:
    """httpx transport that forwards requests to the in-process app via TestClient."""

    def handler(request: httpx.Request) -> httpx.Response:
        resp = client.request(
            request.method,
            str(request.url),
            content=request.content,
            headers={k: v for k, v in request.headers.items() if k.lower() != "host"},
        )
        return httpx.Response(resp.status_code, headers=resp.headers, content=resp.content)

    return httpx.MockTransport(handler)


class DatabaseTestCase(unittest.TestCase):
    """Gives each test its own empty database and a session on it."""

    def setUp(self) -> None:
        rounds = patch("taskflow.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)
        self.SessionLocal = make_session_factory()
        self.db: Session = self.SessionLocal()
        self.addCleanup(self.db.close)


class ApiTestCase(DatabaseTestCase):
    """Runs the real app against the per-test database."""

    def setUp(self) -> None:
        super().setUp()

        def override_get_db() -> Generator[Session, None, None]:
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)

    def register(
        self,
        name: str = "Alice",
        email: str = "a@x.com",
        password: str = DEFAULT_PASSWORD,
    ) -> tuple[str, dict[str, Any]]:
        resp = self.client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        body = resp.json()
        return body["token"], body["user"]

    @staticmethod
    def auth(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def create_task(self, token: str, **fields: Any) -> dict[str, Any]:
        resp = self.client.post("/api/tasks", json=fields, headers=self.auth(token))
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()
