"""Client-side session state: the bearer token and signed-in user for one client process."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class SessionContext:
    """
    Explicit session state handed to ApiClient.

    Lifecycle: ``restore()`` once at startup (reads the session file if any),
    ``start()`` after login/register (persists), ``clear()`` on logout
    (forgets the token in memory and removes the file).
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self.token: str | None = None
        self.user: dict[str, Any] | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None

    @classmethod
    def restore(cls, path: Path | None) -> "SessionContext":
        """Build a context from the persisted session; a corrupt file is discarded."""
        ctx = cls(path)
        if path is None or not path.exists():
            return ctx
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            token = data["token"]
            user = data["user"]
            if not isinstance(token, str) or not isinstance(user, dict):
                raise ValueError("unexpected session shape")
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable session file %s: %s", path, e)
            ctx.clear()
            return ctx
        ctx.token = token
        ctx.user = user
        return ctx

    def start(self, token: str, user: dict[str, Any]) -> None:
        self.token = token
        self.user = user
        self._save()

    def clear(self) -> None:
        self.token = None
        self.user = None
        if self.path is not None:
            self.path.unlink(missing_ok=True)

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"token": self.token, "user": self.user}),
            encoding="utf-8",
        )
        # Token grants account access; keep it readable by the owner only.
        self.path.chmod(0o600)
