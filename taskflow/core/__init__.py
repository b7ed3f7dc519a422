"""Core app configuration, database, errors and logging."""

from taskflow.core.config import get_settings, settings
from taskflow.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
