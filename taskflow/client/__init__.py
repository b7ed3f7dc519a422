"""Client data layer: HTTP wrapper, session state and query cache for the Taskflow API."""

from taskflow.client.api import ApiClient, ApiError
from taskflow.client.cache import QueryCache, make_key
from taskflow.client.queries import TaskQueries
from taskflow.client.session import SessionContext

__all__ = [
    "ApiClient",
    "ApiError",
    "QueryCache",
    "SessionContext",
    "TaskQueries",
    "make_key",
]
