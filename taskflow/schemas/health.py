"""Health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"] = Field(
        description="ok when the database answers, degraded otherwise"
    )
    version: str
    environment: str = Field(description="APP_ENV, e.g. dev or prod")
    database: Literal["connected", "disconnected"]
