"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class UserOut(BaseModel):
    """Public user record (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class CurrentUser(UserOut):
    """Authenticated user bound into handlers by the auth dependency."""


class AuthResponse(BaseModel):
    """Token and user returned by register and login."""

    token: str = Field(..., description="JWT access token; send as 'Authorization: Bearer <token>'")
    user: UserOut
