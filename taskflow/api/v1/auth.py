"""Register/login/logout endpoints and the bearer-token dependency (get_current_user)."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from taskflow.core.database import get_db
from taskflow.schemas.auth import AuthResponse, CurrentUser, UserOut
from taskflow.schemas.task import MessageResponse
from taskflow.services import auth as auth_service

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """
    Dependency: require a valid Bearer JWT and return the current user.

    Raises AuthenticationError (401) before any handler body runs when the
    header is missing or the token does not resolve to a user.
    """
    token = credentials.credentials if credentials is not None else None
    user = auth_service.resolve(db, token)
    return CurrentUser.model_validate(user)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    db: Annotated[Session, Depends(get_db)],
    payload: Annotated[Any, Body()] = None,
) -> AuthResponse:
    """Create an account from name, email and password; returns a token and the new user."""
    return auth_service.register(db, payload)


@router.post("/login", response_model=AuthResponse)
def login(
    db: Annotated[Session, Depends(get_db)],
    payload: Annotated[Any, Body()] = None,
) -> AuthResponse:
    """
    Authenticate with email and password; returns a JWT and the user.
    Include the token in the Authorization header as: Bearer <token>
    """
    return auth_service.login(db, payload)


@router.post("/logout", response_model=MessageResponse)
def logout(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> MessageResponse:
    """
    Acknowledge logout. Tokens are stateless: nothing is revoked server-side and
    the token stays valid until it expires; the client discards it.
    """
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserOut)
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UserOut:
    """Return the user the bearer token resolves to."""
    return current_user
