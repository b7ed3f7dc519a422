"""Credential store and session issuer: registration, login and token resolution."""

import logging
from typing import Any

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskflow.core.errors import AuthenticationError, ValidationError
from taskflow.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from taskflow.models.user import User
from taskflow.schemas.auth import AuthResponse, UserOut
from taskflow.services.validation import validate_login, validate_registration

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User already exists"
BAD_CREDENTIALS = "Invalid email or password"


def _issue(user: User) -> AuthResponse:
    return AuthResponse(
        token=create_access_token(sub=user.id),
        user=UserOut.model_validate(user),
    )


def register(db: Session, payload: Any) -> AuthResponse:
    """
    Create a user from name, email and password and return a fresh token.

    Raises ValidationError when a field is missing/malformed or the email is taken.
    """
    fields = validate_registration(payload).unwrap()

    if db.query(User).filter(User.email == fields["email"]).first() is not None:
        raise ValidationError(EMAIL_TAKEN)

    user = User(
        name=fields["name"],
        email=fields["email"],
        password_hash=hash_password(fields["password"]),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same email.
        db.rollback()
        raise ValidationError(EMAIL_TAKEN) from e
    db.refresh(user)

    logger.info("User registered", extra={"user_id": user.id})
    return _issue(user)


def login(db: Session, payload: Any) -> AuthResponse:
    """Check email and password; raises AuthenticationError for unknown email or wrong password."""
    fields = validate_login(payload).unwrap()

    user = db.query(User).filter(User.email == fields["email"]).first()
    if user is None or not verify_password(fields["password"], user.password_hash):
        logger.info("Login failed")
        raise AuthenticationError(BAD_CREDENTIALS)

    logger.info("User logged in", extra={"user_id": user.id})
    return _issue(user)


def resolve(db: Session, token: str | None) -> User:
    """
    Resolve a bearer token to its user.

    Raises AuthenticationError if the token is missing, malformed, expired,
    badly signed, or names a user that no longer exists.
    """
    if not token:
        raise AuthenticationError("Not authenticated")
    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token expired") from e
    except jwt.PyJWTError as e:
        raise AuthenticationError("Invalid or expired token") from e

    sub = payload.get("sub")
    if not sub or not isinstance(sub, str):
        raise AuthenticationError("Invalid token payload")

    user = db.query(User).filter(User.id == sub).first()
    if user is None:
        raise AuthenticationError("User not found")
    return user
