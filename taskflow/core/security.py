"""Credential primitives: bcrypt password hashes and signed bearer tokens."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from taskflow.core.config import settings

# Cost factor for new hashes. Tests lower it.
BCRYPT_ROUNDS = 12
# bcrypt ignores input past this many bytes.
BCRYPT_MAX_BYTES = 72

# Registration field limits.
NAME_MAX_LEN = 255
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

REQUIRED_CLAIMS = ["sub", "exp"]


def _bcrypt_input(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Salted bcrypt hash suitable for the users.password_hash column."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_bcrypt_input(password), salt).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """True if password matches; a malformed stored hash never matches."""
    try:
        return bcrypt.checkpw(_bcrypt_input(password), password_hash.encode("ascii"))
    except (ValueError, TypeError):
        return False


def _signing_key() -> str:
    return settings.JWT_SECRET.get_secret_value()


def create_access_token(sub: str, expires_minutes: int | None = None) -> str:
    """Sign a token for user id `sub`, valid for JWT_EXPIRE_MINUTES unless overridden."""
    if expires_minutes is None:
        expires_minutes = settings.JWT_EXPIRE_MINUTES
    issued = datetime.now(UTC)
    claims = {
        "sub": str(sub),
        "iat": issued,
        "exp": issued + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(claims, _signing_key(), algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises jwt.ExpiredSignatureError for an expired token and jwt.PyJWTError for
    anything else wrong with it, including a missing sub or exp.
    """
    return jwt.decode(
        token,
        _signing_key(),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": REQUIRED_CLAIMS},
    )
