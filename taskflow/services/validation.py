"""Request body validation for auth and task endpoints.

Validators are plain functions that take the decoded JSON body and return a
``ValidationResult``: either ``ok`` with the cleaned values or a failure with a
single message. Fields are checked in a fixed order and the first failing field
wins, so the same bad payload always produces the same message.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from email_validator import EmailNotValidError, validate_email

from taskflow.core.errors import ValidationError
from taskflow.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)
from taskflow.models.task import TaskPriority, TaskStatus

TITLE_MAX_LENGTH = 500
DESCRIPTION_MAX_LENGTH = 10_000

STATUS_VALUES: tuple[str, ...] = tuple(s.value for s in TaskStatus)
PRIORITY_VALUES: tuple[str, ...] = tuple(p.value for p in TaskPriority)

# Keys that would reassign a task's owner; never accepted on update.
OWNER_KEYS = ("userId", "user_id")

BODY_NOT_OBJECT = "Request body must be a JSON object"


@dataclass(frozen=True)
class ValidationResult:
    """Tagged outcome of a validator: cleaned values on success, one message on failure."""

    ok: bool
    values: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @classmethod
    def success(cls, values: dict[str, Any]) -> "ValidationResult":
        return cls(ok=True, values=values)

    @classmethod
    def failure(cls, message: str) -> "ValidationResult":
        return cls(ok=False, error=message)

    def unwrap(self) -> dict[str, Any]:
        """Return the cleaned values or raise ValidationError with the failure message."""
        if not self.ok:
            raise ValidationError(self.error or "Invalid request")
        return self.values


class _FieldInvalid(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def _string(name: str, value: Any, *, allow_empty: bool, max_length: int | None = None) -> str:
    if not isinstance(value, str):
        raise _FieldInvalid(f'"{name}" must be a string')
    if not allow_empty and not value.strip():
        raise _FieldInvalid(f'"{name}" is not allowed to be empty')
    if max_length is not None and len(value) > max_length:
        raise _FieldInvalid(
            f'"{name}" length must be less than or equal to {max_length} characters long'
        )
    return value


def _required(payload: dict[str, Any], name: str) -> Any:
    if payload.get(name) is None:
        raise _FieldInvalid(f'"{name}" is required')
    return payload[name]


def _choice(name: str, value: Any, allowed: tuple[str, ...]) -> str:
    if not isinstance(value, str) or value not in allowed:
        raise _FieldInvalid(f'"{name}" must be one of [{", ".join(allowed)}]')
    return value


def _date(value: Any) -> date:
    """Parse an ISO date or datetime string; only the calendar date is kept."""
    if isinstance(value, str) and value.strip():
        s = value.strip()
        try:
            return date.fromisoformat(s)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(s).date()
        except ValueError:
            pass
    raise _FieldInvalid('"dueDate" must be a valid date')


def _task_fields(payload: dict[str, Any], *, partial: bool) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}

    if "title" in payload:
        cleaned["title"] = _string(
            "title", payload["title"], allow_empty=False, max_length=TITLE_MAX_LENGTH
        )
    elif not partial:
        raise _FieldInvalid('"title" is required')

    if "description" in payload:
        desc = payload["description"]
        cleaned["description"] = (
            None
            if desc is None
            else _string("description", desc, allow_empty=True, max_length=DESCRIPTION_MAX_LENGTH)
        )

    if "priority" in payload:
        cleaned["priority"] = _choice("priority", payload["priority"], PRIORITY_VALUES)
    elif not partial:
        cleaned["priority"] = TaskPriority.MEDIUM.value

    if "status" in payload:
        cleaned["status"] = _choice("status", payload["status"], STATUS_VALUES)
    elif not partial:
        cleaned["status"] = TaskStatus.TODO.value

    if "dueDate" in payload:
        due = payload["dueDate"]
        cleaned["due_date"] = None if due is None else _date(due)

    return cleaned


def validate_task_create(payload: Any) -> ValidationResult:
    """
    Validate a create body. title is required; status/priority get defaults.
    Owner keys and unknown keys are ignored: the owner is always the caller.
    """
    if not isinstance(payload, dict):
        return ValidationResult.failure(BODY_NOT_OBJECT)
    try:
        return ValidationResult.success(_task_fields(payload, partial=False))
    except _FieldInvalid as e:
        return ValidationResult.failure(e.message)


def validate_task_update(payload: Any) -> ValidationResult:
    """Validate a partial update body; absent fields are left out of the result."""
    if not isinstance(payload, dict):
        return ValidationResult.failure(BODY_NOT_OBJECT)
    for key in OWNER_KEYS:
        if key in payload:
            return ValidationResult.failure(f'"{key}" is not allowed')
    try:
        return ValidationResult.success(_task_fields(payload, partial=True))
    except _FieldInvalid as e:
        return ValidationResult.failure(e.message)


def validate_filter(name: str, value: str | None) -> str | None:
    """Normalize a list filter: None/''/'all' mean no filter, anything else must be an allowed value."""
    if value is None or value == "" or value.lower() == "all":
        return None
    allowed = STATUS_VALUES if name == "status" else PRIORITY_VALUES
    try:
        return _choice(name, value, allowed)
    except _FieldInvalid as e:
        raise ValidationError(e.message) from e


def _email(value: Any) -> str:
    """Return the lower-cased email if it is email-shaped."""
    email = _string("email", value, allow_empty=False, max_length=EMAIL_MAX_LEN).strip()
    try:
        info = validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise _FieldInvalid('"email" must be a valid email') from e
    return info.normalized.lower()


def validate_registration(payload: Any) -> ValidationResult:
    """Validate name, email and password (in that order) for registration."""
    if not isinstance(payload, dict):
        return ValidationResult.failure(BODY_NOT_OBJECT)
    try:
        cleaned: dict[str, Any] = {}
        name = _string(
            "name", _required(payload, "name"), allow_empty=False, max_length=NAME_MAX_LEN
        ).strip()
        cleaned["name"] = name
        cleaned["email"] = _email(_required(payload, "email"))
        password = _string("password", _required(payload, "password"), allow_empty=False)
        if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
            raise _FieldInvalid(
                f'"password" length must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters'
            )
        cleaned["password"] = password
    except _FieldInvalid as e:
        return ValidationResult.failure(e.message)
    return ValidationResult.success(cleaned)


def _login_email(value: Any) -> str:
    """Normalize like registration does; an unparseable address falls through to a failed lookup."""
    email = _string("email", value, allow_empty=False).strip()
    try:
        return validate_email(email, check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        return email.lower()


def validate_login(payload: Any) -> ValidationResult:
    """Login only checks shape; wrong credentials are an authentication failure, not a 400."""
    if not isinstance(payload, dict):
        return ValidationResult.failure(BODY_NOT_OBJECT)
    try:
        cleaned: dict[str, Any] = {}
        cleaned["email"] = _login_email(_required(payload, "email"))
        cleaned["password"] = _string("password", _required(payload, "password"), allow_empty=False)
    except _FieldInvalid as e:
        return ValidationResult.failure(e.message)
    return ValidationResult.success(cleaned)
