"""Request validation for the users resource.

Validation never raises: every check for an operation runs and the failures
are collected into an :class:`Invalid` result so the caller can report all of
them at once.
"""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

ID_MESSAGE = "Must be valid"
USERNAME_MESSAGE = "Username cannot be empty"
EMAIL_MESSAGE = "Must be a valid email"
UNKNOWN_FIELD_MESSAGE = "Unknown field"

# SQLite stores INTEGER PRIMARY KEY values as signed 64-bit integers.
MAX_USER_ID = 2**63 - 1

_ID_PATTERN = re.compile(r"[0-9]+")


class OperationKind(str, enum.Enum):
    READ = "read"
    READ_ONE = "read_one"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


_ID_KINDS = {OperationKind.READ_ONE, OperationKind.UPDATE, OperationKind.DELETE}
_BODY_KINDS = {OperationKind.CREATE, OperationKind.UPDATE}


class UserPayload(BaseModel):
    """Body accepted by the create and update operations."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., min_length=1)
    email: str

    @field_validator("username", mode="before")
    @classmethod
    def _coerce_username(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        try:
            validate_email(
                value,
                check_deliverability=False,
                globally_deliverable=False,
                allow_quoted_local=True,
            )
        except EmailNotValidError as exc:
            raise ValueError(str(exc)) from exc
        return value


@dataclass(frozen=True)
class FieldError:
    """A single failed check, serialised in the ``param``/``msg``/``value`` shape."""

    param: str
    msg: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"param": self.param, "msg": self.msg, "value": self.value}


@dataclass(frozen=True)
class Valid:
    user_id: Optional[int] = None
    payload: Optional[UserPayload] = None

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid:
    errors: Tuple[FieldError, ...]

    @property
    def is_valid(self) -> bool:
        return False

    def failures(self) -> List[Dict[str, Any]]:
        return [error.to_dict() for error in self.errors]


ValidationResult = Union[Valid, Invalid]

_BODY_FIELD_ORDER = {"username": 0, "email": 1}
_BODY_FIELD_MESSAGES = {"username": USERNAME_MESSAGE, "email": EMAIL_MESSAGE}


def _check_id(path_params: Mapping[str, Any]) -> Tuple[Optional[FieldError], Optional[int]]:
    raw = path_params.get("id")
    if isinstance(raw, int) and not isinstance(raw, bool):
        candidate: Optional[int] = raw if 0 <= raw <= MAX_USER_ID else None
    elif isinstance(raw, str) and _ID_PATTERN.fullmatch(raw):
        parsed = int(raw)
        candidate = parsed if parsed <= MAX_USER_ID else None
    else:
        candidate = None

    if candidate is None:
        return FieldError(param="id", msg=ID_MESSAGE, value=raw), None
    return None, candidate


def _check_body(body: Mapping[str, Any]) -> Tuple[List[FieldError], Optional[UserPayload]]:
    try:
        payload = UserPayload.model_validate(dict(body))
    except ValidationError as exc:
        errors: List[FieldError] = []
        for error in exc.errors():
            param = str(error["loc"][0]) if error["loc"] else ""
            if error["type"] == "extra_forbidden":
                message = UNKNOWN_FIELD_MESSAGE
            else:
                message = _BODY_FIELD_MESSAGES.get(param, str(error["msg"]))
            errors.append(FieldError(param=param, msg=message, value=body.get(param)))
        errors.sort(key=lambda item: _BODY_FIELD_ORDER.get(item.param, len(_BODY_FIELD_ORDER)))
        return errors, None
    return [], payload


def validate(
    kind: OperationKind | str,
    path_params: Optional[Mapping[str, Any]] = None,
    body_fields: Optional[Mapping[str, Any]] = None,
) -> ValidationResult:
    """Check the path parameters and body of a request for ``kind``.

    Path checks run before body checks and ``username`` is checked before
    ``email``; the returned failures keep that order. A ``body_fields`` value
    that is not a mapping is treated as an empty body.
    """

    operation = OperationKind(kind)
    params: Mapping[str, Any] = path_params or {}
    body: Mapping[str, Any] = body_fields if isinstance(body_fields, Mapping) else {}

    errors: List[FieldError] = []
    user_id: Optional[int] = None
    payload: Optional[UserPayload] = None

    if operation in _ID_KINDS:
        id_error, user_id = _check_id(params)
        if id_error is not None:
            errors.append(id_error)

    if operation in _BODY_KINDS:
        body_errors, payload = _check_body(body)
        errors.extend(body_errors)

    if errors:
        return Invalid(errors=tuple(errors))
    return Valid(user_id=user_id, payload=payload)


__all__ = [
    "EMAIL_MESSAGE",
    "FieldError",
    "ID_MESSAGE",
    "Invalid",
    "MAX_USER_ID",
    "OperationKind",
    "UNKNOWN_FIELD_MESSAGE",
    "USERNAME_MESSAGE",
    "UserPayload",
    "Valid",
    "ValidationResult",
    "validate",
]
