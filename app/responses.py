"""Mapping of validation and gateway outcomes onto HTTP responses."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .database import GatewayResult
from .models import User
from .validation import Invalid, ValidationResult

VALIDATION_FAILED_MESSAGE = "Validation failed"


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
    )


def serialize_users(users: List[User]) -> List[Dict[str, Any]]:
    return [user_to_response(user).model_dump(mode="json") for user in users]


def map_to_response(
    validation: ValidationResult,
    outcome: Optional[GatewayResult],
    success_status: int = status.HTTP_200_OK,
) -> Tuple[int, Dict[str, Any]]:
    """Return the status code and JSON envelope for a finished request.

    An :class:`Invalid` validation result always wins; ``outcome`` is ignored
    in that case and is expected to be ``None`` because the gateway was never
    called.
    """

    if isinstance(validation, Invalid):
        return status.HTTP_400_BAD_REQUEST, {
            "message": VALIDATION_FAILED_MESSAGE,
            "failures": validation.failures(),
        }

    if outcome is None:
        raise ValueError("A gateway outcome is required for a valid request")

    if outcome.error is not None:
        return status.HTTP_500_INTERNAL_SERVER_ERROR, {
            "status": "error",
            "data": outcome.error.to_dict(),
        }

    return success_status, {"status": "success", "data": serialize_users(outcome.rows)}


def to_json_response(status_code: int, body: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body)


__all__ = [
    "UserResponse",
    "VALIDATION_FAILED_MESSAGE",
    "map_to_response",
    "serialize_users",
    "to_json_response",
    "user_to_response",
]
