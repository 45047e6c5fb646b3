"""Helpers for summarising user listings."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Mapping, TypeVar, Union

from .models import User

UserLike = TypeVar("UserLike", User, Mapping[str, object])


def _created_at(user: Union[User, Mapping[str, object]]) -> datetime:
    if isinstance(user, User):
        return user.created_at
    value = user["created_at"]
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def filter_by_year(users: Iterable[UserLike], year: int) -> List[UserLike]:
    """Return the users created during ``year`` or later, keeping their order."""

    return [user for user in users if _created_at(user).year >= year]


__all__ = ["filter_by_year"]
