"""Domain models for the users resource."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    """Represents a row of the ``users`` table."""

    id: int
    username: str
    email: str
    created_at: datetime


__all__ = ["User"]
