"""Seed rows for development and test databases."""
from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .database import Database
from .models import User

logger = logging.getLogger("usersapi.seeds")

DEFAULT_USERS: Tuple[Tuple[str, str], ...] = (
    ("michael", "michael@mherman.org"),
    ("michaeltwo", "michael@realpython.org"),
)


def seed_users(database: Database, users: Sequence[Tuple[str, str]] = DEFAULT_USERS) -> List[User]:
    """Replace every row of ``users`` with the given ``(username, email)`` pairs."""

    cleared = database.delete_all()
    if cleared.error is not None:
        raise cleared.error

    created: List[User] = []
    for username, email in users:
        result = database.create(username, email)
        if result.error is not None:
            raise result.error
        created.extend(result.rows)

    logger.info("Seeded %d user(s) into %s", len(created), database.path)
    return created


__all__ = ["DEFAULT_USERS", "seed_users"]
