"""SQLite-backed persistence for the ``users`` table."""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .models import User

logger = logging.getLogger("usersapi.database")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the application database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "users.sqlite3").resolve(strict=False)


def _parse_datetime(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class GatewayError(RuntimeError):
    """A storage failure raised by SQLite while running a users statement."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause
        self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": type(self.cause).__name__,
            "message": str(self.cause),
            "code": getattr(self.cause, "sqlite_errorname", None),
        }


@dataclass(frozen=True)
class GatewayResult:
    """Rows returned by a statement, or the error that stopped it."""

    rows: List[User] = field(default_factory=list)
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL,
    email TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""


class Database:
    """Gateway that runs exactly one parameterised statement per operation."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Schema lifecycle
    # ------------------------------------------------------------------
    def initialize(self) -> None:
        """Create the ``users`` table if it does not already exist."""

        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    def drop(self) -> None:
        """Drop the ``users`` table, discarding every row."""

        with self._connect() as conn:
            conn.execute("DROP TABLE IF EXISTS users")

    # ------------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------------
    def fetch_all(self) -> GatewayResult:
        return self._run("fetch_all", "SELECT * FROM users ORDER BY id", ())

    def fetch_one(self, user_id: int) -> GatewayResult:
        return self._run("fetch_one", "SELECT * FROM users WHERE id = ?", (user_id,))

    def create(self, username: str, email: str) -> GatewayResult:
        result = self._run(
            "create",
            "INSERT INTO users (username, email) VALUES (?, ?) RETURNING *",
            (username, email),
        )
        if result.ok:
            for user in result.rows:
                logger.info("Created user %s", user.id)
        return result

    def update(self, user_id: int, username: str, email: str) -> GatewayResult:
        result = self._run(
            "update",
            "UPDATE users SET username = ?, email = ? WHERE id = ? RETURNING *",
            (username, email, user_id),
        )
        if result.ok:
            logger.info("Updated %d row(s) for user %s", len(result.rows), user_id)
        return result

    def delete(self, user_id: int) -> GatewayResult:
        result = self._run("delete", "DELETE FROM users WHERE id = ? RETURNING *", (user_id,))
        if result.ok:
            logger.info("Deleted %d row(s) for user %s", len(result.rows), user_id)
        return result

    def delete_all(self) -> GatewayResult:
        return self._run("delete_all", "DELETE FROM users RETURNING *", ())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _run(self, operation: str, statement: str, params: Sequence[object]) -> GatewayResult:
        try:
            with self._connect() as conn:
                rows = conn.execute(statement, params).fetchall()
        except sqlite3.Error as exc:
            logger.exception("User %s statement failed", operation)
            return GatewayResult(error=GatewayError(operation, exc))
        return GatewayResult(rows=[self._row_to_user(row) for row in rows])

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            username=str(row["username"]),
            email=str(row["email"]),
            created_at=_parse_datetime(str(row["created_at"])),
        )


__all__ = ["Database", "GatewayError", "GatewayResult", "resolve_database_path"]
