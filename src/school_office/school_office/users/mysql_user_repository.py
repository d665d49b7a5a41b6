from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, full_name, username, email, password_hash, role, is_active, requires_password_change"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        username=row.get("username"),
        email=row.get("email"),
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
        requires_password_change=bool(row.get("requires_password_change", False)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(
        self,
        *,
        full_name: str,
        username: Optional[str],
        email: Optional[str],
        password_hash: str,
        role: Role,
        requires_password_change: bool = False,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, username, email, password_hash, role, is_active, requires_password_change)
                VALUES(%s,%s,%s,%s,%s,1,%s)
                """,
                (full_name, username, email, password_hash, role.value, 1 if requires_password_change else 0),
            )
            return int(cur.lastrowid)

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (1 if is_active else 0, int(user_id)))
            return cur.rowcount > 0

    def update_password(self, user_id: int, *, password_hash: str, requires_password_change: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET password_hash=%s, requires_password_change=%s WHERE user_id=%s",
                (password_hash, 1 if requires_password_change else 0, int(user_id)),
            )
            return cur.rowcount > 0

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY user_id DESC")
            return [_to_user(r) for r in fetchall(cur)]
