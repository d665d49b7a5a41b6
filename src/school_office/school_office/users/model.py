from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a login account.

    Note: Plain data object, no DB access here. Admins log in by username,
    staff by email.
    """

    user_id: int
    full_name: str
    username: Optional[str]
    email: Optional[str]
    password_hash: str
    role: Role
    is_active: bool = True
    requires_password_change: bool = False
