from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

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
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def update_password(self, user_id: int, *, password_hash: str, requires_password_change: bool) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError
