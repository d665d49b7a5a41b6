from __future__ import annotations

import logging
from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, DuplicateKeyConflict, NotFoundError, ValidationError
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _verify_password(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (ValueError, TypeError):
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    requires_password_change: bool = False


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, login: str, password: str) -> SessionUser:
        """Admins log in with a username, staff with an email address."""

        login = (login or "").strip()
        if not login or not password:
            raise AuthenticationError("Username/email and password are required")

        user = self._users.get_by_email(login.lower()) if "@" in login else self._users.get_by_username(login)
        if not user:
            logger.info("login failed: unknown account %r", login)
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Account is inactive. Please contact administrator.")

        if not _verify_password(user.password_hash, password):
            logger.info("login failed: bad password for user %d", user.user_id)
            raise AuthenticationError("Invalid credentials")

        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            role=user.role,
            requires_password_change=user.requires_password_change,
        )

    def is_session_valid(self, user_id: int) -> bool:
        """Deactivated accounts lose their session on the next request."""

        user = self._users.get_by_id(int(user_id))
        return bool(user and user.is_active)


class UserService:
    """Use case: manage staff accounts (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_admin(self, *, full_name: str, username: str, password: str) -> int:
        """Bootstrap path for the first admin; not reachable from the staff screen."""

        full_name = require_non_empty(full_name, "Name")
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")

        return self._users.create_user(
            full_name=full_name,
            username=username,
            email=None,
            password_hash=generate_password_hash(password),
            role=Role.ADMIN,
        )

    def create_staff(
        self,
        *,
        current_role: Role,
        full_name: str,
        email: str,
        password: str,
        role: Role = Role.STAFF,
    ) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can create staff accounts")
        if role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be created from this screen")

        full_name = require_non_empty(full_name, "Name")
        email = require_email(email, "Email").lower()
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("Email already exists")

        try:
            user_id = self._users.create_user(
                full_name=full_name,
                username=None,
                email=email,
                password_hash=generate_password_hash(password),
                role=role,
                requires_password_change=True,
            )
        except DuplicateKeyConflict:
            raise ValidationError("Email already exists")

        logger.info("staff account created: %s (%s)", email, role.value)
        return user_id

    def set_active(self, *, current_role: Role, user_id: int, is_active: bool) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change account status")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if user.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deactivated")

        self._users.set_active(int(user_id), is_active=is_active)
        logger.info("user %d %s", int(user_id), "activated" if is_active else "deactivated")

    def change_password(self, *, user_id: int, current_password: str, new_password: str) -> None:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")

        if not _verify_password(user.password_hash, current_password or ""):
            raise ValidationError("Current password is incorrect")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)

        self._users.update_password(
            int(user_id),
            password_hash=generate_password_hash(new_password),
            requires_password_change=False,
        )

    def list_admin_view(self) -> list[dict]:
        return [
            {
                "user_id": u.user_id,
                "full_name": u.full_name,
                "username": u.username or "-",
                "email": u.email or "-",
                "role": u.role.value,
                "is_active": u.is_active,
            }
            for u in self._users.list_all()
        ]
