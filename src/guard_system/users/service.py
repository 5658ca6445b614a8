from __future__ import annotations

import logging
from typing import Any, Sequence

from werkzeug.security import check_password_hash

from ..common.validators import optional_str, require_non_empty
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..roles.repository import RoleRepository
from .model import GuardView, User, UserSummary
from .repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate user (login) and load the caller's profile."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> User:
        email = (optional_str(email, "Email") or "").lower()
        if not email or not password or not isinstance(password, str):
            raise ValidationError("Email and password are required")

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")

        logger.info("user %s logged in", user.id)
        return user

    def profile(self, user_id: str) -> GuardView:
        view = self._users.get_guard_view(user_id)
        if not view:
            raise AuthenticationError("Unauthorized - please log in")
        return view


class GuardService:
    """Use case: supervisors manage the guards of their own organization."""

    def __init__(self, users: UserRepository, roles: RoleRepository):
        self._users = users
        self._roles = roles

    def list_guards(self, organization_id: str) -> Sequence[GuardView]:
        return self._users.list_guard_views(organization_id)

    def _guard_in_org(self, organization_id: str, guard_id: str) -> User:
        user = self._users.get_by_id(guard_id)
        if not user or user.organization_id != organization_id:
            raise NotFoundError("Guard not found")
        return user

    def set_status(self, organization_id: str, guard_id: str, *, is_active: Any) -> GuardView:
        if not isinstance(is_active, bool):
            raise ValidationError("is_active must be a boolean value")

        self._guard_in_org(organization_id, guard_id)
        self._users.set_active(guard_id, is_active=is_active)
        logger.info("guard %s %s", guard_id, "activated" if is_active else "deactivated")
        return self._users.get_guard_view(guard_id)

    def set_role(self, organization_id: str, guard_id: str, *, role_id: Any) -> tuple[GuardView, str]:
        """Assign a role of the same organization; returns the refreshed guard and the role name."""
        if not role_id:
            raise ValidationError("Role ID is required")

        role = self._roles.get_by_id(str(role_id))
        if not role or role.organization_id != organization_id:
            raise ValidationError("Invalid role ID")

        self._guard_in_org(organization_id, guard_id)
        self._users.set_role(guard_id, role_id=role.id)
        return self._users.get_guard_view(guard_id), role.name


class UserService:
    """Lookups used by other screens (names for ids)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_users(self, organization_id: str, ids: Any) -> Sequence[UserSummary]:
        raw = require_non_empty(ids, "ids")
        user_ids = [i.strip() for i in raw.split(",") if i.strip()]
        if not user_ids:
            raise ValidationError("ids is required")
        return self._users.list_summaries(organization_id, user_ids)

    def get_user(self, organization_id: str, user_id: str) -> UserSummary:
        found = self._users.list_summaries(organization_id, [user_id])
        if not found:
            raise NotFoundError("User not found")
        return found[0]
