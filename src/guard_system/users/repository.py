from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import GuardView, User, UserSummary


class UserRepository(Protocol):
    """Storage for user accounts.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        organization_id: str,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        phone: Optional[str],
        role_id: Optional[str],
        department_id: Optional[str],
    ) -> User:
        raise NotImplementedError

    def set_active(self, user_id: str, *, is_active: bool) -> bool:
        raise NotImplementedError

    def set_role(self, user_id: str, *, role_id: str) -> bool:
        raise NotImplementedError

    def get_guard_view(self, user_id: str) -> Optional[GuardView]:
        raise NotImplementedError

    def list_guard_views(self, organization_id: str) -> Sequence[GuardView]:
        raise NotImplementedError

    def list_summaries(self, organization_id: str, user_ids: Sequence[str]) -> Sequence[UserSummary]:
        raise NotImplementedError
