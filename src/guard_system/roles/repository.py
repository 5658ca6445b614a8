from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Permissions, Role


class RoleRepository(Protocol):
    def list_for_organization(self, organization_id: str) -> Sequence[Role]:
        raise NotImplementedError

    def get_by_id(self, role_id: str) -> Optional[Role]:
        raise NotImplementedError

    def create(self, *, organization_id: str, name: str, permissions: Permissions) -> Role:
        raise NotImplementedError
