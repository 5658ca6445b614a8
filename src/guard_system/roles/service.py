from __future__ import annotations

import logging
from typing import Any, Sequence

from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_ROLES
from ..core.exceptions import ValidationError
from .model import Role
from .repository import RoleRepository

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(self, roles: RoleRepository):
        self._roles = roles

    def list_roles(self, organization_id: str) -> Sequence[Role]:
        """Roles of the tenant; an empty tenant is seeded with Admin/Supervisor/Security Guard."""
        roles = self._roles.list_for_organization(organization_id)
        if roles:
            return roles

        logger.info("seeding default roles for organization %s", organization_id)
        return [
            self._roles.create(organization_id=organization_id, name=name, permissions=list(permissions))
            for name, permissions in DEFAULT_ROLES
        ]

    def create_role(self, organization_id: str, *, name: Any, permissions: Any) -> Role:
        if not name or not isinstance(permissions, (list, dict)):
            raise ValidationError("Name and permissions are required")
        name = require_non_empty(name, "Role name")
        return self._roles.create(organization_id=organization_id, name=name, permissions=permissions)
