from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import optional_str, require_non_empty
from ..core.constants import DEFAULT_DEPARTMENTS
from .model import Department
from .repository import DepartmentRepository

logger = logging.getLogger(__name__)


class DepartmentService:
    def __init__(self, departments: DepartmentRepository):
        self._departments = departments

    def list_departments(self, organization_id: str) -> Sequence[Department]:
        """Departments of the tenant; a tenant with none gets the default set first."""
        departments = self._departments.list_for_organization(organization_id)
        if departments:
            return departments

        logger.info("seeding default departments for organization %s", organization_id)
        return [
            self._departments.create(organization_id=organization_id, name=name, description=description)
            for name, description in DEFAULT_DEPARTMENTS
        ]

    def create_department(self, organization_id: str, *, name: str, description: Optional[str] = None) -> Department:
        name = require_non_empty(name, "Department name")
        description = optional_str(description, "description")
        return self._departments.create(organization_id=organization_id, name=name, description=description)
