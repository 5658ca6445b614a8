from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Department, Organization


class OrganizationRepository(Protocol):
    def get_by_id(self, organization_id: str) -> Optional[Organization]:
        raise NotImplementedError

    def create(self, *, name: str, slug: str, active_modules: list, subscription_tier: str) -> Organization:
        raise NotImplementedError


class DepartmentRepository(Protocol):
    def list_for_organization(self, organization_id: str) -> Sequence[Department]:
        raise NotImplementedError

    def get_by_id(self, department_id: str) -> Optional[Department]:
        raise NotImplementedError

    def create(self, *, organization_id: str, name: str, description: Optional[str] = None) -> Department:
        raise NotImplementedError
