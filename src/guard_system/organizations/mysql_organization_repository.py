from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, new_id
from .model import Department, Organization
from .repository import DepartmentRepository, OrganizationRepository


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, organization_id: str) -> Optional[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, slug, active_modules, subscription_tier, created_at
                FROM organizations
                WHERE id=%s
                """,
                (organization_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Organization(
                id=r["id"],
                name=r["name"],
                slug=r["slug"],
                active_modules=load_json(r.get("active_modules"), []),
                subscription_tier=r["subscription_tier"],
                created_at=r.get("created_at"),
            )

    def create(self, *, name: str, slug: str, active_modules: list, subscription_tier: str) -> Organization:
        org_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO organizations(id, name, slug, active_modules, subscription_tier)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (org_id, name, slug, dump_json(active_modules), subscription_tier),
            )
        return Organization(
            id=org_id,
            name=name,
            slug=slug,
            active_modules=list(active_modules),
            subscription_tier=subscription_tier,
        )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_department(r: dict) -> Department:
        return Department(
            id=r["id"],
            organization_id=r["organization_id"],
            name=r["name"],
            description=r.get("description"),
            created_at=r.get("created_at"),
        )

    def list_for_organization(self, organization_id: str) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, organization_id, name, description, created_at
                FROM departments
                WHERE organization_id=%s
                ORDER BY created_at, name
                """,
                (organization_id,),
            )
            return [self._to_department(r) for r in fetchall(cur)]

    def get_by_id(self, department_id: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, organization_id, name, description, created_at FROM departments WHERE id=%s",
                (department_id,),
            )
            r = fetchone(cur)
            return self._to_department(r) if r else None

    def create(self, *, organization_id: str, name: str, description: Optional[str] = None) -> Department:
        dept_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO departments(id, organization_id, name, description) VALUES(%s,%s,%s,%s)",
                (dept_id, organization_id, name, description),
            )
        return Department(id=dept_id, organization_id=organization_id, name=name, description=description)
