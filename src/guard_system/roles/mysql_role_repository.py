from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, new_id
from .model import Permissions, Role
from .repository import RoleRepository


class MySQLRoleRepository(RoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_role(r: dict) -> Role:
        return Role(
            id=r["id"],
            organization_id=r["organization_id"],
            name=r["name"],
            permissions=load_json(r.get("permissions"), []),
            created_at=r.get("created_at"),
        )

    def list_for_organization(self, organization_id: str) -> Sequence[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, organization_id, name, permissions, created_at
                FROM roles
                WHERE organization_id=%s
                ORDER BY created_at ASC
                """,
                (organization_id,),
            )
            return [self._to_role(r) for r in fetchall(cur)]

    def get_by_id(self, role_id: str) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, organization_id, name, permissions, created_at FROM roles WHERE id=%s",
                (role_id,),
            )
            r = fetchone(cur)
            return self._to_role(r) if r else None

    def create(self, *, organization_id: str, name: str, permissions: Permissions) -> Role:
        role_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO roles(id, organization_id, name, permissions) VALUES(%s,%s,%s,%s)",
                (role_id, organization_id, name, dump_json(permissions)),
            )
        return Role(id=role_id, organization_id=organization_id, name=name, permissions=permissions)
