from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, load_json, new_id
from .model import GuardView, User, UserSummary
from .repository import UserRepository

_USER_COLUMNS = """
    id, organization_id, email, password_hash, first_name, last_name, phone,
    role_id, department_id, is_active, created_at, updated_at
"""

_GUARD_VIEW_SELECT = """
    SELECT u.id, u.organization_id, u.email, u.first_name, u.last_name, u.phone,
           u.is_active, u.created_at, u.updated_at,
           u.role_id, r.name AS role_name, r.permissions AS role_permissions,
           u.department_id, d.name AS department_name
    FROM users u
    LEFT JOIN roles r ON r.id = u.role_id
    LEFT JOIN departments d ON d.id = u.department_id
"""


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_user(r: dict) -> User:
        return User(
            id=r["id"],
            organization_id=r["organization_id"],
            email=r["email"],
            password_hash=r["password_hash"],
            first_name=r["first_name"],
            last_name=r["last_name"],
            phone=r.get("phone"),
            role_id=r.get("role_id"),
            department_id=r.get("department_id"),
            is_active=bool(r.get("is_active", True)),
            created_at=r.get("created_at"),
            updated_at=r.get("updated_at"),
        )

    @staticmethod
    def _to_guard_view(r: dict) -> GuardView:
        return GuardView(
            id=r["id"],
            organization_id=r["organization_id"],
            email=r["email"],
            first_name=r["first_name"],
            last_name=r["last_name"],
            phone=r.get("phone"),
            is_active=bool(r.get("is_active", True)),
            role_id=r.get("role_id"),
            role_name=r.get("role_name"),
            role_permissions=load_json(r.get("role_permissions")),
            department_id=r.get("department_id"),
            department_name=r.get("department_name"),
            created_at=r.get("created_at"),
            updated_at=r.get("updated_at"),
        )

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id=%s", (user_id,))
            row = fetchone(cur)
            return self._to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return self._to_user(row) if row else None

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
        user_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(id, organization_id, email, password_hash, first_name, last_name,
                                  phone, role_id, department_id, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (user_id, organization_id, email, password_hash, first_name, last_name, phone, role_id, department_id),
            )
        return User(
            id=user_id,
            organization_id=organization_id,
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role_id=role_id,
            department_id=department_id,
        )

    def set_active(self, user_id: str, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE id=%s", (1 if is_active else 0, user_id))
            return cur.rowcount > 0

    def set_role(self, user_id: str, *, role_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET role_id=%s WHERE id=%s", (role_id, user_id))
            return cur.rowcount > 0

    def get_guard_view(self, user_id: str) -> Optional[GuardView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_GUARD_VIEW_SELECT + " WHERE u.id=%s", (user_id,))
            row = fetchone(cur)
            return self._to_guard_view(row) if row else None

    def list_guard_views(self, organization_id: str) -> Sequence[GuardView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _GUARD_VIEW_SELECT + " WHERE u.organization_id=%s ORDER BY u.created_at DESC",
                (organization_id,),
            )
            return [self._to_guard_view(r) for r in fetchall(cur)]

    def list_summaries(self, organization_id: str, user_ids: Sequence[str]) -> Sequence[UserSummary]:
        if not user_ids:
            return []
        placeholders, params = in_clause(user_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, first_name, last_name, email
                FROM users
                WHERE organization_id=%s AND id IN ({placeholders})
                """,
                [organization_id, *params],
            )
            return [
                UserSummary(id=r["id"], first_name=r["first_name"], last_name=r["last_name"], email=r["email"])
                for r in fetchall(cur)
            ]
