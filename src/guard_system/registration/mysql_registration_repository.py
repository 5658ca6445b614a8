from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import TokenType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, new_id
from .model import RegistrationToken
from .repository import RegistrationTokenRepository

_UPDATABLE_COLUMNS = ("is_active", "usage_limit", "expires_at")

_TOKEN_SELECT = """
    SELECT t.id, t.organization_id, t.token, t.token_type, t.role_id, t.department_id,
           t.expires_at, t.usage_limit, t.usage_count, t.is_active, t.metadata,
           t.created_by, t.created_at, t.updated_at,
           r.name AS role_name, d.name AS department_name, o.name AS organization_name
    FROM registration_tokens t
    LEFT JOIN roles r ON r.id = t.role_id
    LEFT JOIN departments d ON d.id = t.department_id
    LEFT JOIN organizations o ON o.id = t.organization_id
"""


class MySQLRegistrationTokenRepository(RegistrationTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_token(r: dict) -> RegistrationToken:
        return RegistrationToken(
            id=r["id"],
            organization_id=r["organization_id"],
            token=r["token"],
            token_type=TokenType(r["token_type"]),
            role_id=r.get("role_id"),
            department_id=r.get("department_id"),
            expires_at=r.get("expires_at"),
            usage_limit=r.get("usage_limit"),
            usage_count=int(r.get("usage_count") or 0),
            is_active=bool(r.get("is_active", True)),
            metadata=load_json(r.get("metadata"), {}),
            created_by=r.get("created_by"),
            created_at=r.get("created_at"),
            updated_at=r.get("updated_at"),
            role_name=r.get("role_name"),
            department_name=r.get("department_name"),
            organization_name=r.get("organization_name"),
        )

    def get_by_id(self, token_id: str) -> Optional[RegistrationToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_TOKEN_SELECT + " WHERE t.id=%s", (token_id,))
            r = fetchone(cur)
            return self._to_token(r) if r else None

    def get_by_token(self, token: str, *, active_only: bool = False) -> Optional[RegistrationToken]:
        sql = _TOKEN_SELECT + " WHERE t.token=%s"
        if active_only:
            sql += " AND t.is_active=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (token,))
            r = fetchone(cur)
            return self._to_token(r) if r else None

    def token_exists(self, token: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM registration_tokens WHERE token=%s LIMIT 1", (token,))
            return fetchone(cur) is not None

    def list_active(self, organization_id: str) -> Sequence[RegistrationToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _TOKEN_SELECT + " WHERE t.organization_id=%s AND t.is_active=1 ORDER BY t.created_at DESC",
                (organization_id,),
            )
            return [self._to_token(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        organization_id: str,
        token: str,
        token_type: TokenType,
        role_id: Optional[str],
        department_id: Optional[str],
        expires_at: Optional[datetime],
        usage_limit: Optional[int],
        created_by: Optional[str],
        metadata: dict,
    ) -> RegistrationToken:
        token_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO registration_tokens(
                    id, organization_id, token, token_type, role_id, department_id,
                    expires_at, usage_limit, usage_count, is_active, metadata, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,0,1,%s,%s)
                """,
                (
                    token_id,
                    organization_id,
                    token,
                    token_type.value,
                    role_id,
                    department_id,
                    expires_at,
                    usage_limit,
                    dump_json(metadata or {}),
                    created_by,
                ),
            )
        return self.get_by_id(token_id)

    def update(self, token_id: str, changes: Dict[str, Any]) -> Optional[RegistrationToken]:
        cols = [c for c in _UPDATABLE_COLUMNS if c in changes]
        if cols:
            assignments = ", ".join(f"{c}=%s" for c in cols)
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE registration_tokens SET {assignments} WHERE id=%s",
                    [changes[c] for c in cols] + [token_id],
                )
        return self.get_by_id(token_id)

    def delete(self, token_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM registration_tokens WHERE id=%s", (token_id,))
            return cur.rowcount > 0

    def increment_usage(self, token_id: str) -> Optional[RegistrationToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE registration_tokens SET usage_count = usage_count + 1 WHERE id=%s",
                (token_id,),
            )
        return self.get_by_id(token_id)
