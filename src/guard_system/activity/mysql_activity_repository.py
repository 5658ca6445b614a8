from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, new_id
from .model import ActivityEntry
from .repository import ActivityLogRepository


class MySQLActivityLogRepository(ActivityLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(
        self,
        *,
        organization_id: str,
        user_id: Optional[str],
        module: str,
        action: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> ActivityEntry:
        entry_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_logs(id, organization_id, user_id, module, action, entity_type, entity_id, metadata)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (entry_id, organization_id, user_id, module, action, entity_type, entity_id, dump_json(metadata or {})),
            )
        return ActivityEntry(
            id=entry_id,
            organization_id=organization_id,
            user_id=user_id,
            module=module,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            metadata=metadata or {},
        )
