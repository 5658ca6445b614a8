from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import BackupRequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id, opt_float
from .model import BackupRequest
from .repository import BackupRequestRepository

_SELECT = """
    SELECT b.id, b.organization_id, b.guard_id, b.patrol_id, b.emergency_type, b.status,
           b.current_latitude, b.current_longitude, b.closest_checkpoint_id, b.distance_to_checkpoint,
           b.notes, b.responded_by, b.response_time, b.resolution_notes, b.created_at, b.updated_at,
           u.first_name, u.last_name, l.name AS checkpoint_name
    FROM backup_requests b
    LEFT JOIN users u ON u.id = b.guard_id
    LEFT JOIN locations l ON l.id = b.closest_checkpoint_id
"""


class MySQLBackupRequestRepository(BackupRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_request(r: dict) -> BackupRequest:
        guard_name = None
        if r.get("first_name") or r.get("last_name"):
            guard_name = f"{r.get('first_name') or ''} {r.get('last_name') or ''}".strip()
        return BackupRequest(
            id=r["id"],
            organization_id=r["organization_id"],
            guard_id=r["guard_id"],
            status=BackupRequestStatus(r["status"]),
            emergency_type=r.get("emergency_type") or "backup_request",
            patrol_id=r.get("patrol_id"),
            current_latitude=opt_float(r.get("current_latitude")),
            current_longitude=opt_float(r.get("current_longitude")),
            closest_checkpoint_id=r.get("closest_checkpoint_id"),
            distance_to_checkpoint=r.get("distance_to_checkpoint"),
            notes=r.get("notes"),
            responded_by=r.get("responded_by"),
            response_time=r.get("response_time"),
            resolution_notes=r.get("resolution_notes"),
            created_at=r.get("created_at"),
            updated_at=r.get("updated_at"),
            guard_name=guard_name,
            closest_checkpoint_name=r.get("checkpoint_name"),
        )

    def create(
        self,
        *,
        organization_id: str,
        guard_id: str,
        patrol_id: Optional[str],
        emergency_type: str,
        current_latitude: Optional[float],
        current_longitude: Optional[float],
        closest_checkpoint_id: Optional[str],
        distance_to_checkpoint: Optional[int],
        notes: Optional[str],
        created_at: datetime,
    ) -> BackupRequest:
        request_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO backup_requests(id, organization_id, guard_id, patrol_id, emergency_type, status,
                                            current_latitude, current_longitude, closest_checkpoint_id,
                                            distance_to_checkpoint, notes, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    request_id,
                    organization_id,
                    guard_id,
                    patrol_id,
                    emergency_type,
                    BackupRequestStatus.ACTIVE.value,
                    current_latitude,
                    current_longitude,
                    closest_checkpoint_id,
                    distance_to_checkpoint,
                    notes,
                    created_at,
                ),
            )
        return self.get_by_id(request_id)

    def get_by_id(self, request_id: str) -> Optional[BackupRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE b.id=%s", (request_id,))
            r = fetchone(cur)
            return self._to_request(r) if r else None

    def list_active(self, organization_id: str) -> Sequence[BackupRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE b.organization_id=%s AND b.status=%s ORDER BY b.created_at DESC",
                (organization_id, BackupRequestStatus.ACTIVE.value),
            )
            return [self._to_request(r) for r in fetchall(cur)]

    def update_status(
        self,
        request_id: str,
        *,
        status: BackupRequestStatus,
        responded_by: Optional[str],
        response_time: Optional[str],
        resolution_notes: Optional[str],
        updated_at: datetime,
    ) -> Optional[BackupRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE backup_requests
                SET status=%s,
                    responded_by=COALESCE(%s, responded_by),
                    response_time=COALESCE(%s, response_time),
                    resolution_notes=COALESCE(%s, resolution_notes),
                    updated_at=%s
                WHERE id=%s
                """,
                (status.value, responded_by, response_time, resolution_notes, updated_at, request_id),
            )
        return self.get_by_id(request_id)
