from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import IncidentSeverity, IncidentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id, opt_float
from .model import Incident
from .repository import IncidentRepository

_COLUMNS = """
    id, organization_id, guard_id, incident_type, title, description, severity, status,
    incident_date, location_latitude, location_longitude, location_address, patrol_id,
    created_at, updated_at
"""


class MySQLIncidentRepository(IncidentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_incident(r: dict) -> Incident:
        return Incident(
            id=r["id"],
            organization_id=r["organization_id"],
            guard_id=r["guard_id"],
            incident_type=r["incident_type"],
            title=r["title"],
            description=r["description"],
            severity=IncidentSeverity(r["severity"]),
            status=IncidentStatus(r["status"]),
            incident_date=r["incident_date"],
            location_latitude=opt_float(r.get("location_latitude")),
            location_longitude=opt_float(r.get("location_longitude")),
            location_address=r.get("location_address"),
            patrol_id=r.get("patrol_id"),
            created_at=r.get("created_at"),
            updated_at=r.get("updated_at"),
        )

    def create(
        self,
        *,
        organization_id: str,
        guard_id: str,
        incident_type: str,
        title: str,
        description: str,
        severity: IncidentSeverity,
        incident_date: datetime,
        location_latitude: Optional[float],
        location_longitude: Optional[float],
        location_address: Optional[str],
        patrol_id: Optional[str],
        created_at: datetime,
    ) -> Incident:
        incident_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO incidents(id, organization_id, guard_id, incident_type, title, description,
                                      severity, status, incident_date, location_latitude, location_longitude,
                                      location_address, patrol_id, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    incident_id,
                    organization_id,
                    guard_id,
                    incident_type,
                    title,
                    description,
                    severity.value,
                    IncidentStatus.REPORTED.value,
                    incident_date,
                    location_latitude,
                    location_longitude,
                    location_address,
                    patrol_id,
                    created_at,
                    created_at,
                ),
            )
        return self.get_by_id(incident_id)

    def get_by_id(self, incident_id: str) -> Optional[Incident]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM incidents WHERE id=%s", (incident_id,))
            r = fetchone(cur)
            return self._to_incident(r) if r else None

    def list_for_organization(
        self, organization_id: str, *, status: Optional[IncidentStatus] = None
    ) -> Sequence[Incident]:
        sql = f"SELECT {_COLUMNS} FROM incidents WHERE organization_id=%s"
        params: list = [organization_id]
        if status is not None:
            sql += " AND status=%s"
            params.append(status.value)
        sql += " ORDER BY created_at DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [self._to_incident(r) for r in fetchall(cur)]

    def set_status(self, incident_id: str, status: IncidentStatus, *, updated_at: datetime) -> Optional[Incident]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE incidents SET status=%s, updated_at=%s WHERE id=%s",
                (status.value, updated_at, incident_id),
            )
        return self.get_by_id(incident_id)
