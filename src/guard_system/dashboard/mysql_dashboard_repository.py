from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..core.enums import OPEN_INCIDENT_STATUSES, PatrolStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import RecentIncident, RecentVisit
from .repository import DashboardRepository


class MySQLDashboardRepository(DashboardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _count(self, sql: str, params) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def count_active_patrols(self, organization_id: str) -> int:
        return self._count(
            "SELECT COUNT(*) AS n FROM patrols WHERE organization_id=%s AND status=%s",
            (organization_id, PatrolStatus.IN_PROGRESS.value),
        )

    def count_open_incidents(self, organization_id: str) -> int:
        placeholders, values = in_clause([s.value for s in OPEN_INCIDENT_STATUSES])
        return self._count(
            f"SELECT COUNT(*) AS n FROM incidents WHERE organization_id=%s AND status IN ({placeholders})",
            [organization_id] + values,
        )

    def count_guards_seen_since(self, organization_id: str, since: datetime) -> int:
        return self._count(
            "SELECT COUNT(DISTINCT user_id) AS n FROM gps_tracking WHERE organization_id=%s AND recorded_at >= %s",
            (organization_id, since),
        )

    def count_visits_since(self, organization_id: str, since: datetime) -> int:
        return self._count(
            "SELECT COUNT(*) AS n FROM checkpoint_visits WHERE organization_id=%s AND visited_at >= %s",
            (organization_id, since),
        )

    def recent_visits(self, organization_id: str, limit: int) -> Sequence[RecentVisit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT v.visited_at, u.first_name, u.last_name, l.name AS location_name
                FROM checkpoint_visits v
                LEFT JOIN users u ON u.id = v.guard_id
                LEFT JOIN locations l ON l.id = v.location_id
                WHERE v.organization_id=%s
                ORDER BY v.visited_at DESC
                LIMIT %s
                """,
                (organization_id, int(limit)),
            )
            return [
                RecentVisit(
                    visited_at=r["visited_at"],
                    first_name=r.get("first_name"),
                    last_name=r.get("last_name"),
                    location_name=r.get("location_name"),
                )
                for r in fetchall(cur)
            ]

    def recent_incidents(self, organization_id: str, limit: int) -> Sequence[RecentIncident]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT title, severity, status, created_at, location_address
                FROM incidents
                WHERE organization_id=%s
                ORDER BY created_at DESC
                LIMIT %s
                """,
                (organization_id, int(limit)),
            )
            return [
                RecentIncident(
                    title=r["title"],
                    severity=r["severity"],
                    status=r["status"],
                    created_at=r["created_at"],
                    location_name=r.get("location_address"),
                )
                for r in fetchall(cur)
            ]
