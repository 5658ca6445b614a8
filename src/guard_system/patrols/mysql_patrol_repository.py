from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import PatrolStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, new_id, opt_float
from .model import CheckpointVisit, Patrol, PatrolRoute
from .repository import CheckpointVisitRepository, PatrolRepository, PatrolRouteRepository

_ROUTE_COLUMNS = """
    id, organization_id, name, description, checkpoints, estimated_duration,
    is_active, created_by, created_at, updated_at
"""

_ROUTE_UPDATABLE = ("name", "description", "checkpoints", "estimated_duration", "is_active")

_PATROL_SELECT = """
    SELECT p.id, p.organization_id, p.guard_id, p.route_id, p.status, p.start_time, p.end_time,
           p.checkpoints_completed, p.total_checkpoints, p.notes, p.created_at,
           u.first_name, u.last_name, r.name AS route_name
    FROM patrols p
    LEFT JOIN users u ON u.id = p.guard_id
    LEFT JOIN patrol_routes r ON r.id = p.route_id
"""


class MySQLPatrolRouteRepository(PatrolRouteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_route(r: dict) -> PatrolRoute:
        return PatrolRoute(
            id=r["id"],
            organization_id=r["organization_id"],
            name=r["name"],
            description=r.get("description"),
            checkpoints=list(load_json(r.get("checkpoints"), [])),
            estimated_duration=int(r.get("estimated_duration") or 0),
            is_active=bool(r.get("is_active", True)),
            created_by=r.get("created_by"),
            created_at=r.get("created_at"),
            updated_at=r.get("updated_at"),
        )

    def list_for_organization(self, organization_id: str) -> Sequence[PatrolRoute]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ROUTE_COLUMNS} FROM patrol_routes WHERE organization_id=%s ORDER BY created_at DESC",
                (organization_id,),
            )
            return [self._to_route(r) for r in fetchall(cur)]

    def get_by_id(self, route_id: str) -> Optional[PatrolRoute]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROUTE_COLUMNS} FROM patrol_routes WHERE id=%s", (route_id,))
            r = fetchone(cur)
            return self._to_route(r) if r else None

    def create(
        self,
        *,
        organization_id: str,
        name: str,
        description: Optional[str],
        checkpoints: Sequence[str],
        estimated_duration: int,
        is_active: bool,
        created_by: Optional[str],
    ) -> PatrolRoute:
        route_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO patrol_routes(id, organization_id, name, description, checkpoints,
                                          estimated_duration, is_active, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    route_id,
                    organization_id,
                    name,
                    description,
                    dump_json(list(checkpoints)),
                    estimated_duration,
                    1 if is_active else 0,
                    created_by,
                ),
            )
        return self.get_by_id(route_id)

    def update(self, route_id: str, changes: Dict[str, Any]) -> Optional[PatrolRoute]:
        cols = [c for c in _ROUTE_UPDATABLE if c in changes]
        if cols:
            values = []
            for c in cols:
                v = changes[c]
                if c == "checkpoints":
                    v = dump_json(list(v))
                elif c == "is_active":
                    v = 1 if v else 0
                values.append(v)
            assignments = ", ".join(f"{c}=%s" for c in cols)
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE patrol_routes SET {assignments} WHERE id=%s", values + [route_id])
        return self.get_by_id(route_id)

    def delete(self, route_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM patrol_routes WHERE id=%s", (route_id,))
            return cur.rowcount > 0


class MySQLPatrolRepository(PatrolRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_patrol(r: dict) -> Patrol:
        guard_name = None
        if r.get("first_name") or r.get("last_name"):
            guard_name = f"{r.get('first_name') or ''} {r.get('last_name') or ''}".strip()
        return Patrol(
            id=r["id"],
            organization_id=r["organization_id"],
            guard_id=r["guard_id"],
            route_id=r.get("route_id"),
            status=PatrolStatus(r["status"]),
            start_time=r.get("start_time"),
            end_time=r.get("end_time"),
            checkpoints_completed=int(r.get("checkpoints_completed") or 0),
            total_checkpoints=int(r.get("total_checkpoints") or 0),
            notes=r.get("notes"),
            created_at=r.get("created_at"),
            guard_name=guard_name,
            route_name=r.get("route_name"),
        )

    def create(
        self,
        *,
        organization_id: str,
        guard_id: str,
        route_id: Optional[str],
        start_time: Optional[datetime],
        total_checkpoints: int,
        notes: Optional[str],
    ) -> Patrol:
        patrol_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO patrols(id, organization_id, guard_id, route_id, status, start_time,
                                    checkpoints_completed, total_checkpoints, notes)
                VALUES(%s,%s,%s,%s,%s,%s,0,%s,%s)
                """,
                (
                    patrol_id,
                    organization_id,
                    guard_id,
                    route_id,
                    PatrolStatus.SCHEDULED.value,
                    start_time,
                    total_checkpoints,
                    notes,
                ),
            )
        return self.get_by_id(patrol_id)

    def get_by_id(self, patrol_id: str) -> Optional[Patrol]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_PATROL_SELECT + " WHERE p.id=%s", (patrol_id,))
            r = fetchone(cur)
            return self._to_patrol(r) if r else None

    def list_for_organization(
        self,
        organization_id: str,
        *,
        status: Optional[PatrolStatus] = None,
        guard_id: Optional[str] = None,
        limit: int = 50,
    ) -> Sequence[Patrol]:
        sql = _PATROL_SELECT + " WHERE p.organization_id=%s"
        params: list = [organization_id]
        if status is not None:
            sql += " AND p.status=%s"
            params.append(status.value)
        if guard_id:
            sql += " AND p.guard_id=%s"
            params.append(guard_id)
        sql += " ORDER BY p.created_at DESC LIMIT %s"
        params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [self._to_patrol(r) for r in fetchall(cur)]

    def list_created_since(self, organization_id: str, since: datetime) -> Sequence[Patrol]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _PATROL_SELECT + " WHERE p.organization_id=%s AND p.created_at >= %s",
                (organization_id, since),
            )
            return [self._to_patrol(r) for r in fetchall(cur)]

    def set_status(
        self,
        patrol_id: str,
        status: PatrolStatus,
        *,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> Optional[Patrol]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE patrols
                SET status=%s,
                    start_time=COALESCE(%s, start_time),
                    end_time=COALESCE(%s, end_time)
                WHERE id=%s
                """,
                (status.value, start_time, end_time, patrol_id),
            )
        return self.get_by_id(patrol_id)

    def increment_completed(self, patrol_id: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE patrols SET checkpoints_completed = checkpoints_completed + 1 WHERE id=%s",
                (patrol_id,),
            )


class MySQLCheckpointVisitRepository(CheckpointVisitRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        organization_id: str,
        patrol_id: str,
        location_id: str,
        guard_id: str,
        visited_at: datetime,
        verification_method: str,
        verification_data: Optional[dict],
        latitude: Optional[float],
        longitude: Optional[float],
        notes: Optional[str],
    ) -> CheckpointVisit:
        visit_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO checkpoint_visits(id, organization_id, patrol_id, location_id, guard_id, visited_at,
                                              verification_method, verification_data, latitude, longitude, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    visit_id,
                    organization_id,
                    patrol_id,
                    location_id,
                    guard_id,
                    visited_at,
                    verification_method,
                    dump_json(verification_data),
                    latitude,
                    longitude,
                    notes,
                ),
            )
        return CheckpointVisit(
            id=visit_id,
            organization_id=organization_id,
            patrol_id=patrol_id,
            location_id=location_id,
            guard_id=guard_id,
            visited_at=visited_at,
            verification_method=verification_method,
            verification_data=verification_data,
            latitude=latitude,
            longitude=longitude,
            notes=notes,
        )

    def recent_visit(self, patrol_id: str, location_id: str, *, since: datetime) -> Optional[CheckpointVisit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, organization_id, patrol_id, location_id, guard_id, visited_at,
                       verification_method, verification_data, latitude, longitude, notes
                FROM checkpoint_visits
                WHERE patrol_id=%s AND location_id=%s AND visited_at >= %s
                ORDER BY visited_at DESC
                LIMIT 1
                """,
                (patrol_id, location_id, since),
            )
            r = fetchone(cur)
            if not r:
                return None
            return CheckpointVisit(
                id=r["id"],
                organization_id=r["organization_id"],
                patrol_id=r["patrol_id"],
                location_id=r["location_id"],
                guard_id=r["guard_id"],
                visited_at=r["visited_at"],
                verification_method=r["verification_method"],
                verification_data=load_json(r.get("verification_data")),
                latitude=opt_float(r.get("latitude")),
                longitude=opt_float(r.get("longitude")),
                notes=r.get("notes"),
            )
