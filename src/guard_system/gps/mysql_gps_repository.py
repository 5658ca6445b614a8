from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import PositionSource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, new_id, opt_float
from .model import GPSSample, PositionRow
from .repository import GPSRepository


class MySQLGPSRepository(GPSRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(
        self,
        *,
        organization_id: str,
        user_id: str,
        latitude: float,
        longitude: float,
        recorded_at: datetime,
        accuracy: Optional[float] = None,
        altitude: Optional[float] = None,
        speed: Optional[float] = None,
        heading: Optional[float] = None,
        battery_level: Optional[int] = None,
    ) -> GPSSample:
        sample_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO gps_tracking(id, organization_id, user_id, latitude, longitude, accuracy,
                                         altitude, speed, heading, battery_level, recorded_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    sample_id,
                    organization_id,
                    user_id,
                    latitude,
                    longitude,
                    accuracy,
                    altitude,
                    speed,
                    heading,
                    battery_level,
                    recorded_at,
                ),
            )
        return GPSSample(
            id=sample_id,
            organization_id=organization_id,
            user_id=user_id,
            latitude=latitude,
            longitude=longitude,
            recorded_at=recorded_at,
            accuracy=accuracy,
            altitude=altitude,
            speed=speed,
            heading=heading,
            battery_level=battery_level,
        )

    def sample_positions_since(self, organization_id: str, since: datetime) -> Sequence[PositionRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT g.user_id, g.latitude, g.longitude, g.accuracy, g.altitude, g.speed, g.heading,
                       g.battery_level, g.recorded_at, u.first_name, u.last_name
                FROM gps_tracking g
                LEFT JOIN users u ON u.id = g.user_id
                WHERE g.organization_id=%s AND g.recorded_at >= %s
                ORDER BY g.recorded_at DESC
                """,
                (organization_id, since),
            )
            return [
                PositionRow(
                    user_id=r["user_id"],
                    timestamp=r["recorded_at"],
                    latitude=opt_float(r["latitude"]),
                    longitude=opt_float(r["longitude"]),
                    source=PositionSource.GPS_TRACKING,
                    first_name=r.get("first_name"),
                    last_name=r.get("last_name"),
                    accuracy=opt_float(r.get("accuracy")),
                    altitude=opt_float(r.get("altitude")),
                    speed=opt_float(r.get("speed")),
                    heading=opt_float(r.get("heading")),
                    battery_level=r.get("battery_level"),
                )
                for r in fetchall(cur)
            ]

    def visit_positions_since(self, organization_id: str, since: datetime) -> Sequence[PositionRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT v.guard_id, v.latitude, v.longitude, v.visited_at,
                       u.first_name, u.last_name, l.name AS location_name, p.status AS patrol_status
                FROM checkpoint_visits v
                LEFT JOIN users u ON u.id = v.guard_id
                LEFT JOIN locations l ON l.id = v.location_id
                LEFT JOIN patrols p ON p.id = v.patrol_id
                WHERE v.organization_id=%s AND v.visited_at >= %s
                  AND v.latitude IS NOT NULL AND v.longitude IS NOT NULL
                ORDER BY v.visited_at DESC
                """,
                (organization_id, since),
            )
            return [
                PositionRow(
                    user_id=r["guard_id"],
                    timestamp=r["visited_at"],
                    latitude=opt_float(r["latitude"]),
                    longitude=opt_float(r["longitude"]),
                    source=PositionSource.CHECKPOINT_VISIT,
                    first_name=r.get("first_name"),
                    last_name=r.get("last_name"),
                    location_name=r.get("location_name"),
                    patrol_status=r.get("patrol_status"),
                )
                for r in fetchall(cur)
            ]

    def trail(self, organization_id: str, user_id: str, since: datetime) -> Sequence[GPSSample]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, organization_id, user_id, latitude, longitude, accuracy, altitude, speed,
                       heading, battery_level, recorded_at
                FROM gps_tracking
                WHERE organization_id=%s AND user_id=%s AND recorded_at >= %s
                ORDER BY recorded_at ASC
                """,
                (organization_id, user_id, since),
            )
            return [
                GPSSample(
                    id=r["id"],
                    organization_id=r["organization_id"],
                    user_id=r["user_id"],
                    latitude=opt_float(r["latitude"]),
                    longitude=opt_float(r["longitude"]),
                    recorded_at=r["recorded_at"],
                    accuracy=opt_float(r.get("accuracy")),
                    altitude=opt_float(r.get("altitude")),
                    speed=opt_float(r.get("speed")),
                    heading=opt_float(r.get("heading")),
                    battery_level=r.get("battery_level"),
                )
                for r in fetchall(cur)
            ]
