from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import LocationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, new_id, opt_float
from .model import Location
from .repository import LocationRepository

_LOCATION_COLUMNS = """
    id, organization_id, name, location_type, address, latitude, longitude,
    radius_meters, require_gps_validation, created_at
"""


class MySQLLocationRepository(LocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_location(r: dict) -> Location:
        return Location(
            id=r["id"],
            organization_id=r["organization_id"],
            name=r["name"],
            location_type=LocationType(r["location_type"]),
            address=r.get("address"),
            latitude=opt_float(r.get("latitude")),
            longitude=opt_float(r.get("longitude")),
            radius_meters=r.get("radius_meters"),
            require_gps_validation=bool(r.get("require_gps_validation")),
            created_at=r.get("created_at"),
        )

    def get_by_id(self, location_id: str) -> Optional[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_LOCATION_COLUMNS} FROM locations WHERE id=%s", (location_id,))
            r = fetchone(cur)
            return self._to_location(r) if r else None

    def list_for_organization(
        self, organization_id: str, *, location_type: Optional[LocationType] = None
    ) -> Sequence[Location]:
        sql = f"SELECT {_LOCATION_COLUMNS} FROM locations WHERE organization_id=%s"
        params: list = [organization_id]
        if location_type is not None:
            sql += " AND location_type=%s"
            params.append(location_type.value)
        sql += " ORDER BY name"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [self._to_location(r) for r in fetchall(cur)]

    def get_many(self, organization_id: str, location_ids: Sequence[str]) -> Sequence[Location]:
        if not location_ids:
            return []
        placeholders, params = in_clause(location_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_LOCATION_COLUMNS} FROM locations WHERE organization_id=%s AND id IN ({placeholders})",
                [organization_id, *params],
            )
            return [self._to_location(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        organization_id: str,
        name: str,
        location_type: LocationType,
        address: Optional[str],
        latitude: Optional[float],
        longitude: Optional[float],
        radius_meters: Optional[int],
        require_gps_validation: bool,
    ) -> Location:
        location_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO locations(id, organization_id, name, location_type, address,
                                      latitude, longitude, radius_meters, require_gps_validation)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    location_id,
                    organization_id,
                    name,
                    location_type.value,
                    address,
                    latitude,
                    longitude,
                    radius_meters,
                    1 if require_gps_validation else 0,
                ),
            )
        return Location(
            id=location_id,
            organization_id=organization_id,
            name=name,
            location_type=location_type,
            address=address,
            latitude=latitude,
            longitude=longitude,
            radius_meters=radius_meters,
            require_gps_validation=require_gps_validation,
        )
