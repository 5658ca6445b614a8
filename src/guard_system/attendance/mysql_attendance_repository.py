from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import QRCodeType, ShiftAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, new_id, opt_float
from .model import AttendanceRecord, QRCode
from .repository import AttendanceRepository, QRCodeRepository

_QR_COLUMNS = """
    id, organization_id, code, type, site_id, valid_from, valid_until,
    is_active, created_by, last_used, created_at
"""

_ATTENDANCE_COLUMNS = """
    id, organization_id, user_id, shift_type, recorded_at, latitude, longitude, accuracy,
    qr_code_id, qr_code, qr_code_type, device_info, offline_record_id, metadata
"""


class MySQLQRCodeRepository(QRCodeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_qr(r: dict) -> QRCode:
        return QRCode(
            id=r["id"],
            organization_id=r["organization_id"],
            code=r["code"],
            type=QRCodeType(r["type"]),
            site_id=r.get("site_id"),
            valid_from=r["valid_from"],
            valid_until=r.get("valid_until"),
            is_active=bool(r.get("is_active", True)),
            created_by=r.get("created_by"),
            last_used=r.get("last_used"),
            created_at=r.get("created_at"),
        )

    def create(
        self,
        *,
        organization_id: str,
        code: str,
        qr_type: QRCodeType,
        site_id: Optional[str],
        valid_from: datetime,
        valid_until: Optional[datetime],
        created_by: Optional[str],
    ) -> QRCode:
        qr_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO qr_codes(id, organization_id, code, type, site_id, valid_from, valid_until, is_active, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,1,%s)
                """,
                (qr_id, organization_id, code, qr_type.value, site_id, valid_from, valid_until, created_by),
            )
        return QRCode(
            id=qr_id,
            organization_id=organization_id,
            code=code,
            type=qr_type,
            site_id=site_id,
            valid_from=valid_from,
            valid_until=valid_until,
            created_by=created_by,
        )

    def get_active_by_code(self, code: str) -> Optional[QRCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_QR_COLUMNS} FROM qr_codes WHERE code=%s AND is_active=1", (code,))
            r = fetchone(cur)
            return self._to_qr(r) if r else None

    def list_active(self, organization_id: str, *, site_id: Optional[str] = None) -> Sequence[QRCode]:
        sql = f"SELECT {_QR_COLUMNS} FROM qr_codes WHERE organization_id=%s AND is_active=1"
        params: list = [organization_id]
        if site_id:
            sql += " AND site_id=%s"
            params.append(site_id)
        sql += " ORDER BY created_at DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [self._to_qr(r) for r in fetchall(cur)]

    def deactivate_random_for_site(self, organization_id: str, site_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE qr_codes SET is_active=0
                WHERE organization_id=%s AND site_id=%s AND type='random' AND is_active=1
                """,
                (organization_id, site_id),
            )
            return cur.rowcount

    def touch_last_used(self, qr_id: str, used_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE qr_codes SET last_used=%s WHERE id=%s", (used_at, qr_id))


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_record(r: dict) -> AttendanceRecord:
        return AttendanceRecord(
            id=r["id"],
            organization_id=r["organization_id"],
            user_id=r["user_id"],
            shift_type=ShiftAction(r["shift_type"]),
            recorded_at=r["recorded_at"],
            latitude=opt_float(r["latitude"]),
            longitude=opt_float(r["longitude"]),
            accuracy=opt_float(r.get("accuracy")),
            qr_code_id=r.get("qr_code_id"),
            qr_code=r.get("qr_code"),
            qr_code_type=QRCodeType(r["qr_code_type"]) if r.get("qr_code_type") else None,
            device_info=load_json(r.get("device_info")),
            offline_record_id=r.get("offline_record_id"),
            metadata=load_json(r.get("metadata"), {}),
        )

    def create(
        self,
        *,
        organization_id: str,
        user_id: str,
        shift_type: ShiftAction,
        recorded_at: datetime,
        latitude: float,
        longitude: float,
        accuracy: Optional[float],
        qr_code_id: Optional[str],
        qr_code: Optional[str],
        qr_code_type: Optional[QRCodeType],
        device_info: Optional[dict],
        offline_record_id: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> AttendanceRecord:
        record_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_attendance(
                    id, organization_id, user_id, shift_type, recorded_at, latitude, longitude, accuracy,
                    qr_code_id, qr_code, qr_code_type, device_info, offline_record_id, metadata
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record_id,
                    organization_id,
                    user_id,
                    shift_type.value,
                    recorded_at,
                    latitude,
                    longitude,
                    accuracy,
                    qr_code_id,
                    qr_code,
                    qr_code_type.value if qr_code_type else None,
                    dump_json(device_info),
                    offline_record_id,
                    dump_json(metadata or {}),
                ),
            )
        return AttendanceRecord(
            id=record_id,
            organization_id=organization_id,
            user_id=user_id,
            shift_type=shift_type,
            recorded_at=recorded_at,
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            qr_code_id=qr_code_id,
            qr_code=qr_code,
            qr_code_type=qr_code_type,
            device_info=device_info,
            offline_record_id=offline_record_id,
            metadata=metadata or {},
        )

    def last_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}
                FROM shift_attendance
                WHERE user_id=%s
                ORDER BY recorded_at DESC
                LIMIT 1
                """,
                (user_id,),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def list_for_user(
        self, user_id: str, *, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Sequence[AttendanceRecord]:
        sql = f"SELECT {_ATTENDANCE_COLUMNS} FROM shift_attendance WHERE user_id=%s"
        params: list = [user_id]
        if start:
            sql += " AND recorded_at >= %s"
            params.append(start)
        if end:
            sql += " AND recorded_at < %s"
            params.append(end)
        sql += " ORDER BY recorded_at DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [self._to_record(r) for r in fetchall(cur)]

    def get_by_offline_id(self, record_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ATTENDANCE_COLUMNS} FROM shift_attendance WHERE offline_record_id=%s",
                (record_id,),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def latest_for_user_and_code(self, user_id: str, qr_code: str, *, since: datetime) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}
                FROM shift_attendance
                WHERE user_id=%s AND qr_code=%s AND recorded_at >= %s
                ORDER BY recorded_at DESC
                LIMIT 1
                """,
                (user_id, qr_code, since),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def list_for_organization(
        self, organization_id: str, *, start: datetime, end: datetime
    ) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}
                FROM shift_attendance
                WHERE organization_id=%s AND recorded_at >= %s AND recorded_at < %s
                ORDER BY recorded_at ASC
                """,
                (organization_id, start, end),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def list_synced_for_user(self, user_id: str, *, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS}
                FROM shift_attendance
                WHERE user_id=%s AND offline_record_id IS NOT NULL
                ORDER BY recorded_at DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            return [self._to_record(r) for r in fetchall(cur)]
