from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.geo import check_geofence
from ..common.validators import optional_float, optional_int, parse_enum, require_coordinates
from ..common.web import Identity
from ..core.constants import DEFAULT_DUPLICATE_WINDOW_MINUTES, DEFAULT_QR_VALID_HOURS, SYNC_HISTORY_LIMIT
from ..core.enums import QRCodeType, ShiftAction
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..locations.repository import LocationRepository
from ..users.repository import UserRepository
from .model import AttendanceRecord, CheckInResult, QRCode, ShiftStatus, SyncResult
from .qr_codes import generate_code
from .repository import AttendanceRepository, QRCodeRepository

logger = logging.getLogger(__name__)


class QRCodeService:
    def __init__(self, qr_codes: QRCodeRepository, locations: LocationRepository):
        self._qr_codes = qr_codes
        self._locations = locations

    def create_qr_code(
        self,
        identity: Identity,
        *,
        qr_type: Any,
        site_id: Optional[str] = None,
        valid_hours: Any = None,
        now: datetime | None = None,
    ) -> QRCode:
        """Static codes never expire; a new random code replaces the site's earlier random codes."""
        now = now or now_local()
        qr_type = parse_enum(QRCodeType, qr_type or QRCodeType.STATIC.value, "type")
        hours = optional_int(valid_hours, "valid_hours") or DEFAULT_QR_VALID_HOURS

        if site_id:
            site = self._locations.get_by_id(site_id)
            if not site or site.organization_id != identity.organization_id:
                raise NotFoundError("Site not found")

        valid_until = None
        if qr_type == QRCodeType.RANDOM:
            valid_until = now + timedelta(hours=hours)
            if site_id:
                self._qr_codes.deactivate_random_for_site(identity.organization_id, site_id)

        qr = self._qr_codes.create(
            organization_id=identity.organization_id,
            code=generate_code(qr_type, site_id, now),
            qr_type=qr_type,
            site_id=site_id or None,
            valid_from=now,
            valid_until=valid_until,
            created_by=identity.user_id,
        )
        logger.info("qr code %s (%s) created for organization %s", qr.code, qr_type.value, identity.organization_id)
        return qr

    def list_active(self, organization_id: str, *, site_id: Optional[str] = None) -> Sequence[QRCode]:
        return self._qr_codes.list_active(organization_id, site_id=site_id)

    def get_active(self, organization_id: str, code: str) -> QRCode:
        qr = self._qr_codes.get_active_by_code(code)
        if not qr or qr.organization_id != organization_id:
            raise NotFoundError("QR code not found")
        return qr

    def validate(self, organization_id: str, code: str, *, now: datetime | None = None) -> QRCode:
        now = now or now_local()
        qr = self._qr_codes.get_active_by_code(code)
        if not qr or qr.organization_id != organization_id:
            raise ValidationError("Invalid QR code")
        if qr.is_expired(now):
            raise ValidationError("QR code has expired")
        return qr

    def mark_used(self, qr: QRCode, used_at: datetime) -> None:
        self._qr_codes.touch_last_used(qr.id, used_at)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        qr_service: QRCodeService,
        locations: LocationRepository,
        users: UserRepository,
        *,
        duplicate_window_minutes: int = DEFAULT_DUPLICATE_WINDOW_MINUTES,
    ):
        self._attendance = attendance
        self._qr_service = qr_service
        self._locations = locations
        self._users = users
        self._duplicate_window = timedelta(minutes=int(duplicate_window_minutes))

    def current_status(self, user_id: str, *, now: datetime | None = None) -> ShiftStatus:
        """Checked in means the latest record is a check-in; duration counts from it."""
        now = now or now_local()
        last = self._attendance.last_for_user(user_id)
        if not last:
            return ShiftStatus(is_checked_in=False)

        if last.shift_type != ShiftAction.CHECK_IN:
            return ShiftStatus(is_checked_in=False, last_action=last.shift_type, last_action_at=last.recorded_at)

        hours = (now - last.recorded_at).total_seconds() / 3600
        return ShiftStatus(
            is_checked_in=True,
            last_action=last.shift_type,
            last_action_at=last.recorded_at,
            duration_hours=round(hours, 2),
        )

    def _enforce_site_fence(self, qr: QRCode, latitude: float, longitude: float) -> None:
        if not qr.site_id:
            return
        site = self._locations.get_by_id(qr.site_id)
        if site is None or site.organization_id != qr.organization_id:
            return

        fence = check_geofence(latitude, longitude, site)
        if not fence.allowed:
            raise ValidationError(
                f"You must be within {site.radius_meters}m of {site.name} to check in",
                distance=fence.distance,
            )

    def record_shift(
        self,
        identity: Identity,
        *,
        shift_type: Any = ShiftAction.CHECK_IN.value,
        qr_code: Optional[str] = None,
        latitude: Any = None,
        longitude: Any = None,
        accuracy: Any = None,
        device_info: Optional[dict] = None,
        now: datetime | None = None,
    ) -> CheckInResult:
        now = now or now_local()
        lat, lng = require_coordinates(latitude, longitude)
        action = parse_enum(ShiftAction, shift_type or ShiftAction.CHECK_IN.value, "shift_type")

        qr = None
        if qr_code:
            qr = self._qr_service.validate(identity.organization_id, qr_code, now=now)
            self._enforce_site_fence(qr, lat, lng)

        status = self.current_status(identity.user_id, now=now)
        if action == ShiftAction.CHECK_IN and status.is_checked_in:
            raise ValidationError("You are already checked in. Please check out first.")
        if action == ShiftAction.CHECK_OUT and not status.is_checked_in:
            raise ValidationError("You are not checked in. Please check in first.")

        record = self._attendance.create(
            organization_id=identity.organization_id,
            user_id=identity.user_id,
            shift_type=action,
            recorded_at=now,
            latitude=lat,
            longitude=lng,
            accuracy=optional_float(accuracy, "accuracy"),
            qr_code_id=qr.id if qr else None,
            qr_code=qr.code if qr else None,
            qr_code_type=qr.type if qr else None,
            device_info=device_info,
        )
        if qr:
            self._qr_service.mark_used(qr, now)

        logger.info("user %s recorded %s at %s", identity.user_id, action.value, now.isoformat())

        user = self._users.get_by_id(identity.user_id)
        return CheckInResult(
            record=record,
            user_name=user.full_name if user else "Unknown User",
            user_email=user.email if user else None,
            shift_duration=status.duration_hours if action == ShiftAction.CHECK_OUT else None,
        )

    def history(
        self, user_id: str, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[AttendanceRecord]:
        """Records between two dates, both inclusive, newest first."""
        if start and end and start > end:
            raise ValidationError("start must not be after end")
        start_at = datetime.combine(start, datetime.min.time()) if start else None
        end_at = datetime.combine(end + timedelta(days=1), datetime.min.time()) if end else None
        return self._attendance.list_for_user(user_id, start=start_at, end=end_at)

    def offline_sync(
        self,
        identity: Identity,
        *,
        record_id: Any,
        qr_code: Any,
        action: Any,
        timestamp: Any,
        location: Any,
        device_info: Optional[dict] = None,
        now: datetime | None = None,
    ) -> SyncResult:
        """Replay a record captured while the device was offline; replays of the same record are no-ops."""
        now = now or now_local()
        if not record_id or not qr_code or not action or not timestamp or not isinstance(location, dict):
            raise ValidationError("Missing required fields")

        existing = self._attendance.get_by_offline_id(str(record_id))
        if existing:
            return SyncResult(attendance_id=existing.id, already_synced=True)

        shift_action = parse_enum(ShiftAction, action, "action")
        try:
            recorded_at = parse_iso_datetime(str(timestamp))
        except ValueError:
            raise ValidationError("timestamp must be an ISO-8601 timestamp")
        lat, lng = require_coordinates(location.get("lat"), location.get("lng"))

        qr = self._qr_service.validate(identity.organization_id, str(qr_code), now=now)

        recent = self._attendance.latest_for_user_and_code(
            identity.user_id, qr.code, since=now - self._duplicate_window
        )
        if recent:
            minutes = int(self._duplicate_window.total_seconds() // 60)
            raise ConflictError(f"Duplicate {shift_action.value} detected within {minutes} minutes")

        record = self._attendance.create(
            organization_id=identity.organization_id,
            user_id=identity.user_id,
            shift_type=shift_action,
            recorded_at=recorded_at,
            latitude=lat,
            longitude=lng,
            accuracy=optional_float(location.get("accuracy"), "accuracy"),
            qr_code_id=qr.id,
            qr_code=qr.code,
            qr_code_type=qr.type,
            device_info=device_info,
            offline_record_id=str(record_id),
            metadata={
                "source": "offline_sync",
                "originalTimestamp": str(timestamp),
                "syncTimestamp": now.isoformat(),
            },
        )
        self._qr_service.mark_used(qr, now)
        logger.info("offline record %s synced as %s", record_id, record.id)
        return SyncResult(attendance_id=record.id, already_synced=False)

    def synced_records(self, user_id: str) -> Sequence[AttendanceRecord]:
        return self._attendance.list_synced_for_user(user_id, limit=SYNC_HISTORY_LIMIT)
