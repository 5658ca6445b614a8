from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..core.enums import QRCodeType, ShiftAction


@dataclass(frozen=True)
class QRCode:
    """A printable check-in code, optionally bound to a site."""

    id: str
    organization_id: str
    code: str
    type: QRCodeType
    valid_from: datetime
    site_id: Optional[str] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True
    created_by: Optional[str] = None
    last_used: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.valid_until is not None and self.valid_until < now


@dataclass(frozen=True)
class AttendanceRecord:
    id: str
    organization_id: str
    user_id: str
    shift_type: ShiftAction
    recorded_at: datetime
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    qr_code_id: Optional[str] = None
    qr_code: Optional[str] = None
    qr_code_type: Optional[QRCodeType] = None
    device_info: Optional[dict] = None
    offline_record_id: Optional[str] = None
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ShiftStatus:
    is_checked_in: bool
    last_action: Optional[ShiftAction] = None
    last_action_at: Optional[datetime] = None
    duration_hours: Optional[float] = None


@dataclass(frozen=True)
class CheckInResult:
    record: AttendanceRecord
    user_name: str
    user_email: Optional[str]
    shift_duration: Optional[float] = None


@dataclass(frozen=True)
class SyncResult:
    attendance_id: str
    already_synced: bool


@dataclass(frozen=True)
class AttendanceMetrics:
    total_check_ins: int
    total_check_outs: int
    completed_shifts: int
    average_shift_minutes: float
    overtime_hours: float
    missed_check_outs: int
    open_shifts: int


@dataclass(frozen=True)
class GuardAttendance:
    guard_id: str
    guard_name: str
    shifts_worked: int
    total_hours: float
    average_shift_minutes: float
    overtime_hours: float
    missed_check_outs: int


@dataclass(frozen=True)
class AttendanceTrend:
    day: date
    check_ins: int
    check_outs: int
    unique_guards: int
    average_shift_minutes: float


@dataclass(frozen=True)
class ActiveShift:
    guard_id: str
    guard_name: str
    check_in_time: datetime
    duration_minutes: int
    qr_code_id: Optional[str] = None


@dataclass(frozen=True)
class LiveAttendance:
    guards_on_duty: int
    total_guards: int
    active_shifts: List[ActiveShift]
