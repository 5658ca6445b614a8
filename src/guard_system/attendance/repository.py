from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import QRCodeType, ShiftAction
from .model import AttendanceRecord, QRCode


class QRCodeRepository(Protocol):
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
        raise NotImplementedError

    def get_active_by_code(self, code: str) -> Optional[QRCode]:
        raise NotImplementedError

    def list_active(self, organization_id: str, *, site_id: Optional[str] = None) -> Sequence[QRCode]:
        raise NotImplementedError

    def deactivate_random_for_site(self, organization_id: str, site_id: str) -> int:
        raise NotImplementedError

    def touch_last_used(self, qr_id: str, used_at: datetime) -> None:
        raise NotImplementedError


class AttendanceRepository(Protocol):
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
        raise NotImplementedError

    def last_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user(
        self, user_id: str, *, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Sequence[AttendanceRecord]:
        """Newest first."""
        raise NotImplementedError

    def get_by_offline_id(self, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def latest_for_user_and_code(self, user_id: str, qr_code: str, *, since: datetime) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_organization(
        self, organization_id: str, *, start: datetime, end: datetime
    ) -> Sequence[AttendanceRecord]:
        """Records with start <= recorded_at < end, oldest first."""
        raise NotImplementedError

    def list_synced_for_user(self, user_id: str, *, limit: int) -> Sequence[AttendanceRecord]:
        """Records that arrived through offline sync, newest first."""
        raise NotImplementedError
