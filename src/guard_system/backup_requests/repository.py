from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import BackupRequestStatus
from .model import BackupRequest


class BackupRequestRepository(Protocol):
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
        raise NotImplementedError

    def get_by_id(self, request_id: str) -> Optional[BackupRequest]:
        raise NotImplementedError

    def list_active(self, organization_id: str) -> Sequence[BackupRequest]:
        raise NotImplementedError

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
        raise NotImplementedError
