from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import BackupRequestStatus


@dataclass(frozen=True)
class BackupRequest:
    """A guard's call for assistance, pinned to the closest checkpoint when a position is known."""

    id: str
    organization_id: str
    guard_id: str
    status: BackupRequestStatus
    emergency_type: str = "backup_request"
    patrol_id: Optional[str] = None
    current_latitude: Optional[float] = None
    current_longitude: Optional[float] = None
    closest_checkpoint_id: Optional[str] = None
    distance_to_checkpoint: Optional[int] = None
    notes: Optional[str] = None
    responded_by: Optional[str] = None
    response_time: Optional[str] = None
    resolution_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    guard_name: Optional[str] = None
    closest_checkpoint_name: Optional[str] = None
