from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence, Tuple

from ..activity.repository import ActivityLogRepository
from ..common.datetime_utils import now_local
from ..common.geo import nearest
from ..common.validators import optional_coordinates, optional_str, parse_enum
from ..common.web import Identity
from ..core.enums import BackupRequestStatus, LocationType
from ..core.exceptions import NotFoundError, ValidationError
from ..locations.model import Location
from ..locations.repository import LocationRepository
from .model import BackupRequest
from .repository import BackupRequestRepository

logger = logging.getLogger(__name__)


class BackupRequestService:
    def __init__(
        self,
        requests: BackupRequestRepository,
        locations: LocationRepository,
        activity: ActivityLogRepository,
    ):
        self._requests = requests
        self._locations = locations
        self._activity = activity

    def list_active(self, organization_id: str) -> Sequence[BackupRequest]:
        return self._requests.list_active(organization_id)

    def request_backup(
        self,
        identity: Identity,
        *,
        current_latitude: Any = None,
        current_longitude: Any = None,
        patrol_id: Optional[str] = None,
        emergency_type: Optional[str] = None,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> Tuple[BackupRequest, Optional[Location]]:
        """Raise an alert; returns the stored request and the checkpoint it was pinned to."""
        lat, lng = optional_coordinates(current_latitude, current_longitude)

        closest: Optional[Location] = None
        distance: Optional[int] = None
        if lat is not None and lng is not None:
            checkpoints = self._locations.list_for_organization(
                identity.organization_id, location_type=LocationType.CHECKPOINT
            )
            found = nearest(lat, lng, checkpoints)
            if found:
                closest, meters = found
                distance = round(meters)

        request = self._requests.create(
            organization_id=identity.organization_id,
            guard_id=identity.user_id,
            patrol_id=patrol_id or None,
            emergency_type=optional_str(emergency_type, "emergency_type") or "backup_request",
            current_latitude=lat,
            current_longitude=lng,
            closest_checkpoint_id=closest.id if closest else None,
            distance_to_checkpoint=distance,
            notes=optional_str(notes, "notes"),
            created_at=now or now_local(),
        )
        self._activity.record(
            organization_id=identity.organization_id,
            user_id=identity.user_id,
            module="security",
            action="backup_requested",
            entity_type="backup_request",
            entity_id=request.id,
            metadata={
                "emergency_type": request.emergency_type,
                "closest_checkpoint": closest.name if closest else None,
                "patrol_id": request.patrol_id,
            },
        )
        logger.warning(
            "backup requested by guard %s (nearest checkpoint: %s)",
            identity.user_id,
            closest.name if closest else "unknown",
        )
        return request, closest

    def update_status(
        self,
        identity: Identity,
        request_id: str,
        *,
        status: Any,
        response_time: Optional[str] = None,
        resolution_notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> BackupRequest:
        if not status:
            raise ValidationError("Status is required")
        new_status = parse_enum(BackupRequestStatus, status, "status")

        existing = self._requests.get_by_id(request_id)
        if not existing or existing.organization_id != identity.organization_id:
            raise NotFoundError("Backup request not found")

        updated = self._requests.update_status(
            request_id,
            status=new_status,
            responded_by=identity.user_id,
            response_time=(str(response_time) if response_time else None),
            resolution_notes=optional_str(resolution_notes, "resolution_notes"),
            updated_at=now or now_local(),
        )
        logger.info("backup request %s is now %s", request_id, new_status.value)
        return updated
