from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import optional_coordinates, optional_str, parse_enum
from ..common.web import Identity
from ..core.enums import IncidentSeverity, IncidentStatus
from ..core.exceptions import NotFoundError, ValidationError
from .model import Incident
from .repository import IncidentRepository

logger = logging.getLogger(__name__)


class IncidentService:
    def __init__(self, incidents: IncidentRepository):
        self._incidents = incidents

    def list_incidents(self, organization_id: str, *, status: Any = None) -> Sequence[Incident]:
        wanted = parse_enum(IncidentStatus, status, "status") if status else None
        return self._incidents.list_for_organization(organization_id, status=wanted)

    def report(
        self,
        identity: Identity,
        *,
        incident_type: Any,
        title: Any,
        description: Any,
        severity: Any = None,
        incident_date: Any = None,
        location_latitude: Any = None,
        location_longitude: Any = None,
        location_address: Optional[str] = None,
        patrol_id: Optional[str] = None,
        now: datetime | None = None,
    ) -> Incident:
        now = now or now_local()
        fields = {"incident_type": incident_type, "title": title, "description": description}
        missing = [name for name, value in fields.items() if value is None or not str(value).strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        level = parse_enum(IncidentSeverity, severity or IncidentSeverity.MEDIUM.value, "severity")
        latitude, longitude = optional_coordinates(location_latitude, location_longitude)
        occurred_at = now
        if incident_date:
            try:
                occurred_at = parse_iso_datetime(str(incident_date))
            except ValueError:
                raise ValidationError("incident_date must be an ISO-8601 timestamp")

        incident = self._incidents.create(
            organization_id=identity.organization_id,
            guard_id=identity.user_id,
            incident_type=str(incident_type).strip(),
            title=str(title).strip(),
            description=str(description).strip(),
            severity=level,
            incident_date=occurred_at,
            location_latitude=latitude,
            location_longitude=longitude,
            location_address=optional_str(location_address, "location_address"),
            patrol_id=patrol_id or None,
            created_at=now,
        )
        logger.info("incident %s (%s) reported by %s", incident.id, level.value, identity.user_id)
        return incident

    def update_status(
        self, organization_id: str, incident_id: str, *, status: Any, now: datetime | None = None
    ) -> Incident:
        if not status:
            raise ValidationError("Status is required")
        new_status = parse_enum(IncidentStatus, status, "status")

        existing = self._incidents.get_by_id(incident_id)
        if not existing or existing.organization_id != organization_id:
            raise NotFoundError("Incident not found")
        return self._incidents.set_status(incident_id, new_status, updated_at=now or now_local())
