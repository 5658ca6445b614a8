from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import IncidentSeverity, IncidentStatus
from .model import Incident


class IncidentRepository(Protocol):
    def create(
        self,
        *,
        organization_id: str,
        guard_id: str,
        incident_type: str,
        title: str,
        description: str,
        severity: IncidentSeverity,
        incident_date: datetime,
        location_latitude: Optional[float],
        location_longitude: Optional[float],
        location_address: Optional[str],
        patrol_id: Optional[str],
        created_at: datetime,
    ) -> Incident:
        raise NotImplementedError

    def get_by_id(self, incident_id: str) -> Optional[Incident]:
        raise NotImplementedError

    def list_for_organization(
        self, organization_id: str, *, status: Optional[IncidentStatus] = None
    ) -> Sequence[Incident]:
        raise NotImplementedError

    def set_status(self, incident_id: str, status: IncidentStatus, *, updated_at: datetime) -> Optional[Incident]:
        raise NotImplementedError
