from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import IncidentSeverity, IncidentStatus


@dataclass(frozen=True)
class Incident:
    id: str
    organization_id: str
    guard_id: str
    incident_type: str
    title: str
    description: str
    severity: IncidentSeverity
    status: IncidentStatus
    incident_date: datetime
    location_latitude: Optional[float] = None
    location_longitude: Optional[float] = None
    location_address: Optional[str] = None
    patrol_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
