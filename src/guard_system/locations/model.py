from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import LocationType


@dataclass(frozen=True)
class Location:
    """A site (geofenced check-in area) or a patrol checkpoint."""

    id: str
    organization_id: str
    name: str
    location_type: LocationType
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius_meters: Optional[int] = None
    require_gps_validation: bool = False
    created_at: Optional[datetime] = None
