from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PositionSource


@dataclass(frozen=True)
class GPSSample:
    """One position report sent by a guard's device."""

    id: str
    organization_id: str
    user_id: str
    latitude: float
    longitude: float
    recorded_at: datetime
    accuracy: Optional[float] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None
    heading: Optional[float] = None
    battery_level: Optional[int] = None


@dataclass(frozen=True)
class PositionRow:
    """A timestamped position from either source, flattened for aggregation."""

    user_id: str
    timestamp: datetime
    latitude: float
    longitude: float
    source: PositionSource
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    accuracy: Optional[float] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None
    heading: Optional[float] = None
    battery_level: Optional[int] = None
    location_name: Optional[str] = None
    patrol_status: Optional[str] = None


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float
    timestamp: datetime
    accuracy: Optional[float] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None
    heading: Optional[float] = None


@dataclass(frozen=True)
class LivePosition:
    user_id: str
    user_name: str
    position: Position
    source: PositionSource
    battery_level: Optional[int] = None
    location_name: Optional[str] = None
    patrol_status: Optional[str] = None

    @classmethod
    def from_row(cls, row: PositionRow) -> "LivePosition":
        return cls(
            user_id=row.user_id,
            user_name=f"{row.first_name or 'Unknown'} {row.last_name or 'User'}",
            position=Position(
                latitude=row.latitude,
                longitude=row.longitude,
                timestamp=row.timestamp,
                accuracy=row.accuracy,
                altitude=row.altitude,
                speed=row.speed,
                heading=row.heading,
            ),
            source=row.source,
            battery_level=row.battery_level,
            location_name=row.location_name,
            patrol_status=row.patrol_status,
        )
