from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..core.enums import PatrolStatus
from ..locations.model import Location


@dataclass(frozen=True)
class PatrolRoute:
    """An ordered list of checkpoint location ids a guard walks."""

    id: str
    organization_id: str
    name: str
    checkpoints: List[str] = field(default_factory=list)
    description: Optional[str] = None
    estimated_duration: int = 60
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    checkpoint_locations: Optional[List[Location]] = None


@dataclass(frozen=True)
class Patrol:
    id: str
    organization_id: str
    guard_id: str
    status: PatrolStatus
    route_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    checkpoints_completed: int = 0
    total_checkpoints: int = 0
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    guard_name: Optional[str] = None
    route_name: Optional[str] = None


@dataclass(frozen=True)
class CheckpointVisit:
    id: str
    organization_id: str
    patrol_id: str
    location_id: str
    guard_id: str
    visited_at: datetime
    verification_method: str
    verification_data: Optional[dict] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PatrolStatistics:
    total_patrols: int
    completed_patrols: int
    active_patrols: int
    average_checkpoints: float
    completion_rate: int


@dataclass(frozen=True)
class PatrolPerformance:
    """One guard's KPIs over a reporting window."""

    guard_id: str
    guard_name: str
    period_start: datetime
    period_end: datetime
    total_shifts: int
    total_hours: float
    average_shift_hours: float
    longest_shift_hours: float
    this_week_hours: float
    this_month_hours: float
    assigned_patrols: int
    completed_patrols: int
    patrol_completion_rate: int
    checkpoint_completion_rate: int
