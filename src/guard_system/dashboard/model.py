from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class RecentVisit:
    visited_at: datetime
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    location_name: Optional[str] = None


@dataclass(frozen=True)
class RecentIncident:
    title: str
    severity: str
    status: str
    created_at: datetime
    location_name: Optional[str] = None


@dataclass(frozen=True)
class ActivityItem:
    type: str
    message: str
    timestamp: datetime
    status: str


@dataclass(frozen=True)
class DashboardStats:
    active_patrols: int
    open_incidents: int
    guards_on_duty: int
    checkpoints_today: int
    recent_activity: List[ActivityItem] = field(default_factory=list)
