from __future__ import annotations

from datetime import datetime, timedelta
from typing import List

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_ON_DUTY_WINDOW_HOURS, RECENT_ACTIVITY_LIMIT
from .model import ActivityItem, DashboardStats, RecentIncident, RecentVisit
from .repository import DashboardRepository

RECENT_INCIDENT_LIMIT = 3


def _visit_item(visit: RecentVisit) -> ActivityItem:
    guard = f"{visit.first_name or 'Guard'} {visit.last_name or ''}"
    return ActivityItem(
        type="checkpoint",
        message=f"{guard} completed checkpoint at {visit.location_name or 'Unknown location'}",
        timestamp=visit.visited_at,
        status="completed",
    )


def _incident_item(incident: RecentIncident) -> ActivityItem:
    return ActivityItem(
        type="incident",
        message=(
            f"{(incident.severity or '').upper()} incident: {incident.title} "
            f"at {incident.location_name or 'Unknown location'}"
        ),
        timestamp=incident.created_at,
        status=incident.status,
    )


class DashboardService:
    def __init__(self, dashboard: DashboardRepository, *, on_duty_window_hours: int = DEFAULT_ON_DUTY_WINDOW_HOURS):
        self._dashboard = dashboard
        self._on_duty_window = timedelta(hours=int(on_duty_window_hours))

    def recent_activity(self, organization_id: str) -> List[ActivityItem]:
        """Checkpoint visits and incidents merged newest first."""
        items = [_visit_item(v) for v in self._dashboard.recent_visits(organization_id, RECENT_ACTIVITY_LIMIT)]
        items += [_incident_item(i) for i in self._dashboard.recent_incidents(organization_id, RECENT_INCIDENT_LIMIT)]
        items.sort(key=lambda item: item.timestamp, reverse=True)
        return items[:RECENT_ACTIVITY_LIMIT]

    def stats(self, organization_id: str, *, now: datetime | None = None) -> DashboardStats:
        now = now or now_local()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return DashboardStats(
            active_patrols=self._dashboard.count_active_patrols(organization_id),
            open_incidents=self._dashboard.count_open_incidents(organization_id),
            guards_on_duty=self._dashboard.count_guards_seen_since(organization_id, now - self._on_duty_window),
            checkpoints_today=self._dashboard.count_visits_since(organization_id, start_of_day),
            recent_activity=self.recent_activity(organization_id),
        )
