from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .model import RecentIncident, RecentVisit


class DashboardRepository(Protocol):
    """Read-only counters over the operational tables."""

    def count_active_patrols(self, organization_id: str) -> int:
        raise NotImplementedError

    def count_open_incidents(self, organization_id: str) -> int:
        raise NotImplementedError

    def count_guards_seen_since(self, organization_id: str, since: datetime) -> int:
        raise NotImplementedError

    def count_visits_since(self, organization_id: str, since: datetime) -> int:
        raise NotImplementedError

    def recent_visits(self, organization_id: str, limit: int) -> Sequence[RecentVisit]:
        raise NotImplementedError

    def recent_incidents(self, organization_id: str, limit: int) -> Sequence[RecentIncident]:
        raise NotImplementedError
