from __future__ import annotations

from datetime import datetime, timedelta

from guard_system.dashboard.model import RecentIncident, RecentVisit
from guard_system.dashboard.service import DashboardService

NOW = datetime(2024, 5, 1, 14, 0, 0)


class InMemoryDashboard:
    def __init__(self, visits=(), incidents=()):
        self.visits = list(visits)
        self.incidents = list(incidents)
        self.calls = {}

    def count_active_patrols(self, organization_id):
        return 3

    def count_open_incidents(self, organization_id):
        return 2

    def count_guards_seen_since(self, organization_id, since):
        self.calls["guards_since"] = since
        return 4

    def count_visits_since(self, organization_id, since):
        self.calls["visits_since"] = since
        return 11

    def recent_visits(self, organization_id, limit):
        return self.visits[:limit]

    def recent_incidents(self, organization_id, limit):
        return self.incidents[:limit]


def _visit(minutes_ago, first="Ann", last="Lee", location="Dock"):
    return RecentVisit(visited_at=NOW - timedelta(minutes=minutes_ago), first_name=first, last_name=last, location_name=location)


def _incident(minutes_ago, title="Broken lock", severity="high", location=None):
    return RecentIncident(
        title=title, severity=severity, status="reported", created_at=NOW - timedelta(minutes=minutes_ago),
        location_name=location,
    )


def test_counts_and_windows():
    repo = InMemoryDashboard()
    stats = DashboardService(repo, on_duty_window_hours=2).stats("org-1", now=NOW)

    assert (stats.active_patrols, stats.open_incidents, stats.guards_on_duty, stats.checkpoints_today) == (3, 2, 4, 11)
    assert repo.calls["guards_since"] == NOW - timedelta(hours=2)
    assert repo.calls["visits_since"] == datetime(2024, 5, 1)
    assert stats.recent_activity == []


def test_recent_activity_merges_newest_first_top_five():
    repo = InMemoryDashboard(
        visits=[_visit(1), _visit(10), _visit(20), _visit(30, first=None, last=None, location=None), _visit(40)],
        incidents=[_incident(5), _incident(25, title="Alarm", severity="low", location="Gate 2"), _incident(50)],
    )
    activity = DashboardService(repo).recent_activity("org-1")

    assert [a.timestamp for a in activity] == [NOW - timedelta(minutes=m) for m in (1, 5, 10, 20, 25)]
    assert activity[0].message == "Ann Lee completed checkpoint at Dock"
    assert activity[0].status == "completed"
    assert activity[1].message == "HIGH incident: Broken lock at Unknown location"
    assert activity[4].message == "LOW incident: Alarm at Gate 2"
    assert activity[4].type == "incident"


def test_anonymous_visit_message():
    repo = InMemoryDashboard(visits=[_visit(1, first=None, last=None, location=None)])
    [item] = DashboardService(repo).recent_activity("org-1")
    assert item.message == "Guard  completed checkpoint at Unknown location"
