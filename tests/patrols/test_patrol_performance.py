from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from fakes import InMemoryAttendance, InMemoryPatrols, InMemoryUsers
from guard_system.core.enums import PatrolStatus, ShiftAction
from guard_system.core.exceptions import NotFoundError, ValidationError
from guard_system.patrols.model import Patrol
from guard_system.patrols.performance import PatrolPerformanceService
from guard_system.users.model import User

# A Wednesday.
NOW = datetime(2024, 5, 1, 20, 0, 0)


def _patrol(patrol_id, status, *, guard="g1", total=4, done=0, age_days=1):
    return Patrol(id=patrol_id, organization_id="org-1", guard_id=guard, status=status,
                  total_checkpoints=total, checkpoints_completed=done, created_at=NOW - timedelta(days=age_days))


@pytest.fixture
def service():
    attendance = InMemoryAttendance()
    shifts = [
        (datetime(2023, 12, 1, 8, 0), datetime(2023, 12, 1, 20, 0)),
        (datetime(2024, 4, 25, 8, 0), datetime(2024, 4, 25, 18, 0)),
        (datetime(2024, 4, 29, 8, 0), datetime(2024, 4, 29, 14, 0)),
        (datetime(2024, 5, 1, 6, 0), datetime(2024, 5, 1, 9, 0)),
    ]
    for start, end in shifts:
        for action, at in ((ShiftAction.CHECK_IN, start), (ShiftAction.CHECK_OUT, end)):
            attendance.create(organization_id="org-1", user_id="g1", shift_type=action, recorded_at=at,
                              latitude=0.0, longitude=0.0)

    patrols = InMemoryPatrols(
        [
            _patrol("p1", PatrolStatus.COMPLETED, done=4, age_days=2),
            _patrol("p2", PatrolStatus.IN_PROGRESS, done=1, age_days=1),
            _patrol("p3", PatrolStatus.COMPLETED, guard="g2", done=4),
            _patrol("p4", PatrolStatus.COMPLETED, done=4, age_days=200),
        ]
    )
    users = InMemoryUsers(
        [
            User(id="g1", organization_id="org-1", email="g1@x.io", password_hash="x", first_name="Gia", last_name="Le"),
            User(id="g9", organization_id="org-2", email="g9@x.io", password_hash="x", first_name="Zed", last_name="Q"),
        ]
    )
    return PatrolPerformanceService(patrols, attendance, users, clock=lambda: NOW)


def test_default_window_covers_the_last_ninety_days(service):
    kpis = service.guard_kpis("org-1", "g1")

    assert kpis.guard_name == "Gia Le"
    assert kpis.period_end == NOW
    assert kpis.period_start == NOW - timedelta(days=90)
    assert kpis.total_shifts == 3
    assert kpis.total_hours == 19.0
    assert kpis.average_shift_hours == 6.33
    assert kpis.longest_shift_hours == 10.0


def test_week_starts_on_monday_and_month_on_the_first(service):
    kpis = service.guard_kpis("org-1", "g1")
    assert kpis.this_week_hours == 9.0
    assert kpis.this_month_hours == 3.0


def test_patrol_completion(service):
    kpis = service.guard_kpis("org-1", "g1")

    assert kpis.assigned_patrols == 2
    assert kpis.completed_patrols == 1
    assert kpis.patrol_completion_rate == 50
    # 5 of 8 checkpoints visited
    assert kpis.checkpoint_completion_rate == 63


def test_explicit_window_is_inclusive_of_end_day(service):
    kpis = service.guard_kpis("org-1", "g1", start=date(2024, 4, 29), end=date(2024, 4, 29))

    assert kpis.total_shifts == 1
    assert kpis.total_hours == 6.0
    assert (kpis.assigned_patrols, kpis.patrol_completion_rate) == (1, 100)


def test_guard_with_no_activity_reports_zeros():
    service = PatrolPerformanceService(
        InMemoryPatrols(),
        InMemoryAttendance(),
        InMemoryUsers([User(id="g1", organization_id="org-1", email="g1@x.io", password_hash="x",
                            first_name="Gia", last_name="Le")]),
        clock=lambda: NOW,
    )
    kpis = service.guard_kpis("org-1", "g1")
    assert (kpis.total_hours, kpis.average_shift_hours, kpis.longest_shift_hours) == (0.0, 0.0, 0.0)
    assert (kpis.patrol_completion_rate, kpis.checkpoint_completion_rate) == (0, 0)


def test_guard_id_is_required(service):
    with pytest.raises(ValidationError, match="Guard ID is required"):
        service.guard_kpis("org-1", None)


@pytest.mark.parametrize("guard_id", ["nobody", "g9"])
def test_unknown_or_foreign_guard_is_not_found(service, guard_id):
    with pytest.raises(NotFoundError, match="Guard not found"):
        service.guard_kpis("org-1", guard_id)


def test_start_after_end_is_rejected(service):
    with pytest.raises(ValidationError):
        service.guard_kpis("org-1", "g1", start=date(2024, 5, 2), end=date(2024, 5, 1))
