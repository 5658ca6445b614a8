"""Attendance reporting built on check-in/check-out pairs.

A shift is a check-in followed by the same guard's next check-out. A check-in
superseded by another check-in counts as a missed check-out; a trailing
check-in with nothing after it is an open shift.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from operator import attrgetter
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_int
from ..core.constants import (
    DEFAULT_ANALYTICS_GUARD_LIMIT,
    DEFAULT_TREND_DAYS,
    MAX_ANALYTICS_GUARD_LIMIT,
    MAX_TREND_DAYS,
    STANDARD_SHIFT_HOURS,
)
from ..core.enums import ShiftAction
from ..core.exceptions import ValidationError
from ..users.repository import UserRepository
from .model import (
    ActiveShift,
    AttendanceMetrics,
    AttendanceRecord,
    AttendanceTrend,
    GuardAttendance,
    LiveAttendance,
)
from .repository import AttendanceRepository


@dataclass(frozen=True)
class Shift:
    check_in: AttendanceRecord
    check_out: AttendanceRecord

    @property
    def minutes(self) -> float:
        return (self.check_out.recorded_at - self.check_in.recorded_at).total_seconds() / 60

    @property
    def overtime_minutes(self) -> float:
        return max(0.0, self.minutes - STANDARD_SHIFT_HOURS * 60)


@dataclass(frozen=True)
class ShiftPairing:
    shifts: List[Shift] = field(default_factory=list)
    missed_check_outs: int = 0
    open_check_in: Optional[AttendanceRecord] = None


def pair_shifts(records: Iterable[AttendanceRecord]) -> ShiftPairing:
    """Pair one guard's records in time order. Check-outs with no open check-in are ignored."""
    shifts: List[Shift] = []
    missed = 0
    open_in: Optional[AttendanceRecord] = None
    for record in sorted(records, key=attrgetter("recorded_at")):
        if record.shift_type == ShiftAction.CHECK_IN:
            if open_in is not None:
                missed += 1
            open_in = record
        elif open_in is not None:
            shifts.append(Shift(check_in=open_in, check_out=record))
            open_in = None
    return ShiftPairing(shifts=shifts, missed_check_outs=missed, open_check_in=open_in)


def pair_by_guard(records: Iterable[AttendanceRecord]) -> Dict[str, ShiftPairing]:
    grouped: Dict[str, List[AttendanceRecord]] = defaultdict(list)
    for record in records:
        grouped[record.user_id].append(record)
    return {user_id: pair_shifts(rows) for user_id, rows in grouped.items()}


def _average_minutes(shifts: Sequence[Shift]) -> float:
    if not shifts:
        return 0.0
    return round(sum(s.minutes for s in shifts) / len(shifts), 1)


def _day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    return datetime.combine(start, datetime.min.time()), datetime.combine(end + timedelta(days=1), datetime.min.time())


class AttendanceAnalyticsService:
    """Use case: organization-wide attendance reports for supervisors."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._users = users
        self._clock = clock

    def _records_between(self, organization_id: str, start: Optional[date], end: Optional[date]):
        if not start or not end:
            raise ValidationError("start and end are required")
        if start > end:
            raise ValidationError("start must not be after end")
        start_at, end_at = _day_bounds(start, end)
        return self._attendance.list_for_organization(organization_id, start=start_at, end=end_at)

    def _names(self, organization_id: str, user_ids: Iterable[str]) -> Dict[str, str]:
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        return {
            u.id: f"{u.first_name} {u.last_name}".strip()
            for u in self._users.list_summaries(organization_id, ids)
        }

    def metrics(self, organization_id: str, *, start: Optional[date], end: Optional[date]) -> AttendanceMetrics:
        records = self._records_between(organization_id, start, end)
        pairings = pair_by_guard(records).values()
        shifts = [s for p in pairings for s in p.shifts]

        return AttendanceMetrics(
            total_check_ins=sum(1 for r in records if r.shift_type == ShiftAction.CHECK_IN),
            total_check_outs=sum(1 for r in records if r.shift_type == ShiftAction.CHECK_OUT),
            completed_shifts=len(shifts),
            average_shift_minutes=_average_minutes(shifts),
            overtime_hours=round(sum(s.overtime_minutes for s in shifts) / 60, 2),
            missed_check_outs=sum(p.missed_check_outs for p in pairings),
            open_shifts=sum(1 for p in pairings if p.open_check_in is not None),
        )

    def guard_performance(
        self, organization_id: str, *, start: Optional[date], end: Optional[date], limit: Any = None
    ) -> List[GuardAttendance]:
        """Guards ranked by hours worked, most first."""
        n = optional_int(limit, "limit")
        if n is None:
            n = DEFAULT_ANALYTICS_GUARD_LIMIT
        if not 0 < n <= MAX_ANALYTICS_GUARD_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_ANALYTICS_GUARD_LIMIT}")

        pairings = pair_by_guard(self._records_between(organization_id, start, end))
        names = self._names(organization_id, pairings)

        rows = []
        for guard_id, pairing in pairings.items():
            minutes = sum(s.minutes for s in pairing.shifts)
            rows.append(
                GuardAttendance(
                    guard_id=guard_id,
                    guard_name=names.get(guard_id) or "Unknown User",
                    shifts_worked=len(pairing.shifts),
                    total_hours=round(minutes / 60, 2),
                    average_shift_minutes=_average_minutes(pairing.shifts),
                    overtime_hours=round(sum(s.overtime_minutes for s in pairing.shifts) / 60, 2),
                    missed_check_outs=pairing.missed_check_outs,
                )
            )
        rows.sort(key=lambda g: (-g.total_hours, g.guard_name))
        return rows[:n]

    def trends(self, organization_id: str, *, days: Any = None, now: datetime | None = None) -> List[AttendanceTrend]:
        """One row per calendar day, oldest first, ending today. Shifts are paired within a day."""
        span = optional_int(days, "days")
        if span is None:
            span = DEFAULT_TREND_DAYS
        if not 0 < span <= MAX_TREND_DAYS:
            raise ValidationError(f"days must be between 1 and {MAX_TREND_DAYS}")

        today = (now or self._clock()).date()
        first = today - timedelta(days=span - 1)
        start_at, end_at = _day_bounds(first, today)
        by_day: Dict[date, List[AttendanceRecord]] = defaultdict(list)
        for record in self._attendance.list_for_organization(organization_id, start=start_at, end=end_at):
            by_day[record.recorded_at.date()].append(record)

        trends = []
        for offset in range(span):
            day = first + timedelta(days=offset)
            rows = by_day.get(day, [])
            shifts = [s for p in pair_by_guard(rows).values() for s in p.shifts]
            trends.append(
                AttendanceTrend(
                    day=day,
                    check_ins=sum(1 for r in rows if r.shift_type == ShiftAction.CHECK_IN),
                    check_outs=sum(1 for r in rows if r.shift_type == ShiftAction.CHECK_OUT),
                    unique_guards=len({r.user_id for r in rows}),
                    average_shift_minutes=_average_minutes(shifts),
                )
            )
        return trends

    def live_status(self, organization_id: str, *, now: datetime | None = None) -> LiveAttendance:
        """Guards whose latest record today is a check-in."""
        now = now or self._clock()
        start_at, end_at = _day_bounds(now.date(), now.date())
        latest: Dict[str, AttendanceRecord] = {}
        for record in self._attendance.list_for_organization(organization_id, start=start_at, end=end_at):
            current = latest.get(record.user_id)
            if current is None or record.recorded_at >= current.recorded_at:
                latest[record.user_id] = record

        on_duty = [r for r in latest.values() if r.shift_type == ShiftAction.CHECK_IN]
        names = self._names(organization_id, (r.user_id for r in on_duty))
        active = [
            ActiveShift(
                guard_id=r.user_id,
                guard_name=names.get(r.user_id) or "Unknown User",
                check_in_time=r.recorded_at,
                duration_minutes=round((now - r.recorded_at).total_seconds() / 60),
                qr_code_id=r.qr_code_id,
            )
            for r in sorted(on_duty, key=attrgetter("recorded_at"))
        ]
        total_guards = sum(1 for g in self._users.list_guard_views(organization_id) if g.is_active)
        return LiveAttendance(guards_on_duty=len(active), total_guards=total_guards, active_shifts=active)
