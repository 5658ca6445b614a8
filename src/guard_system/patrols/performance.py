from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..attendance.analytics import Shift, pair_shifts
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_PERFORMANCE_DAYS
from ..core.enums import PatrolStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import PatrolPerformance
from .repository import PatrolRepository
from .service import round_half_up

logger = logging.getLogger(__name__)


def _hours(shifts: Sequence[Shift]) -> float:
    return round(sum(s.minutes for s in shifts) / 60, 2)


def _percent(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


class PatrolPerformanceService:
    """Per-guard KPIs: hours worked from attendance, completion from patrols."""

    def __init__(
        self,
        patrols: PatrolRepository,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._patrols = patrols
        self._attendance = attendance
        self._users = users
        self._clock = clock

    def guard_kpis(
        self,
        organization_id: str,
        guard_id: Optional[str],
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: datetime | None = None,
    ) -> PatrolPerformance:
        if not guard_id:
            raise ValidationError("Guard ID is required")
        guard = self._users.get_by_id(guard_id)
        if guard is None or guard.organization_id != organization_id:
            raise NotFoundError("Guard not found")

        now = now or self._clock()
        period_end = datetime.combine(end + timedelta(days=1), datetime.min.time()) if end else now
        period_start = (
            datetime.combine(start, datetime.min.time()) if start else period_end - timedelta(days=DEFAULT_PERFORMANCE_DAYS)
        )
        if period_start >= period_end:
            raise ValidationError("start must not be after end")

        shifts = pair_shifts(self._attendance.list_for_user(guard_id, start=period_start, end=period_end)).shifts
        today = now.date()
        week_start = datetime.combine(today - timedelta(days=today.weekday()), datetime.min.time())
        month_start = datetime.combine(today.replace(day=1), datetime.min.time())

        patrols = [
            p
            for p in self._patrols.list_created_since(organization_id, period_start)
            if p.guard_id == guard_id and (p.created_at is None or p.created_at < period_end)
        ]
        completed = sum(1 for p in patrols if p.status == PatrolStatus.COMPLETED)
        planned = sum(p.total_checkpoints for p in patrols)
        visited = sum(min(p.checkpoints_completed, p.total_checkpoints) for p in patrols)

        logger.debug("KPIs for guard %s: %d shifts, %d patrols", guard_id, len(shifts), len(patrols))
        return PatrolPerformance(
            guard_id=guard_id,
            guard_name=f"{guard.first_name} {guard.last_name}".strip(),
            period_start=period_start,
            period_end=period_end,
            total_shifts=len(shifts),
            total_hours=_hours(shifts),
            average_shift_hours=round(sum(s.minutes for s in shifts) / len(shifts) / 60, 2) if shifts else 0.0,
            longest_shift_hours=round(max((s.minutes for s in shifts), default=0.0) / 60, 2),
            this_week_hours=_hours([s for s in shifts if s.check_in.recorded_at >= week_start]),
            this_month_hours=_hours([s for s in shifts if s.check_in.recorded_at >= month_start]),
            assigned_patrols=len(patrols),
            completed_patrols=completed,
            patrol_completion_rate=_percent(completed, len(patrols)),
            checkpoint_completion_rate=_percent(visited, planned),
        )
