from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from ..activity.repository import ActivityLogRepository
from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import (
    optional_bool,
    optional_coordinates,
    optional_int,
    optional_str,
    parse_enum,
    require_non_empty,
)
from ..common.web import Identity
from ..core.constants import (
    DEFAULT_DUPLICATE_WINDOW_MINUTES,
    DEFAULT_PATROL_LIST_LIMIT,
    DEFAULT_ROUTE_DURATION_MINUTES,
    DEFAULT_STATISTICS_DAYS,
)
from ..core.enums import LocationType, PatrolStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..locations.repository import LocationRepository
from ..users.repository import UserRepository
from .model import CheckpointVisit, Patrol, PatrolRoute, PatrolStatistics
from .repository import CheckpointVisitRepository, PatrolRepository, PatrolRouteRepository

logger = logging.getLogger(__name__)

ACTIVITY_MODULE = "guard"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class RouteService:
    def __init__(
        self,
        routes: PatrolRouteRepository,
        locations: LocationRepository,
        activity: ActivityLogRepository,
    ):
        self._routes = routes
        self._locations = locations
        self._activity = activity

    def _checkpoint_ids(self, organization_id: str, checkpoints: Any) -> List[str]:
        if not isinstance(checkpoints, list) or not checkpoints:
            raise ValidationError("At least one checkpoint is required")
        ids = [str(c) for c in checkpoints if c]
        if len(ids) != len(checkpoints):
            raise ValidationError("Checkpoints must be location ids")

        known = {loc.id for loc in self._locations.get_many(organization_id, list(set(ids)))}
        missing = [i for i in ids if i not in known]
        if missing:
            raise ValidationError(f"Unknown checkpoint location: {missing[0]}")
        return ids

    def _owned(self, organization_id: str, route_id: str) -> PatrolRoute:
        route = self._routes.get_by_id(route_id)
        if not route or route.organization_id != organization_id:
            raise NotFoundError("Patrol route not found")
        return route

    def list_routes(self, organization_id: str, *, include_checkpoints: bool = False) -> Sequence[PatrolRoute]:
        routes = self._routes.list_for_organization(organization_id)
        if not include_checkpoints:
            return routes

        wanted = sorted({cid for r in routes for cid in r.checkpoints})
        by_id = {loc.id: loc for loc in self._locations.get_many(organization_id, wanted)}
        return [replace(r, checkpoint_locations=[by_id[c] for c in r.checkpoints if c in by_id]) for r in routes]

    def create_route(
        self,
        identity: Identity,
        *,
        name: Any,
        checkpoints: Any,
        description: Optional[str] = None,
        estimated_duration: Any = None,
        is_active: Any = True,
    ) -> PatrolRoute:
        name = require_non_empty(name, "Name")
        ids = self._checkpoint_ids(identity.organization_id, checkpoints)
        duration = optional_int(estimated_duration, "estimated_duration") or DEFAULT_ROUTE_DURATION_MINUTES

        route = self._routes.create(
            organization_id=identity.organization_id,
            name=name,
            description=optional_str(description, "description"),
            checkpoints=ids,
            estimated_duration=duration,
            is_active=optional_bool(is_active, "is_active", True),
            created_by=identity.user_id,
        )
        self._activity.record(
            organization_id=identity.organization_id,
            user_id=identity.user_id,
            module=ACTIVITY_MODULE,
            action="patrol_route_created",
            entity_type="patrol_route",
            entity_id=route.id,
            metadata={"route_name": name, "checkpoint_count": len(ids), "estimated_duration": duration},
        )
        return route

    def update_route(self, identity: Identity, route_id: str, updates: Dict[str, Any]) -> PatrolRoute:
        self._owned(identity.organization_id, route_id)

        changes: Dict[str, Any] = {}
        if "name" in updates:
            changes["name"] = require_non_empty(updates["name"], "Name")
        if "description" in updates:
            changes["description"] = optional_str(updates["description"], "description")
        if "checkpoints" in updates:
            changes["checkpoints"] = self._checkpoint_ids(identity.organization_id, updates["checkpoints"])
        if "estimated_duration" in updates:
            changes["estimated_duration"] = (
                optional_int(updates["estimated_duration"], "estimated_duration") or DEFAULT_ROUTE_DURATION_MINUTES
            )
        if "is_active" in updates:
            changes["is_active"] = optional_bool(updates["is_active"], "is_active", True)

        route = self._routes.update(route_id, changes)
        self._activity.record(
            organization_id=identity.organization_id,
            user_id=identity.user_id,
            module=ACTIVITY_MODULE,
            action="patrol_route_updated",
            entity_type="patrol_route",
            entity_id=route_id,
            metadata={"fields": sorted(changes)},
        )
        return route

    def delete_route(self, identity: Identity, route_id: str) -> None:
        route = self._owned(identity.organization_id, route_id)
        self._routes.delete(route_id)
        self._activity.record(
            organization_id=identity.organization_id,
            user_id=identity.user_id,
            module=ACTIVITY_MODULE,
            action="patrol_route_deleted",
            entity_type="patrol_route",
            entity_id=route_id,
            metadata={"route_name": route.name},
        )


class PatrolService:
    def __init__(
        self,
        patrols: PatrolRepository,
        visits: CheckpointVisitRepository,
        routes: PatrolRouteRepository,
        locations: LocationRepository,
        users: UserRepository,
        activity: ActivityLogRepository,
        *,
        duplicate_window_minutes: int = DEFAULT_DUPLICATE_WINDOW_MINUTES,
    ):
        self._patrols = patrols
        self._visits = visits
        self._routes = routes
        self._locations = locations
        self._users = users
        self._activity = activity
        self._duplicate_window = timedelta(minutes=int(duplicate_window_minutes))

    def _owned(self, organization_id: str, patrol_id: str) -> Patrol:
        patrol = self._patrols.get_by_id(patrol_id)
        if not patrol or patrol.organization_id != organization_id:
            raise NotFoundError("Patrol not found")
        return patrol

    def create_patrol(
        self,
        identity: Identity,
        *,
        guard_id: Any,
        route_id: Optional[str] = None,
        start_time: Any = None,
        total_checkpoints: Any = None,
        notes: Optional[str] = None,
    ) -> Patrol:
        guard_id = require_non_empty(guard_id, "Guard ID")
        guard = self._users.get_by_id(guard_id)
        if not guard or guard.organization_id != identity.organization_id:
            raise ValidationError("Invalid guard or organization")

        route = None
        if route_id:
            route = self._routes.get_by_id(route_id)
            if not route or route.organization_id != identity.organization_id:
                raise ValidationError("Invalid patrol route")

        total = optional_int(total_checkpoints, "total_checkpoints")
        if total is None:
            total = len(route.checkpoints) if route else 0

        starts_at = None
        if start_time:
            try:
                starts_at = parse_iso_datetime(str(start_time))
            except ValueError:
                raise ValidationError("start_time must be an ISO-8601 timestamp")

        patrol = self._patrols.create(
            organization_id=identity.organization_id,
            guard_id=guard_id,
            route_id=route.id if route else None,
            start_time=starts_at,
            total_checkpoints=total,
            notes=optional_str(notes, "notes"),
        )
        self._activity.record(
            organization_id=identity.organization_id,
            user_id=identity.user_id,
            module=ACTIVITY_MODULE,
            action="patrol_created",
            entity_type="patrol",
            entity_id=patrol.id,
            metadata={"route_id": patrol.route_id, "total_checkpoints": total, "assigned_guard": guard_id},
        )
        logger.info("patrol %s scheduled for guard %s", patrol.id, guard_id)
        return patrol

    def list_patrols(
        self, organization_id: str, *, status: Any = None, guard_id: Optional[str] = None, limit: Any = None
    ) -> Sequence[Patrol]:
        wanted = parse_enum(PatrolStatus, status, "status") if status else None
        n = optional_int(limit, "limit") or DEFAULT_PATROL_LIST_LIMIT
        if n <= 0:
            raise ValidationError("limit must be positive")
        return self._patrols.list_for_organization(organization_id, status=wanted, guard_id=guard_id or None, limit=n)

    def start_patrol(self, identity: Identity, patrol_id: str, *, now: datetime | None = None) -> Patrol:
        patrol = self._owned(identity.organization_id, patrol_id)
        if patrol.status != PatrolStatus.SCHEDULED:
            raise ValidationError(f"Cannot start a patrol that is {patrol.status.value}")
        now = now or now_local()
        return self._patrols.set_status(patrol_id, PatrolStatus.IN_PROGRESS, start_time=patrol.start_time or now)

    def complete_patrol(self, identity: Identity, patrol_id: str, *, now: datetime | None = None) -> Patrol:
        patrol = self._owned(identity.organization_id, patrol_id)
        if patrol.status != PatrolStatus.IN_PROGRESS:
            raise ValidationError(f"Cannot complete a patrol that is {patrol.status.value}")
        return self._patrols.set_status(patrol_id, PatrolStatus.COMPLETED, end_time=now or now_local())

    def statistics(self, organization_id: str, *, days: Any = None, now: datetime | None = None) -> PatrolStatistics:
        span = optional_int(days, "days") or DEFAULT_STATISTICS_DAYS
        if span <= 0:
            raise ValidationError("days must be positive")
        since = (now or now_local()) - timedelta(days=span)
        patrols = self._patrols.list_created_since(organization_id, since)

        total = len(patrols)
        if total == 0:
            return PatrolStatistics(
                total_patrols=0, completed_patrols=0, active_patrols=0, average_checkpoints=0, completion_rate=0
            )

        completed = sum(1 for p in patrols if p.status == PatrolStatus.COMPLETED)
        active = sum(1 for p in patrols if p.status == PatrolStatus.IN_PROGRESS)
        checkpoints = sum(p.checkpoints_completed for p in patrols)
        return PatrolStatistics(
            total_patrols=total,
            completed_patrols=completed,
            active_patrols=active,
            average_checkpoints=round_half_up(checkpoints / total * 10) / 10,
            completion_rate=round_half_up(completed / total * 100),
        )

    def record_checkpoint_visit(
        self,
        identity: Identity,
        patrol_id: str,
        *,
        location_id: Any,
        verification_method: Any,
        verification_data: Optional[dict] = None,
        latitude: Any = None,
        longitude: Any = None,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> CheckpointVisit:
        """A guard scans a checkpoint during their own in-progress patrol."""
        now = now or now_local()
        location_id = require_non_empty(location_id, "location_id")
        method = require_non_empty(verification_method, "verification_method")

        patrol = self._patrols.get_by_id(patrol_id)
        if not patrol or patrol.organization_id != identity.organization_id or patrol.guard_id != identity.user_id:
            raise NotFoundError("Patrol not found or does not belong to guard")
        if patrol.status != PatrolStatus.IN_PROGRESS:
            raise ValidationError("Patrol is not in progress")

        location = self._locations.get_by_id(location_id)
        if not location or location.organization_id != identity.organization_id:
            raise NotFoundError("Location not found")
        if location.location_type != LocationType.CHECKPOINT:
            raise ValidationError("Location is not a checkpoint")

        if self._visits.recent_visit(patrol_id, location_id, since=now - self._duplicate_window):
            minutes = int(self._duplicate_window.total_seconds() // 60)
            raise ConflictError(f"Checkpoint already visited within the last {minutes} minutes")

        lat, lng = optional_coordinates(latitude, longitude)
        visit = self._visits.create(
            organization_id=identity.organization_id,
            patrol_id=patrol_id,
            location_id=location_id,
            guard_id=identity.user_id,
            visited_at=now,
            verification_method=method,
            verification_data=verification_data,
            latitude=lat,
            longitude=lng,
            notes=optional_str(notes, "notes"),
        )
        self._patrols.increment_completed(patrol_id)
        self._activity.record(
            organization_id=identity.organization_id,
            user_id=identity.user_id,
            module=ACTIVITY_MODULE,
            action="checkpoint_visited",
            entity_type="checkpoint_visit",
            entity_id=visit.id,
            metadata={
                "patrol_id": patrol_id,
                "location_id": location_id,
                "verification_method": method,
                "verification_data": verification_data,
            },
        )
        logger.info("guard %s visited checkpoint %s on patrol %s", identity.user_id, location_id, patrol_id)
        return visit
