from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import PatrolStatus
from .model import CheckpointVisit, Patrol, PatrolRoute


class PatrolRouteRepository(Protocol):
    def list_for_organization(self, organization_id: str) -> Sequence[PatrolRoute]:
        raise NotImplementedError

    def get_by_id(self, route_id: str) -> Optional[PatrolRoute]:
        raise NotImplementedError

    def create(
        self,
        *,
        organization_id: str,
        name: str,
        description: Optional[str],
        checkpoints: Sequence[str],
        estimated_duration: int,
        is_active: bool,
        created_by: Optional[str],
    ) -> PatrolRoute:
        raise NotImplementedError

    def update(self, route_id: str, changes: Dict[str, Any]) -> Optional[PatrolRoute]:
        raise NotImplementedError

    def delete(self, route_id: str) -> bool:
        raise NotImplementedError


class PatrolRepository(Protocol):
    def create(
        self,
        *,
        organization_id: str,
        guard_id: str,
        route_id: Optional[str],
        start_time: Optional[datetime],
        total_checkpoints: int,
        notes: Optional[str],
    ) -> Patrol:
        raise NotImplementedError

    def get_by_id(self, patrol_id: str) -> Optional[Patrol]:
        raise NotImplementedError

    def list_for_organization(
        self,
        organization_id: str,
        *,
        status: Optional[PatrolStatus] = None,
        guard_id: Optional[str] = None,
        limit: int = 50,
    ) -> Sequence[Patrol]:
        """Newest first."""
        raise NotImplementedError

    def list_created_since(self, organization_id: str, since: datetime) -> Sequence[Patrol]:
        raise NotImplementedError

    def set_status(
        self,
        patrol_id: str,
        status: PatrolStatus,
        *,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> Optional[Patrol]:
        raise NotImplementedError

    def increment_completed(self, patrol_id: str) -> None:
        raise NotImplementedError


class CheckpointVisitRepository(Protocol):
    def create(
        self,
        *,
        organization_id: str,
        patrol_id: str,
        location_id: str,
        guard_id: str,
        visited_at: datetime,
        verification_method: str,
        verification_data: Optional[dict],
        latitude: Optional[float],
        longitude: Optional[float],
        notes: Optional[str],
    ) -> CheckpointVisit:
        raise NotImplementedError

    def recent_visit(self, patrol_id: str, location_id: str, *, since: datetime) -> Optional[CheckpointVisit]:
        raise NotImplementedError
