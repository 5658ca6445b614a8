from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import GPSSample, PositionRow


class GPSRepository(Protocol):
    def record(
        self,
        *,
        organization_id: str,
        user_id: str,
        latitude: float,
        longitude: float,
        recorded_at: datetime,
        accuracy: Optional[float] = None,
        altitude: Optional[float] = None,
        speed: Optional[float] = None,
        heading: Optional[float] = None,
        battery_level: Optional[int] = None,
    ) -> GPSSample:
        raise NotImplementedError

    def sample_positions_since(self, organization_id: str, since: datetime) -> Sequence[PositionRow]:
        raise NotImplementedError

    def visit_positions_since(self, organization_id: str, since: datetime) -> Sequence[PositionRow]:
        """Checkpoint visits that carry coordinates."""
        raise NotImplementedError

    def trail(self, organization_id: str, user_id: str, since: datetime) -> Sequence[GPSSample]:
        """Oldest first."""
        raise NotImplementedError
