from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, List, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_float, optional_int, require_coordinates
from ..common.web import Identity
from ..core.constants import DEFAULT_LIVE_WINDOW_MINUTES
from ..core.exceptions import ValidationError
from .aggregation import latest_per_identity
from .model import GPSSample, LivePosition
from .repository import GPSRepository

logger = logging.getLogger(__name__)


class TrackingService:
    def __init__(self, gps: GPSRepository, *, live_window_minutes: int = DEFAULT_LIVE_WINDOW_MINUTES):
        self._gps = gps
        self._live_window = timedelta(minutes=int(live_window_minutes))

    def update_position(
        self,
        identity: Identity,
        *,
        latitude: Any,
        longitude: Any,
        accuracy: Any = None,
        altitude: Any = None,
        speed: Any = None,
        heading: Any = None,
        battery_level: Any = None,
        now: datetime | None = None,
    ) -> GPSSample:
        """Store a device report; the server clock stamps it."""
        lat, lng = require_coordinates(latitude, longitude)
        battery = optional_int(battery_level, "battery_level")
        if battery is not None and not 0 <= battery <= 100:
            raise ValidationError("battery_level must be between 0 and 100")

        return self._gps.record(
            organization_id=identity.organization_id,
            user_id=identity.user_id,
            latitude=lat,
            longitude=lng,
            recorded_at=now or now_local(),
            accuracy=optional_float(accuracy, "accuracy"),
            altitude=optional_float(altitude, "altitude"),
            speed=optional_float(speed, "speed"),
            heading=optional_float(heading, "heading"),
            battery_level=battery,
        )

    def active_positions(self, organization_id: str, *, now: datetime | None = None) -> List[LivePosition]:
        """Newest position per guard inside the live window, from GPS samples and checkpoint visits."""
        since = (now or now_local()) - self._live_window
        rows = list(self._gps.visit_positions_since(organization_id, since))
        rows.extend(self._gps.sample_positions_since(organization_id, since))
        return [LivePosition.from_row(row) for row in latest_per_identity(rows)]

    def trail(
        self, organization_id: str, user_id: str, *, minutes: Any = None, now: datetime | None = None
    ) -> Sequence[GPSSample]:
        window = optional_int(minutes, "minutes")
        if window is not None and window <= 0:
            raise ValidationError("minutes must be positive")
        span = timedelta(minutes=window) if window else self._live_window
        return self._gps.trail(organization_id, user_id, (now or now_local()) - span)
