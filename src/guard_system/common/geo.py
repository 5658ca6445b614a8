"""Great-circle helpers used to gate check-in and locate the nearest checkpoint."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Tuple, TypeVar

from ..core.constants import EARTH_RADIUS_M


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in metres between two latitude/longitude points.

    NaN when any input is not finite, so callers can refuse it.
    """
    if not all(math.isfinite(v) for v in (lat1, lon1, lat2, lon2)):
        return math.nan
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push `a` a hair above 1 for antipodal points.
    if a > 1.0:
        a = 1.0
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def within_radius(distance: float, radius: float) -> bool:
    return distance <= radius


class GeoSite(Protocol):
    name: str
    latitude: Optional[float]
    longitude: Optional[float]
    radius_meters: Optional[float]
    require_gps_validation: bool


@dataclass(frozen=True)
class GeofenceResult:
    enforced: bool
    allowed: bool
    distance: Optional[int] = None
    radius: Optional[float] = None


def check_geofence(latitude: float, longitude: float, site: Optional[GeoSite]) -> GeofenceResult:
    """Decide whether a device position may act at `site`.

    A site without coordinates, without a radius, or with validation switched
    off is not fenced at all.
    """
    if (
        site is None
        or not site.require_gps_validation
        or site.radius_meters is None
        or site.latitude is None
        or site.longitude is None
    ):
        return GeofenceResult(enforced=False, allowed=True)

    distance = haversine_distance(latitude, longitude, site.latitude, site.longitude)
    if not math.isfinite(distance):
        return GeofenceResult(enforced=True, allowed=False, radius=float(site.radius_meters))
    return GeofenceResult(
        enforced=True,
        allowed=within_radius(distance, float(site.radius_meters)),
        distance=round(distance),
        radius=float(site.radius_meters),
    )


class _Point(Protocol):
    latitude: Optional[float]
    longitude: Optional[float]


P = TypeVar("P", bound=_Point)


def nearest(latitude: float, longitude: float, candidates: Iterable[P]) -> Optional[Tuple[P, float]]:
    """Closest candidate with coordinates, and its distance in metres."""
    best: Optional[Tuple[P, float]] = None
    for candidate in candidates:
        if candidate.latitude is None or candidate.longitude is None:
            continue
        distance = haversine_distance(latitude, longitude, candidate.latitude, candidate.longitude)
        if not math.isfinite(distance):
            continue
        if best is None or distance < best[1]:
            best = (candidate, distance)
    return best
