from __future__ import annotations

from typing import Any, Optional, Sequence

from ..common.validators import (
    optional_bool,
    optional_coordinates,
    optional_int,
    optional_str,
    parse_enum,
    require_non_empty,
)
from ..core.enums import LocationType
from ..core.exceptions import NotFoundError, ValidationError
from .model import Location
from .repository import LocationRepository


class LocationService:
    def __init__(self, locations: LocationRepository):
        self._locations = locations

    def list_locations(self, organization_id: str, *, location_type: Any = None) -> Sequence[Location]:
        kind = parse_enum(LocationType, location_type, "type") if location_type else None
        return self._locations.list_for_organization(organization_id, location_type=kind)

    def get_location(self, organization_id: str, location_id: str) -> Location:
        location = self._locations.get_by_id(location_id)
        if not location or location.organization_id != organization_id:
            raise NotFoundError("Location not found")
        return location

    def create_location(
        self,
        organization_id: str,
        *,
        name: Any,
        location_type: Any = LocationType.CHECKPOINT.value,
        address: Optional[str] = None,
        latitude: Any = None,
        longitude: Any = None,
        radius_meters: Any = None,
        require_gps_validation: Any = False,
    ) -> Location:
        name = require_non_empty(name, "Name")
        kind = parse_enum(LocationType, location_type or LocationType.CHECKPOINT.value, "location_type")
        lat, lng = optional_coordinates(latitude, longitude)

        radius = optional_int(radius_meters, "radius_meters")
        if radius is not None and radius <= 0:
            raise ValidationError("radius_meters must be positive")

        return self._locations.create(
            organization_id=organization_id,
            name=name,
            location_type=kind,
            address=optional_str(address, "address"),
            latitude=lat,
            longitude=lng,
            radius_meters=radius,
            require_gps_validation=optional_bool(require_gps_validation, "require_gps_validation", False),
        )
