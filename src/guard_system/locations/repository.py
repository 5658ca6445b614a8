from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import LocationType
from .model import Location


class LocationRepository(Protocol):
    def get_by_id(self, location_id: str) -> Optional[Location]:
        raise NotImplementedError

    def list_for_organization(
        self, organization_id: str, *, location_type: Optional[LocationType] = None
    ) -> Sequence[Location]:
        raise NotImplementedError

    def get_many(self, organization_id: str, location_ids: Sequence[str]) -> Sequence[Location]:
        raise NotImplementedError

    def create(
        self,
        *,
        organization_id: str,
        name: str,
        location_type: LocationType,
        address: Optional[str],
        latitude: Optional[float],
        longitude: Optional[float],
        radius_meters: Optional[int],
        require_gps_validation: bool,
    ) -> Location:
        raise NotImplementedError
