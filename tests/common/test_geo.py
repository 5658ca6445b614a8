from __future__ import annotations

import math

import pytest

from guard_system.common.geo import check_geofence, haversine_distance, nearest
from guard_system.core.enums import LocationType
from guard_system.locations.model import Location


def _site(**kw) -> Location:
    base = dict(
        id="site-1",
        organization_id="org-1",
        name="Main Gate",
        location_type=LocationType.SITE,
        latitude=40.0,
        longitude=-74.0,
        radius_meters=100,
        require_gps_validation=True,
    )
    base.update(kw)
    return Location(**base)


def test_distance_between_identical_points_is_zero():
    assert haversine_distance(51.5, -0.12, 51.5, -0.12) == 0


def test_antipodal_points_are_half_the_circumference_apart():
    assert haversine_distance(0, 0, 0, 180) == pytest.approx(20_015_087, rel=1e-4)


def test_distance_is_symmetric():
    a = haversine_distance(40.0, -74.0, 34.05, -118.24)
    b = haversine_distance(34.05, -118.24, 40.0, -74.0)
    assert a == pytest.approx(b)


def test_device_just_outside_radius_is_rejected():
    result = check_geofence(40.0009, -74.0, _site())
    assert result.enforced is True
    assert result.allowed is False
    assert result.distance == 100


def test_device_inside_radius_is_accepted():
    result = check_geofence(40.0004, -74.0, _site())
    assert result.allowed is True
    assert result.distance == 44


def test_point_exactly_on_the_boundary_counts_as_inside():
    distance = haversine_distance(40.0, -74.0, 40.0009, -74.0)
    result = check_geofence(40.0009, -74.0, _site(radius_meters=distance))
    assert result.allowed is True


@pytest.mark.parametrize(
    "overrides",
    [
        {"require_gps_validation": False},
        {"radius_meters": None},
        {"latitude": None, "longitude": None},
    ],
)
def test_unfenced_sites_always_allow(overrides):
    result = check_geofence(10.0, 10.0, _site(**overrides))
    assert result.enforced is False
    assert result.allowed is True


def test_nearest_skips_candidates_without_coordinates():
    far = _site(id="far", latitude=41.0, longitude=-74.0)
    close = _site(id="close", latitude=40.001, longitude=-74.0)
    blank = _site(id="blank", latitude=None, longitude=None)

    found, distance = nearest(40.0, -74.0, [far, blank, close])
    assert found.id == "close"
    assert distance == pytest.approx(111.2, abs=0.5)


def test_nearest_of_nothing_is_none():
    assert nearest(40.0, -74.0, []) is None


@pytest.mark.parametrize("bad", [float("nan"), float("inf")])
def test_non_finite_positions_never_pass_the_fence(bad):
    assert not math.isfinite(haversine_distance(bad, -74.0, 40.0, -74.0))

    result = check_geofence(bad, -74.0, _site())
    assert result.enforced is True
    assert result.allowed is False
    assert result.distance is None


def test_nearest_ignores_non_finite_positions():
    assert nearest(float("nan"), -74.0, [_site()]) is None
