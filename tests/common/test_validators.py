from __future__ import annotations

from datetime import date

import pytest

from guard_system.common.validators import (
    optional_bool,
    optional_coordinates,
    optional_day,
    optional_float,
    optional_int,
    optional_str,
    require_coordinates,
)
from guard_system.core.exceptions import ValidationError


@pytest.mark.parametrize("value", ["NaN", float("nan"), "inf", float("-inf")])
def test_non_finite_numbers_are_rejected(value):
    with pytest.raises(ValidationError, match="latitude must be a finite number"):
        optional_float(value, "latitude")


def test_nan_coordinates_are_rejected():
    with pytest.raises(ValidationError):
        require_coordinates(float("nan"), -74.0)


def test_huge_integers_are_rejected():
    with pytest.raises(ValidationError, match="limit must be an integer"):
        optional_int(float("inf"), "limit")


def test_optional_str_strips_and_blanks_to_none():
    assert optional_str("  Lobby ", "description") == "Lobby"
    assert optional_str("   ", "description") is None
    assert optional_str(None, "description") is None


@pytest.mark.parametrize("value", [123, ["a"], {"a": 1}, True])
def test_optional_str_rejects_other_json_types(value):
    with pytest.raises(ValidationError, match="description must be a string"):
        optional_str(value, "description")


@pytest.mark.parametrize("value", ["false", "yes", 0, 1])
def test_optional_bool_only_accepts_json_booleans(value):
    with pytest.raises(ValidationError, match="is_active must be a boolean value"):
        optional_bool(value, "is_active", True)


def test_optional_bool_default():
    assert optional_bool(None, "is_active", True) is True
    assert optional_bool(False, "is_active", True) is False


def test_coordinates_come_in_pairs():
    assert optional_coordinates(None, "") == (None, None)
    assert optional_coordinates("40.5", -74) == (40.5, -74.0)
    with pytest.raises(ValidationError, match="Latitude and longitude must be given together"):
        optional_coordinates(40.5, None)


def test_optional_day():
    assert optional_day("2024-05-01", "start") == date(2024, 5, 1)
    assert optional_day(None, "start") is None
    with pytest.raises(ValidationError, match="start must be YYYY-MM-DD"):
        optional_day("01-05-2024", "start")
