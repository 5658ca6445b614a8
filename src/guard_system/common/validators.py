from __future__ import annotations

import math
from enum import Enum
from datetime import date
from typing import Any, Optional, Type, TypeVar

from .datetime_utils import parse_iso_date
from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def optional_str(value: Any, field_name: str) -> Optional[str]:
    """Stripped text, or None when missing or blank. Non-string JSON values are rejected."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value.strip() or None


def optional_bool(value: Any, field_name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a boolean value")
    return value


def optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field_name} must be an integer")


def require_coordinates(latitude: Any, longitude: Any) -> tuple[float, float]:
    """Parse a latitude/longitude pair and check its range."""
    if latitude is None or latitude == "" or longitude is None or longitude == "":
        raise ValidationError("Latitude and longitude are required")
    lat = optional_float(latitude, "latitude")
    lng = optional_float(longitude, "longitude")
    if abs(lat) > 90 or abs(lng) > 180:
        raise ValidationError("Invalid coordinates")
    return lat, lng


def optional_coordinates(latitude: Any, longitude: Any) -> tuple[Optional[float], Optional[float]]:
    missing_lat = latitude is None or latitude == ""
    missing_lng = longitude is None or longitude == ""
    if missing_lat and missing_lng:
        return None, None
    if missing_lat != missing_lng:
        raise ValidationError("Latitude and longitude must be given together")
    return require_coordinates(latitude, longitude)


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name} (expected one of: {allowed})")


def optional_day(value: Any, field_name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")
