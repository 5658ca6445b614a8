from __future__ import annotations

from datetime import datetime, timezone

import pytest

from guard_system.common.datetime_utils import parse_iso_datetime


def _local(utc: datetime) -> datetime:
    return utc.astimezone().replace(tzinfo=None)


def test_offset_is_converted_to_local_time():
    parsed = parse_iso_datetime("2024-05-01T10:00:00+02:00")
    assert parsed == _local(datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc))
    assert parsed.tzinfo is None


def test_trailing_z_means_utc():
    parsed = parse_iso_datetime("2024-05-01T08:00:00Z")
    assert parsed == _local(datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc))


def test_naive_values_are_taken_as_local():
    assert parse_iso_datetime(" 2024-05-01T08:00:00 ") == datetime(2024, 5, 1, 8, 0)


@pytest.mark.parametrize("value", [123, None])
def test_non_strings_raise_type_error(value):
    with pytest.raises(TypeError):
        parse_iso_datetime(value)
