"""Collapse a stream of position rows to the newest row per guard."""
from __future__ import annotations

from operator import attrgetter
from typing import Any, Callable, Dict, Hashable, Iterable, List, TypeVar

T = TypeVar("T")


def latest_per_identity(
    rows: Iterable[T],
    *,
    identity: Callable[[T], Hashable] = attrgetter("user_id"),
    timestamp: Callable[[T], Any] = attrgetter("timestamp"),
) -> List[T]:
    """Single pass; the result keeps the order in which each identity first appeared.

    On equal timestamps the row seen later wins.
    """
    latest: Dict[Hashable, T] = {}
    for row in rows:
        key = identity(row)
        current = latest.get(key)
        # Re-assigning an existing key keeps its original insertion slot.
        if current is None or timestamp(row) >= timestamp(current):
            latest[key] = row
    return list(latest.values())
