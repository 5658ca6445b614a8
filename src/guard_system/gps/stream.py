"""Server-Sent Events feed of live positions."""
from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from typing import Any, Callable, Iterator, Optional

from ..common.datetime_utils import now_local

logger = logging.getLogger(__name__)


def sse_event(payload: Any) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def position_events(
    fetch: Callable[[], list],
    *,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], datetime] = now_local,
    max_updates: Optional[int] = None,
) -> Iterator[str]:
    """`connected` once, then an `update` (or `error`) every `interval` seconds.

    `fetch` must return JSON-ready positions. The loop ends when the consumer
    closes the generator (client disconnect) or after `max_updates` ticks.
    """
    yield sse_event({"type": "connected", "timestamp": clock().isoformat()})

    ticks = 0
    while max_updates is None or ticks < max_updates:
        sleep(interval)
        ticks += 1
        try:
            positions = fetch()
        except Exception as e:
            logger.exception("live position refresh failed")
            yield sse_event({"type": "error", "error": str(e)})
            continue

        yield sse_event(
            {
                "type": "update",
                "timestamp": clock().isoformat(),
                "count": len(positions),
                "positions": positions,
            }
        )
