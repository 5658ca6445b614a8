from __future__ import annotations

import json
from datetime import datetime

from guard_system.gps.stream import position_events, sse_event

NOW = datetime(2024, 5, 1, 12, 0, 0)


def _decode(chunk: str) -> dict:
    assert chunk.startswith("data: ") and chunk.endswith("\n\n")
    return json.loads(chunk[len("data: "):])


def test_sse_event_framing():
    assert sse_event({"a": 1}) == 'data: {"a": 1}\n\n'


def test_stream_sends_connected_then_updates():
    sleeps = []
    batches = iter([[{"user_id": "g1"}], []])
    events = position_events(
        lambda: next(batches), interval=5, sleep=sleeps.append, clock=lambda: NOW, max_updates=2
    )

    decoded = [_decode(e) for e in events]

    assert [e["type"] for e in decoded] == ["connected", "update", "update"]
    assert decoded[1]["count"] == 1
    assert decoded[1]["positions"] == [{"user_id": "g1"}]
    assert decoded[2]["count"] == 0
    assert decoded[0]["timestamp"] == NOW.isoformat()
    assert sleeps == [5, 5]


def test_failed_refresh_is_reported_and_stream_continues():
    calls = {"n": 0}

    def fetch():
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("db down")
        return []

    events = [_decode(e) for e in position_events(fetch, interval=1, sleep=lambda _: None, max_updates=2)]

    assert events[1] == {"type": "error", "error": "db down"}
    assert events[2]["type"] == "update"


def test_closing_the_generator_stops_polling():
    fetched = []
    events = position_events(lambda: fetched.append(1) or [], interval=1, sleep=lambda _: None)
    next(events)
    next(events)
    events.close()
    assert fetched == [1]
