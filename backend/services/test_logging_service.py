from __future__ import annotations

import logging

from .logging_service import RingBufferHandler


def _emit(handler: RingBufferHandler, level: int, message: str) -> None:
    handler.handle(logging.LogRecord("parcelwise.test", level, __file__, 1, message, None, None))


def test_ring_keeps_newest_records() -> None:
    ring = RingBufferHandler(maxlen=3)
    for i in range(5):
        _emit(ring, logging.INFO, f"m{i}")

    assert [e["message"] for e in ring.get_recent(10)] == ["m2", "m3", "m4"]
    assert [e["message"] for e in ring.get_recent(2)] == ["m3", "m4"]


def test_min_level_filter_and_clear() -> None:
    ring = RingBufferHandler()
    _emit(ring, logging.INFO, "merged")
    _emit(ring, logging.WARNING, "collinear")
    _emit(ring, logging.ERROR, "failed")

    assert [e["message"] for e in ring.get_recent(10, min_level="warning")] == ["collinear", "failed"]
    assert ring.get_recent(10)[0]["name"] == "parcelwise.test"

    ring.clear()
    assert ring.get_recent(10) == []
