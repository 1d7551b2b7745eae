from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from mifigps.models.record import PersistenceRecord
from mifigps.persistence.queue import OutboundQueue

_BASE = datetime(2024, 6, 15, 10, 30, tzinfo=UTC)


def _record(i: int) -> PersistenceRecord:
    return PersistenceRecord(
        logged_at=_BASE + timedelta(minutes=15 * i),
        gps_timestamp=_BASE + timedelta(minutes=15 * i),
        longitude=11.5,
        latitude=48.1,
        altitude=float(i),
    )


def test_enqueue_keeps_fifo_order() -> None:
    queue = OutboundQueue(cap=10)
    records = [_record(i) for i in range(3)]

    for record in records:
        assert queue.enqueue(record) is False

    assert queue.pending() == records
    assert len(queue) == 3


def test_enqueue_beyond_cap_drops_oldest_first() -> None:
    queue = OutboundQueue(cap=100)
    records = [_record(i) for i in range(150)]

    evictions = [queue.enqueue(record) for record in records]

    assert len(queue) == 100
    assert queue.pending() == records[50:]
    assert evictions.count(True) == 50
    assert not any(evictions[:100])


def test_queue_below_cap_keeps_everything() -> None:
    queue = OutboundQueue(cap=100)
    records = [_record(i) for i in range(99)]

    for record in records:
        queue.enqueue(record)

    assert queue.pending() == records


def test_pending_returns_a_copy() -> None:
    queue = OutboundQueue(cap=5)
    queue.enqueue(_record(0))

    pending = queue.pending()
    pending.clear()

    assert len(queue) == 1


def test_acknowledge_removes_only_flushed_records() -> None:
    queue = OutboundQueue(cap=5)
    flushed = [_record(i) for i in range(3)]
    for record in flushed:
        queue.enqueue(record)
    batch = queue.pending()
    late = _record(3)
    queue.enqueue(late)

    removed = queue.acknowledge(batch)

    assert removed == 3
    assert queue.pending() == [late]


def test_acknowledge_tolerates_records_evicted_during_flush() -> None:
    queue = OutboundQueue(cap=3)
    for i in range(3):
        queue.enqueue(_record(i))
    batch = queue.pending()
    newer = [_record(i) for i in range(3, 5)]
    for record in newer:
        queue.enqueue(record)

    removed = queue.acknowledge(batch)

    assert removed == 1
    assert queue.pending() == newer


def test_cap_must_be_positive() -> None:
    with pytest.raises(ValueError):
        OutboundQueue(cap=0)
