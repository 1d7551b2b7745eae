from __future__ import annotations

import asyncio
import threading
from collections.abc import Sequence

import pytest
from nmea_samples import GGA, RMC

from mifigps.config import MifiGpsConfig
from mifigps.exceptions import DeviceStreamError, PersistenceError
from mifigps.ingestion.parser import parse_sentence
from mifigps.ingestion.stream import DeviceStreamReader
from mifigps.models.record import PersistenceRecord
from mifigps.service import MifiGpsService
from mifigps.state.store import FixStore


class _MemorySink:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.rows: list[PersistenceRecord] = []
        self.closed = False

    def write_batch(self, records: Sequence[PersistenceRecord]) -> None:
        if self.fail:
            raise PersistenceError("db unavailable", pending=len(records))
        self.rows.extend(records)

    def close(self) -> None:
        self.closed = True


def _config(**overrides: object) -> MifiGpsConfig:
    values: dict[str, object] = {
        "db_dsn": "host=unused",
        "bind_host": "127.0.0.1",
        "bind_port": 0,
        "reconnect_delay": 3600.0,
        "sample_interval": 3600.0,
        "sample_initial_delay": 3600.0,
        "flush_interval": 3600.0,
    }
    values.update(overrides)
    return MifiGpsConfig(**values)  # type: ignore[arg-type]


def _refusing_reader(store: FixStore, attempts: list[int]) -> DeviceStreamReader:
    async def connect() -> object:
        attempts.append(1)
        raise DeviceStreamError("connect to 127.0.0.1:1 failed: refused", endpoint="127.0.0.1:1")

    return DeviceStreamReader(store, connect, reconnect_delay=3600.0)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_shutdown_flushes_queue_and_closes_sink() -> None:
    sink = _MemorySink()
    service = MifiGpsService(_config(), sink=sink, stream_reader=_refusing_reader(FixStore(), []))
    service.store.update(parse_sentence(RMC))
    service.store.update(parse_sentence(GGA))
    service.sampler.sample_once()

    await service.shutdown()

    assert len(sink.rows) == 1
    assert sink.rows[0].altitude == 12.5
    assert len(service.queue) == 0
    assert sink.closed


@pytest.mark.asyncio
async def test_shutdown_keeps_records_when_storage_fails() -> None:
    sink = _MemorySink(fail=True)
    service = MifiGpsService(_config(), sink=sink, stream_reader=_refusing_reader(FixStore(), []))
    service.store.update(parse_sentence(RMC))
    service.store.update(parse_sentence(GGA))
    service.sampler.sample_once()

    await service.shutdown()

    assert sink.rows == []
    assert len(service.queue) == 1
    assert sink.closed


@pytest.mark.asyncio
async def test_run_until_cancelled_then_final_flush() -> None:
    sink = _MemorySink()
    attempts: list[int] = []
    service = MifiGpsService(_config(), sink=sink, stream_reader=_refusing_reader(FixStore(), attempts))

    task = asyncio.create_task(service.run())
    for _ in range(100):
        if attempts:
            break
        await asyncio.sleep(0.01)
    service.store.update(parse_sentence(RMC))
    service.store.update(parse_sentence(GGA))
    service.sampler.sample_once()

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert attempts == [1]
    assert len(sink.rows) == 1
    assert sink.closed


class _SlowSink:
    def __init__(self) -> None:
        self.started = threading.Event()
        self.release = threading.Event()
        self.events: list[str] = []

    def write_batch(self, records: Sequence[PersistenceRecord]) -> None:
        self.events.append(f"write-start:{len(records)}")
        self.started.set()
        self.release.wait(timeout=5)
        self.events.append("write-commit")

    def close(self) -> None:
        self.events.append("close")


@pytest.mark.asyncio
async def test_cancel_during_write_waits_for_it_before_closing() -> None:
    sink = _SlowSink()
    service = MifiGpsService(_config(), sink=sink, stream_reader=_refusing_reader(FixStore(), []))
    service.store.update(parse_sentence(RMC))
    service.store.update(parse_sentence(GGA))
    service.sampler.sample_once()

    task = asyncio.create_task(service.run())
    assert await asyncio.to_thread(sink.started.wait, 5)
    asyncio.get_running_loop().call_later(0.05, sink.release.set)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert sink.events == ["write-start:1", "write-commit", "close"]
    assert len(service.queue) == 0
