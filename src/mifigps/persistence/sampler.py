"""Periodic sampling of the fix store into persistence records."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from mifigps.exceptions import NoDataToLog, SamplingError
from mifigps.models.record import PersistenceRecord
from mifigps.persistence.queue import OutboundQueue
from mifigps.state.store import FixSnapshot, FixStore

_logger = logging.getLogger(__name__)

_DEVICE_TIME_FORMATS = ("%d/%m/%yT%H:%M:%S.%f", "%d/%m/%yT%H:%M:%S")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def device_timestamp(date: str | None, time: str | None) -> datetime:
    """Combine RMC ``DD/MM/YY`` and ``HH:MM:SS[.ff]`` into a UTC datetime.

    Raises :class:`SamplingError` when the pair does not parse.
    """
    if not date or not time:
        raise SamplingError(f"failed to parse RMC date time: date={date!r} time={time!r}")
    combined = f"{date}T{time}"
    for fmt in _DEVICE_TIME_FORMATS:
        try:
            return datetime.strptime(combined, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue
    raise SamplingError(f"failed to parse RMC date time: {combined!r}")


def sample_fix(snapshot: FixSnapshot, now: datetime) -> PersistenceRecord:
    """Build a record from *snapshot*.

    Raises
    ------
    NoDataToLog
        RMC or GGA is missing, or they carry no position/altitude.
    SamplingError
        The device date/time did not combine.
    """
    rmc, gga = snapshot.rmc, snapshot.gga
    if rmc is None or gga is None:
        raise NoDataToLog("no data to log")
    if rmc.latitude is None or rmc.longitude is None or gga.altitude is None:
        raise NoDataToLog("no data to log: fix has no position or altitude")

    return PersistenceRecord(
        logged_at=now,
        gps_timestamp=device_timestamp(rmc.date, rmc.time),
        longitude=rmc.longitude,
        latitude=rmc.latitude,
        altitude=gga.altitude,
        speed=rmc.speed,
        course=rmc.course,
    )


class Sampler:
    """Takes a store snapshot and queues a record, once per call."""

    def __init__(
        self,
        store: FixStore,
        queue: OutboundQueue,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._queue = queue
        self._clock = clock

    def sample_once(self) -> PersistenceRecord:
        record = sample_fix(self._store.snapshot(), self._clock())
        _logger.info(
            "Queuing location %.6f,%.6f alt=%.1f device_time=%s",
            record.latitude,
            record.longitude,
            record.altitude,
            record.gps_timestamp.isoformat(),
        )
        self._queue.enqueue(record)
        return record

    async def run_once(self) -> None:
        """Async adapter for the periodic runner."""
        self.sample_once()
