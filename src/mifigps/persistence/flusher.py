"""Transactional drain of the outbound queue."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from mifigps.exceptions import PersistenceError
from mifigps.models.record import PersistenceRecord
from mifigps.persistence.queue import OutboundQueue

_logger = logging.getLogger(__name__)


class RecordSink(Protocol):
    """Durable storage for records.

    ``write_batch`` must be all-or-nothing: either every record is committed
    in order, or nothing is and :class:`PersistenceError` is raised.
    It is called from an executor thread.
    """

    def write_batch(self, records: Sequence[PersistenceRecord]) -> None:
        ...


class Flusher:
    """Writes everything queued in one transaction, then dequeues it.

    At most one batch is written at a time. The executor thread cannot be
    interrupted, so a cancelled flush leaves its write running; the write
    still acknowledges its batch on commit, and the next flush (or
    :meth:`wait_idle`) waits for it first.
    """

    def __init__(self, queue: OutboundQueue, sink: RecordSink) -> None:
        self._queue = queue
        self._sink = sink
        self._lock = asyncio.Lock()
        self._inflight: asyncio.Task[int] | None = None

    async def _write(self, batch: list[PersistenceRecord]) -> int:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._sink.write_batch, batch)
        except PersistenceError as exc:
            exc.pending = len(self._queue)
            raise
        removed = self._queue.acknowledge(batch)
        _logger.debug("Committed %d records, %d still queued", removed, len(self._queue))
        return removed

    async def wait_idle(self) -> None:
        """Wait for a write left running by a cancelled flush."""
        inflight = self._inflight
        if inflight is None or inflight.done():
            return
        _logger.info("Waiting for in-flight GPS data push to finish")
        await asyncio.wait([inflight])
        if not inflight.cancelled() and inflight.exception() is not None:
            _logger.warning("In-flight push failed: %s", inflight.exception())

    async def flush_once(self) -> int:
        """Flush the current backlog; return the number of records committed.

        On failure the whole batch stays queued, in order, and
        :class:`PersistenceError` is raised.
        """
        async with self._lock:
            await self.wait_idle()
            batch = self._queue.pending()
            if not batch:
                _logger.debug("Nothing to push")
                return 0

            _logger.info("Pushing GPS data (%d in queue)", len(batch))
            self._inflight = asyncio.create_task(self._write(batch), name="flusher-write")
            return await asyncio.shield(self._inflight)

    async def run_once(self) -> None:
        await self.flush_once()
