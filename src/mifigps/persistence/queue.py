"""Bounded in-memory buffer of records waiting for the database."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Iterable

from mifigps._constants import DEFAULT_QUEUE_CAP
from mifigps.models.record import PersistenceRecord

_logger = logging.getLogger(__name__)


class OutboundQueue:
    """FIFO of pending records, capped at ``cap`` entries.

    Enqueuing into a full queue discards the oldest record. Written only by
    the sampler and drained only by the flusher; guarded by its own lock,
    never held together with the fix store's.
    """

    def __init__(self, cap: int = DEFAULT_QUEUE_CAP) -> None:
        if cap <= 0:
            raise ValueError(f"cap must be positive, got {cap}")
        self._lock = threading.Lock()
        self._items: deque[PersistenceRecord] = deque(maxlen=cap)
        self.cap = cap

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def enqueue(self, record: PersistenceRecord) -> bool:
        """Append *record*; return ``True`` if the oldest entry was evicted."""
        with self._lock:
            evicted = len(self._items) == self.cap
            self._items.append(record)
        if evicted:
            _logger.warning("Outbound queue full (%d); dropped oldest record", self.cap)
        return evicted

    def pending(self) -> list[PersistenceRecord]:
        """Copy of the queued records, oldest first."""
        with self._lock:
            return list(self._items)

    def acknowledge(self, batch: Iterable[PersistenceRecord]) -> int:
        """Remove exactly the records of a committed *batch*.

        Records evicted or enqueued while the batch was being written are
        left alone.
        """
        flushed = {id(record) for record in batch}
        with self._lock:
            before = len(self._items)
            self._items = deque(
                (record for record in self._items if id(record) not in flushed),
                maxlen=self.cap,
            )
            return before - len(self._items)
