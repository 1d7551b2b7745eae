"""Device stream ingestion.

This module owns the connect / stream / cool down loop that keeps the fix
store current. The socket-level details live in :mod:`mifigps._transport`;
sentence decoding lives in :mod:`mifigps.ingestion.parser`.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from mifigps._transport import TelemetryConnection, open_device_stream
from mifigps.config import MifiGpsConfig
from mifigps.exceptions import DeviceStreamError, SentenceError
from mifigps.ingestion.parser import parse_sentence
from mifigps.models.fragments import FixFragment
from mifigps.state.store import FixStore

_logger = logging.getLogger(__name__)

_PADDING = b"\x00\r\n\t "

Connector = Callable[[], Awaitable[TelemetryConnection]]


def frame_line(raw: bytes) -> str | None:
    """Strip NUL padding and line endings; ``None`` for an empty line."""
    stripped = raw.strip(_PADDING)
    if not stripped:
        return None
    return stripped.decode("ascii", errors="replace")


@dataclass(slots=True)
class StreamStats:
    """Counters kept for log context."""

    connections: int = 0
    failures: int = 0
    lines: int = 0
    fragments: int = 0
    rejected: int = 0


class DeviceStreamReader:
    """Keeps a best-effort connection to the hotspot and feeds the store.

    Usage::

        reader = DeviceStreamReader.from_config(config, store)
        await reader.run_forever()
    """

    def __init__(
        self,
        store: FixStore,
        connector: Connector,
        *,
        reconnect_delay: float = 60.0,
        parser: Callable[[str], FixFragment] = parse_sentence,
    ) -> None:
        self._store = store
        self._connector = connector
        self._reconnect_delay = reconnect_delay
        self._parser = parser
        self.stats = StreamStats()

    @classmethod
    def from_config(cls, config: MifiGpsConfig, store: FixStore) -> DeviceStreamReader:
        connector = functools.partial(open_device_stream, config.device_host, config.device_port)
        return cls(store, connector, reconnect_delay=config.reconnect_delay)

    def feed_line(self, raw: bytes) -> bool:
        """Frame, decode and store one line; return whether the store changed."""
        line = frame_line(raw)
        if line is None:
            return False
        self.stats.lines += 1
        try:
            fragment = self._parser(line)
        except SentenceError as exc:
            self.stats.rejected += 1
            _logger.debug("Skipping telemetry line %r: %s", line[:82], exc)
            return False
        self._store.update(fragment)
        self.stats.fragments += 1
        return True

    async def stream_once(self) -> None:
        """Connect and stream until the connection fails.

        Always ends by raising :class:`DeviceStreamError`.
        """
        connection = await self._connector()
        self.stats.connections += 1
        _logger.info("Connected to GPS stream (connection #%d)", self.stats.connections)
        try:
            while True:
                self.feed_line(await connection.readline())
        finally:
            await connection.close()

    async def cycle(self) -> None:
        """One connect/stream attempt; on failure clear the store once."""
        try:
            await self.stream_once()
        except (DeviceStreamError, OSError) as exc:
            self.stats.failures += 1
            _logger.warning(
                "Error getting GPS (failure #%d, %d fragments so far): %s",
                self.stats.failures,
                self.stats.fragments,
                exc,
            )
            self._store.clear()
        except Exception:
            self.stats.failures += 1
            _logger.exception("Unexpected error in GPS stream (failure #%d)", self.stats.failures)
            self._store.clear()

    async def run_forever(self) -> None:
        """Connecting -> Streaming -> Cooldown, until cancelled."""
        while True:
            await self.cycle()
            _logger.debug("Reconnecting to GPS stream in %.0fs", self._reconnect_delay)
            await asyncio.sleep(self._reconnect_delay)
