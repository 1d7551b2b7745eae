"""Process wiring: one fix store, one outbound queue, four concurrent tasks."""

from __future__ import annotations

import asyncio
import logging

from aiohttp import web

from mifigps._periodic import run_cycle, run_periodically
from mifigps.config import MifiGpsConfig
from mifigps.ingestion.stream import DeviceStreamReader
from mifigps.persistence.flusher import Flusher, RecordSink
from mifigps.persistence.postgis import PostgisSink
from mifigps.persistence.queue import OutboundQueue
from mifigps.persistence.sampler import Sampler
from mifigps.state.store import FixStore
from mifigps.web.status import create_status_app

_logger = logging.getLogger(__name__)


class MifiGpsService:
    """Runs the stream reader, sampler, flusher and status page.

    Usage::

        service = MifiGpsService(MifiGpsConfig.from_env())
        await service.run()

    ``run`` returns only when cancelled. On the way out the status page is
    stopped and one last flush is attempted so queued records survive a
    clean shutdown.
    """

    def __init__(
        self,
        config: MifiGpsConfig,
        *,
        sink: RecordSink | None = None,
        stream_reader: DeviceStreamReader | None = None,
    ) -> None:
        self._config = config
        self.store = FixStore()
        self.queue = OutboundQueue(config.queue_cap)
        self._sink: RecordSink = sink if sink is not None else PostgisSink(config.db_dsn)
        self.stream_reader = stream_reader or DeviceStreamReader.from_config(config, self.store)
        self.sampler = Sampler(self.store, self.queue)
        self.flusher = Flusher(self.queue, self._sink)
        self.app = create_status_app(self.store, maps_api_key=config.maps_api_key)

    async def _start_web(self) -> web.AppRunner:
        runner = web.AppRunner(self.app, access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self._config.bind_host, self._config.bind_port)
        await site.start()
        _logger.info("Starting web UI on %s:%d", self._config.bind_host, self._config.bind_port)
        return runner

    async def run(self) -> None:
        config = self._config
        runner = await self._start_web()
        try:
            async with asyncio.TaskGroup() as tg:
                tg.create_task(self.stream_reader.run_forever(), name="stream-reader")
                tg.create_task(
                    run_periodically(
                        "Queue location",
                        self.sampler.run_once,
                        interval=config.sample_interval,
                        initial_delay=config.sample_initial_delay,
                    ),
                    name="sampler",
                )
                tg.create_task(
                    run_periodically("Push GPS data", self.flusher.run_once, interval=config.flush_interval),
                    name="flusher",
                )
        finally:
            await runner.cleanup()
            await self.shutdown()

    async def shutdown(self) -> None:
        """Final flush of whatever is still queued, then close storage."""
        await self.flusher.wait_idle()
        if len(self.queue):
            _logger.info("Flushing %d queued records before exit", len(self.queue))
            if not await run_cycle("Final push", self.flusher.run_once):
                _logger.error("Exiting with %d unsaved records", len(self.queue))
        close = getattr(self._sink, "close", None)
        if callable(close):
            close()
