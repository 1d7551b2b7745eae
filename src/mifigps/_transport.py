"""Raw TCP transport to the hotspot's telemetry endpoint.

The hotspot answers a ``GET`` with an HTTP/0.9 style byte stream: no status
line, no headers, just NMEA text. :class:`Http09StreamReader` fakes a
``200 OK`` head on the first read so the connection can be handled like an
ordinary streaming HTTP response; every later read passes socket bytes
through unmodified.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from mifigps._constants import HTTP09_PREAMBLE, STREAM_LINE_LIMIT, USER_AGENT
from mifigps.exceptions import DeviceStreamError

_logger = logging.getLogger(__name__)


class TelemetryConnection(Protocol):
    """Structural interface used by the stream reader.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`DeviceConnection`) concrete.
    """

    async def readline(self) -> bytes:
        ...

    async def close(self) -> None:
        ...


class Http09StreamReader:
    """Line reader that injects a fixed response head before socket data."""

    def __init__(self, reader: asyncio.StreamReader, preamble: bytes = HTTP09_PREAMBLE) -> None:
        self._reader = reader
        self._preamble = preamble
        self._have_read_any = False
        self._pending = b""

    async def readline(self) -> bytes:
        if not self._have_read_any:
            self._have_read_any = True
            self._pending = self._preamble
        if self._pending:
            line, sep, rest = self._pending.partition(b"\n")
            if sep:
                self._pending = rest
                return line + sep
            # Unterminated tail of the preamble joins the first socket line.
            self._pending = b""
            return line + await self._reader.readline()
        return await self._reader.readline()


class DeviceConnection:
    """An open telemetry stream positioned after the response head."""

    def __init__(
        self,
        reader: Http09StreamReader,
        writer: asyncio.StreamWriter,
        *,
        endpoint: str,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self.endpoint = endpoint

    async def _read_raw_line(self) -> bytes:
        try:
            line = await self._reader.readline()
        except (OSError, ValueError, asyncio.IncompleteReadError) as exc:
            raise DeviceStreamError(
                f"read from {self.endpoint} failed: {exc}",
                endpoint=self.endpoint,
            ) from exc
        if not line:
            raise DeviceStreamError(
                f"reached end of connection to {self.endpoint}",
                endpoint=self.endpoint,
            )
        return line

    async def read_response_head(self) -> int:
        """Consume the status line and headers; return the status code."""
        status_line = (await self._read_raw_line()).decode("latin-1").strip()
        parts = status_line.split(None, 2)
        if len(parts) < 2 or not parts[0].startswith("HTTP/") or not parts[1].isdigit():
            raise DeviceStreamError(
                f"malformed status line from {self.endpoint}: {status_line[:80]!r}",
                endpoint=self.endpoint,
            )
        status = int(parts[1])
        if not 200 <= status < 300:
            raise DeviceStreamError(
                f"HTTP {status} from {self.endpoint}",
                endpoint=self.endpoint,
            )
        while True:
            header = await self._read_raw_line()
            if not header.strip():
                break
            _logger.debug("Device header %s", header.decode("latin-1").strip())
        return status

    async def readline(self) -> bytes:
        return await self._read_raw_line()

    async def close(self) -> None:
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError:
            _logger.debug("Error closing connection to %s", self.endpoint, exc_info=True)


async def open_device_stream(
    host: str,
    port: int,
    *,
    path: str = "/",
    limit: int = STREAM_LINE_LIMIT,
) -> DeviceConnection:
    """Connect, send the request line and consume the (synthetic) head.

    Raises
    ------
    DeviceStreamError
        Connection refused/reset or an unusable response head.
    """
    endpoint = f"{host}:{port}"
    try:
        reader, writer = await asyncio.open_connection(host, port, limit=limit)
    except OSError as exc:
        raise DeviceStreamError(f"connect to {endpoint} failed: {exc}", endpoint=endpoint) from exc

    request = f"GET {path} HTTP/1.1\r\nHost: {endpoint}\r\nUser-Agent: {USER_AGENT}\r\nAccept: */*\r\n\r\n"
    connection = DeviceConnection(Http09StreamReader(reader), writer, endpoint=endpoint)
    try:
        writer.write(request.encode("ascii"))
        await writer.drain()
        await connection.read_response_head()
    except OSError as exc:
        await connection.close()
        raise DeviceStreamError(f"request to {endpoint} failed: {exc}", endpoint=endpoint) from exc
    except DeviceStreamError:
        await connection.close()
        raise
    return connection
