from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from nmea_samples import GGA, RMC

from mifigps._constants import HTTP09_PREAMBLE
from mifigps._transport import Http09StreamReader, open_device_stream
from mifigps.config import MifiGpsConfig
from mifigps.exceptions import DeviceStreamError
from mifigps.ingestion.stream import DeviceStreamReader
from mifigps.state.store import FixStore

_TELEMETRY = b"\x00\x00" + RMC.encode() + b"\r\n\x00\x00\r\n" + GGA.encode() + b"\r\n"


@pytest_asyncio.fixture
async def device() -> AsyncIterator[tuple[str, int, list[bytes]]]:
    """A fake hotspot: reads the request head, then sends bare NMEA and hangs up."""
    requests: list[bytes] = []

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        requests.append(await reader.readuntil(b"\r\n\r\n"))
        writer.write(_TELEMETRY)
        await writer.drain()
        writer.close()
        await writer.wait_closed()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    host, port = server.sockets[0].getsockname()[:2]
    try:
        yield host, port, requests
    finally:
        server.close()
        await server.wait_closed()


@pytest.mark.asyncio
async def test_first_read_returns_fabricated_head() -> None:
    raw = asyncio.StreamReader()
    raw.feed_data(b"$GPRMC\r\n")
    raw.feed_eof()
    reader = Http09StreamReader(raw)

    head: list[bytes] = []
    for _ in range(4):
        head.append(await reader.readline())

    assert b"".join(head) == HTTP09_PREAMBLE
    assert await reader.readline() == b"$GPRMC\r\n"
    assert await reader.readline() == b""


@pytest.mark.asyncio
async def test_unterminated_preamble_joins_first_socket_line() -> None:
    raw = asyncio.StreamReader()
    raw.feed_data(b"world\n")
    raw.feed_eof()
    reader = Http09StreamReader(raw, preamble=b"hello ")

    assert await reader.readline() == b"hello world\n"


@pytest.mark.asyncio
async def test_open_device_stream_skips_head_and_passes_bytes_through(
    device: tuple[str, int, list[bytes]],
) -> None:
    host, port, requests = device

    connection = await open_device_stream(host, port)
    try:
        first = await connection.readline()
        second = await connection.readline()
        third = await connection.readline()
        with pytest.raises(DeviceStreamError, match="end of connection"):
            await connection.readline()
    finally:
        await connection.close()

    assert first == b"\x00\x00" + RMC.encode() + b"\r\n"
    assert second == b"\x00\x00\r\n"
    assert third == GGA.encode() + b"\r\n"
    assert requests[0].startswith(b"GET / HTTP/1.1\r\n")
    assert f"Host: {host}:{port}".encode() in requests[0]


@pytest.mark.asyncio
async def test_connection_refused_is_a_stream_error() -> None:
    server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()

    with pytest.raises(DeviceStreamError, match="connect to"):
        await open_device_stream("127.0.0.1", port)


@pytest.mark.asyncio
async def test_stream_reader_against_fake_device(device: tuple[str, int, list[bytes]]) -> None:
    host, port, _ = device
    config = MifiGpsConfig(db_dsn="dbname=test", device_host=host, device_port=port, reconnect_delay=0)
    reader = DeviceStreamReader.from_config(config, FixStore())

    await reader.cycle()

    assert reader.stats.connections == 1
    assert reader.stats.fragments == 2
    assert reader.stats.rejected == 0
    assert reader.stats.failures == 1
