from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import psycopg2
import pytest

from mifigps.exceptions import PersistenceError
from mifigps.models.record import PersistenceRecord
from mifigps.persistence.postgis import INSERT_SQL, LATEST_SQL, SCHEMA_SQL, PostgisSink

_T = datetime(2024, 6, 15, 10, 30, tzinfo=UTC)


class _FakeCursor:
    def __init__(self, conn: _FakeConnection) -> None:
        self._conn = conn

    def __enter__(self) -> _FakeCursor:
        return self

    def __exit__(self, *exc: Any) -> None:
        return None

    def execute(self, sql: str, params: tuple[Any, ...] | None = None) -> None:
        self._conn.executed.append((sql, params))
        if self._conn.fail_on is not None and len(self._conn.executed) == self._conn.fail_on:
            raise self._conn.error

    def fetchone(self) -> tuple[Any, ...] | None:
        return self._conn.row


class _FakeConnection:
    """Mimics psycopg2's ``with conn:`` transaction semantics."""

    def __init__(self, *, fail_on: int | None = None, error: Exception | None = None) -> None:
        self.fail_on = fail_on
        self.error = error or psycopg2.DataError("invalid geometry")
        self.executed: list[tuple[str, Any]] = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = 0
        self.row: tuple[Any, ...] | None = None

    def __enter__(self) -> _FakeConnection:
        return self

    def __exit__(self, exc_type: Any, *exc: Any) -> bool:
        if exc_type is None:
            self.commits += 1
        else:
            self.rollbacks += 1
        return False

    def cursor(self) -> _FakeCursor:
        return _FakeCursor(self)

    def close(self) -> None:
        self.closed = 1


def _records(count: int) -> list[PersistenceRecord]:
    return [
        PersistenceRecord(
            logged_at=_T,
            gps_timestamp=_T,
            longitude=11.5 + i,
            latitude=48.1,
            altitude=12.5,
            speed=1.0,
            course=90.0,
        )
        for i in range(count)
    ]


def _sink(conn: _FakeConnection) -> tuple[PostgisSink, list[str]]:
    dsns: list[str] = []

    def connect(dsn: str) -> _FakeConnection:
        dsns.append(dsn)
        return conn

    return PostgisSink("host=db password=hunter2", connect=connect), dsns


def test_write_batch_inserts_in_order_and_commits_once() -> None:
    conn = _FakeConnection()
    sink, dsns = _sink(conn)
    records = _records(3)

    sink.write_batch(records)

    assert dsns == ["host=db password=hunter2"]
    assert [sql for sql, _ in conn.executed] == [INSERT_SQL] * 3
    assert conn.executed[0][1] == (_T, _T, "SRID=4326;POINTZ(11.500000 48.100000 12.500000)", 1.0, 90.0)
    assert conn.executed[2][1][2] == "SRID=4326;POINTZ(13.500000 48.100000 12.500000)"
    assert conn.commits == 1
    assert conn.rollbacks == 0


def test_insert_failure_rolls_back_whole_batch() -> None:
    conn = _FakeConnection(fail_on=3)
    sink, _ = _sink(conn)

    with pytest.raises(PersistenceError, match="failed to insert to DB") as exc_info:
        sink.write_batch(_records(5))

    assert exc_info.value.pending == 5
    assert conn.commits == 0
    assert conn.rollbacks == 1
    assert len(conn.executed) == 3
    assert not conn.closed


def test_connection_error_reconnects_next_time() -> None:
    conn = _FakeConnection(fail_on=1, error=psycopg2.OperationalError("server closed the connection"))
    sink, dsns = _sink(conn)

    with pytest.raises(PersistenceError):
        sink.write_batch(_records(1))
    assert conn.closed

    conn.fail_on = None
    conn.closed = 0
    sink.write_batch(_records(1))

    assert len(dsns) == 2


def test_connect_failure_is_a_persistence_error() -> None:
    def connect(dsn: str) -> _FakeConnection:
        raise psycopg2.OperationalError("could not connect to server")

    sink = PostgisSink("host=db", connect=connect)

    with pytest.raises(PersistenceError):
        sink.write_batch(_records(1))


def test_empty_batch_does_not_connect() -> None:
    conn = _FakeConnection()
    sink, dsns = _sink(conn)

    sink.write_batch([])

    assert dsns == []


def test_fetch_latest_maps_row() -> None:
    conn = _FakeConnection()
    conn.row = (_T, _T, 11.5, 48.1, 12.5)
    sink, _ = _sink(conn)

    fix = sink.fetch_latest()

    assert conn.executed == [(LATEST_SQL, None)]
    assert fix is not None
    assert (fix.longitude, fix.latitude, fix.altitude) == (11.5, 48.1, 12.5)
    assert fix.logged_at == _T


def test_fetch_latest_empty_table() -> None:
    sink, _ = _sink(_FakeConnection())

    assert sink.fetch_latest() is None


def test_create_schema_runs_every_statement() -> None:
    conn = _FakeConnection()
    sink, _ = _sink(conn)

    sink.create_schema()

    assert [sql for sql, _ in conn.executed] == list(SCHEMA_SQL)
    assert conn.commits == 1
