"""PostGIS storage for sampled fixes.

All methods block; the flusher calls :meth:`PostgisSink.write_batch` from an
executor thread.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

import psycopg2

from mifigps._redact import redact_dsn
from mifigps.exceptions import PersistenceError
from mifigps.models.record import LoggedFix, PersistenceRecord

_logger = logging.getLogger(__name__)

INSERT_SQL = (
    "INSERT INTO gps_logs(logged_at, gps_timestamp, gps_geometry, gps_speed, gps_course) "
    "VALUES (%s, %s, ST_GeographyFromText(%s), %s, %s)"
)

LATEST_SQL = (
    "SELECT logged_at, gps_timestamp, "
    "ST_X(gps_geometry::geometry), ST_Y(gps_geometry::geometry), ST_Z(gps_geometry::geometry) "
    "FROM gps_logs ORDER BY logged_at DESC LIMIT 1"
)

SCHEMA_SQL = (
    "CREATE EXTENSION IF NOT EXISTS postgis",
    """CREATE TABLE IF NOT EXISTS gps_logs (
        id BIGSERIAL PRIMARY KEY,
        logged_at TIMESTAMPTZ NOT NULL,
        gps_timestamp TIMESTAMPTZ NOT NULL,
        gps_geometry GEOGRAPHY(POINTZ, 4326) NOT NULL,
        gps_speed DOUBLE PRECISION,
        gps_course DOUBLE PRECISION
    )""",
    "CREATE INDEX IF NOT EXISTS gps_logs_logged_at_idx ON gps_logs (logged_at DESC)",
)


def record_params(record: PersistenceRecord) -> tuple[Any, ...]:
    """Positional parameters for :data:`INSERT_SQL`."""
    return (
        record.logged_at,
        record.gps_timestamp,
        record.ewkt,
        record.speed,
        record.course,
    )


class PostgisSink:
    """Lazily connected ``psycopg2`` writer for the ``gps_logs`` table."""

    def __init__(self, dsn: str, *, connect: Callable[[str], Any] = psycopg2.connect) -> None:
        self._dsn = dsn
        self._connect = connect
        self._conn: Any = None

    def _connection(self) -> Any:
        if self._conn is None or self._conn.closed:
            self._conn = self._connect(self._dsn)
            _logger.info("Opened DB connection to %s", redact_dsn(self._dsn))
        return self._conn

    def _discard_if_broken(self, exc: psycopg2.Error) -> None:
        # Connection-level failures: reconnect on the next cycle.
        if isinstance(exc, (psycopg2.OperationalError, psycopg2.InterfaceError)):
            self.close()

    def write_batch(self, records: Sequence[PersistenceRecord]) -> None:
        """Insert *records* in order inside one transaction."""
        if not records:
            return
        try:
            conn = self._connection()
            # psycopg2: leaving the block commits, an exception rolls back.
            with conn:
                with conn.cursor() as cur:
                    for record in records:
                        cur.execute(INSERT_SQL, record_params(record))
        except psycopg2.Error as exc:
            self._discard_if_broken(exc)
            raise PersistenceError(f"failed to insert to DB: {exc}", pending=len(records)) from exc

    def fetch_latest(self) -> LoggedFix | None:
        """Newest row by ``logged_at``, or ``None`` for an empty table."""
        try:
            conn = self._connection()
            with conn:
                with conn.cursor() as cur:
                    cur.execute(LATEST_SQL)
                    row = cur.fetchone()
        except psycopg2.Error as exc:
            self._discard_if_broken(exc)
            raise PersistenceError(f"failed to query latest fix: {exc}") from exc
        if row is None:
            return None
        logged_at, gps_timestamp, x, y, z = row
        return LoggedFix(
            logged_at=logged_at,
            gps_timestamp=gps_timestamp,
            longitude=x,
            latitude=y,
            altitude=z,
        )

    def create_schema(self) -> None:
        """Create the PostGIS extension, table and index if missing."""
        try:
            conn = self._connection()
            with conn:
                with conn.cursor() as cur:
                    for statement in SCHEMA_SQL:
                        cur.execute(statement)
        except psycopg2.Error as exc:
            self._discard_if_broken(exc)
            raise PersistenceError(f"failed to create schema: {exc}") from exc

    def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None or conn.closed:
            return
        try:
            conn.close()
        except psycopg2.Error:
            _logger.debug("Error closing DB connection", exc_info=True)
