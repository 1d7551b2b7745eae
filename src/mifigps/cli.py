"""Command line entry point: ``mifigps [run|latest|init-db]``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from mifigps import __version__
from mifigps.config import MifiGpsConfig
from mifigps.exceptions import MifiConfigError, PersistenceError
from mifigps.persistence.postgis import PostgisSink
from mifigps.service import MifiGpsService

_logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mifigps",
        description="Log a MiFi hotspot's GPS fixes to PostGIS and serve a live status page",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("run", help="Stream, sample, persist and serve the status page (default)")
    sub.add_parser("latest", help="Print the most recently logged fix")
    sub.add_parser("init-db", help="Create the gps_logs table if missing")
    return parser


def _cmd_run(config: MifiGpsConfig) -> int:
    service = MifiGpsService(config)
    try:
        asyncio.run(service.run())
    except KeyboardInterrupt:
        _logger.info("Interrupted, exiting")
    return 0


def _cmd_latest(config: MifiGpsConfig) -> int:
    sink = PostgisSink(config.db_dsn)
    try:
        fix = sink.fetch_latest()
    finally:
        sink.close()
    if fix is None:
        print("no fixes logged")
        return 1
    print(f"t: {fix.logged_at.isoformat()}")
    print(f"t2: {fix.gps_timestamp.isoformat() if fix.gps_timestamp else 'n/a'}")
    for label, value in (("x", fix.longitude), ("y", fix.latitude), ("z", fix.altitude)):
        print(f"{label}: {value:f}" if value is not None else f"{label}: n/a")
    return 0


def _cmd_init_db(config: MifiGpsConfig) -> int:
    sink = PostgisSink(config.db_dsn)
    try:
        sink.create_schema()
    finally:
        sink.close()
    print("gps_logs ready")
    return 0


_COMMANDS = {
    "run": _cmd_run,
    "latest": _cmd_latest,
    "init-db": _cmd_init_db,
}


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = MifiGpsConfig.from_env()
    except MifiConfigError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return 2

    command = _COMMANDS[args.command or "run"]
    try:
        return command(config)
    except PersistenceError as exc:
        print(f"database error: {exc}", file=sys.stderr)
        return 1
