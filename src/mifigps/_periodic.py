"""Recurring background tasks.

Each task runs until it is cancelled. Errors from one cycle are logged and
the next cycle runs on schedule.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from mifigps.exceptions import MifiGpsError, NoDataToLog

_logger = logging.getLogger(__name__)


async def run_cycle(name: str, func: Callable[[], Awaitable[None]]) -> bool:
    """Run one cycle of *func*; return whether it succeeded."""
    try:
        await func()
    except NoDataToLog:
        _logger.info("%s: skipped, no data", name)
        return False
    except MifiGpsError as exc:
        _logger.warning("%s failed: %s", name, exc)
        return False
    except Exception:
        _logger.exception("%s failed unexpectedly", name)
        return False
    return True


async def run_periodically(
    name: str,
    func: Callable[[], Awaitable[None]],
    *,
    interval: float,
    initial_delay: float = 0.0,
) -> None:
    """Await *initial_delay*, then run *func* every *interval* seconds forever."""
    _logger.debug("%s: first run in %.0fs, then every %.0fs", name, initial_delay, interval)
    if initial_delay > 0:
        await asyncio.sleep(initial_delay)
    while True:
        await run_cycle(name, func)
        await asyncio.sleep(interval)
