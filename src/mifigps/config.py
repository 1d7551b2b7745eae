"""Process configuration for mifigps."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any

from mifigps._constants import (
    DEFAULT_BIND_HOST,
    DEFAULT_BIND_PORT,
    DEFAULT_DEVICE_HOST,
    DEFAULT_DEVICE_PORT,
    DEFAULT_FLUSH_INTERVAL,
    DEFAULT_QUEUE_CAP,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_SAMPLE_INITIAL_DELAY,
    DEFAULT_SAMPLE_INTERVAL,
)
from mifigps.exceptions import MifiConfigError


def _env_number(name: str, raw: str, cast: Callable[[str], Any]) -> Any:
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise MifiConfigError(f"{name} must be numeric, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class MifiGpsConfig:
    """Process-wide settings, read once at startup.

    Parameters
    ----------
    db_dsn : str
        libpq connection string for the PostGIS database. Required.
    maps_api_key : str or None
        Google Maps embed API key for the status page. When unset the page
        still renders, with a plain map link instead of an embedded map.
    device_host : str
        Address of the hotspot's telemetry endpoint.
    device_port : int
        Port of the hotspot's telemetry endpoint.
    bind_host : str
        Address the status page listens on.
    bind_port : int
        Port the status page listens on.
    reconnect_delay : float
        Cooldown in seconds between a stream failure and the next connect.
    sample_interval : float
        Seconds between sampling cycles.
    sample_initial_delay : float
        Seconds to wait before the first sampling cycle so fixes can arrive.
    flush_interval : float
        Seconds between flush cycles.
    queue_cap : int
        Maximum number of records held in the outbound queue.
    """

    db_dsn: str
    maps_api_key: str | None = None
    device_host: str = DEFAULT_DEVICE_HOST
    device_port: int = DEFAULT_DEVICE_PORT
    bind_host: str = DEFAULT_BIND_HOST
    bind_port: int = DEFAULT_BIND_PORT
    reconnect_delay: float = DEFAULT_RECONNECT_DELAY
    sample_interval: float = DEFAULT_SAMPLE_INTERVAL
    sample_initial_delay: float = DEFAULT_SAMPLE_INITIAL_DELAY
    flush_interval: float = DEFAULT_FLUSH_INTERVAL
    queue_cap: int = DEFAULT_QUEUE_CAP

    def __post_init__(self) -> None:
        if not self.db_dsn or not self.db_dsn.strip():
            raise MifiConfigError("database connection string is empty")
        if self.queue_cap <= 0:
            raise MifiConfigError(f"queue_cap must be positive, got {self.queue_cap}")

    @property
    def device_url(self) -> str:
        return f"http://{self.device_host}:{self.device_port}/"

    @classmethod
    def from_env(cls, **overrides: Any) -> MifiGpsConfig:
        """Create configuration from ``MIFI_GPS_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        MifiConfigError
            If ``MIFI_GPS_DBCONNSTR`` is missing or a numeric variable
            does not parse.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "MIFI_GPS_DBCONNSTR": "db_dsn",
            "MIFI_GPS_MAPSAPIKEY": "maps_api_key",
            "MIFI_GPS_DEVICE_HOST": "device_host",
            "MIFI_GPS_BIND_HOST": "bind_host",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val.strip()

        _ENV_NUMERIC_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "MIFI_GPS_DEVICE_PORT": ("device_port", int),
            "MIFI_GPS_BIND_PORT": ("bind_port", int),
            "MIFI_GPS_RECONNECT_DELAY": ("reconnect_delay", float),
            "MIFI_GPS_SAMPLE_INTERVAL": ("sample_interval", float),
            "MIFI_GPS_SAMPLE_DELAY": ("sample_initial_delay", float),
            "MIFI_GPS_FLUSH_INTERVAL": ("flush_interval", float),
            "MIFI_GPS_QUEUE_CAP": ("queue_cap", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip() and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        config_kwargs.update(overrides)

        if not config_kwargs.get("db_dsn"):
            raise MifiConfigError("missing db connection string in env var MIFI_GPS_DBCONNSTR")

        return cls(**config_kwargs)
