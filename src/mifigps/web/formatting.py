"""Coordinate formatting for display."""

from __future__ import annotations

import math
from urllib.parse import quote

from mifigps._constants import GOOGLE_MAPS_EMBED_URL, GOOGLE_MAPS_SEARCH_URL


def format_gps(value: float) -> str:
    """NMEA ``DDMM.MMMM`` form of a decimal-degree value, sign dropped."""
    absolute = abs(value)
    degrees = math.floor(absolute)
    minutes = round((absolute - degrees) * 60, 4)
    if minutes >= 60:
        degrees += 1
        minutes -= 60
    padding = "0" if minutes < 10 else ""
    return f"{degrees}{padding}{minutes:.4f}"


def format_dms(value: float, hemispheres: str = "") -> str:
    """Degrees, minutes, seconds; ``hemispheres`` is e.g. ``"NS"`` or ``"EW"``."""
    absolute = abs(value)
    degrees = math.floor(absolute)
    minutes = math.floor(60 * (absolute - degrees))
    seconds = max(0.0, round(3600 * (absolute - degrees - minutes / 60), 3))
    if seconds >= 60:
        minutes += 1
        seconds -= 60
    if minutes >= 60:
        degrees += 1
        minutes -= 60
    text = f"{degrees}° {minutes}' {seconds:.3f}\""
    if hemispheres:
        text = f"{text} {hemispheres[0] if value >= 0 else hemispheres[1]}"
    return text


def map_link(latitude: float, longitude: float) -> str:
    return GOOGLE_MAPS_SEARCH_URL.format(lat=f"{latitude:.6f}", lon=f"{longitude:.6f}")


def map_embed_url(latitude: float, longitude: float, api_key: str) -> str:
    return GOOGLE_MAPS_EMBED_URL.format(
        key=quote(api_key, safe=""),
        lat=f"{latitude:.6f}",
        lon=f"{longitude:.6f}",
    )
