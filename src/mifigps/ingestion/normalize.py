"""Normalization helpers for raw NMEA field text.

Empty fields mean "absent" and become ``None``. Non-empty fields that do not
convert raise :class:`ValueError`; the parser turns that into a
:class:`~mifigps.exceptions.ParseError`.
"""

from __future__ import annotations

import math
import re

_NMEA_DATE = re.compile(r"^(\d{2})(\d{2})(\d{2})$")
_NMEA_TIME = re.compile(r"^(\d{2})(\d{2})(\d{2})(\.\d+)?$")


def optional_float(value: str | None) -> float | None:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    result = float(text)
    if not math.isfinite(result):
        raise ValueError(f"field {text!r} is not a finite number")
    return result


def optional_int(value: str | None) -> int | None:
    parsed = optional_float(value)
    if parsed is None:
        return None
    return int(parsed)


def optional_str(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    return text if text else None


def nmea_to_degrees(value: str | None, hemisphere: str | None) -> float | None:
    """Convert ``DDDMM.MMMM`` plus hemisphere to signed decimal degrees."""
    text = optional_str(value)
    if text is None:
        return None
    head, _, _ = text.partition(".")
    if len(head) < 3:
        raise ValueError(f"coordinate {text!r} is not in DDMM.MMMM form")
    degrees = float(text[: len(head) - 2])
    minutes = float(text[len(head) - 2 :])
    if minutes >= 60:
        raise ValueError(f"coordinate {text!r} has minutes >= 60")
    result = degrees + minutes / 60.0
    direction = (hemisphere or "").strip().upper()
    if direction in {"S", "W"}:
        return -result
    if direction in {"N", "E", ""}:
        return result
    raise ValueError(f"unknown hemisphere {hemisphere!r}")


def nmea_date(value: str | None) -> str | None:
    """Render a raw ``DDMMYY`` field as ``DD/MM/YY``."""
    text = optional_str(value)
    if text is None:
        return None
    match = _NMEA_DATE.match(text)
    if match is None:
        raise ValueError(f"date {text!r} is not DDMMYY")
    return "/".join(match.groups())


def nmea_time(value: str | None) -> str | None:
    """Render a raw ``HHMMSS[.ss]`` field as ``HH:MM:SS[.ss]``."""
    text = optional_str(value)
    if text is None:
        return None
    match = _NMEA_TIME.match(text)
    if match is None:
        raise ValueError(f"time {text!r} is not HHMMSS[.ss]")
    hours, minutes, seconds, fraction = match.groups()
    return f"{hours}:{minutes}:{seconds}{fraction or ''}"
