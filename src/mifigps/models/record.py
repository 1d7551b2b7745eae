"""Persistence record models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class PersistenceRecord(BaseModel):
    """A sampled 3D fix waiting to be written to ``gps_logs``.

    Parameters
    ----------
    logged_at : datetime
        Wall-clock time the sample was taken.
    gps_timestamp : datetime
        Device-reported UTC time (RMC date + time).
    longitude, latitude : float
        Decimal degrees, WGS84.
    altitude : float
        Metres above mean sea level (from GGA).
    speed : float or None
        Speed over ground in knots.
    course : float or None
        Course over ground, degrees true.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    logged_at: datetime
    gps_timestamp: datetime
    longitude: float
    latitude: float
    altitude: float
    speed: float | None = None
    course: float | None = None

    @field_validator("logged_at", "gps_timestamp")
    @classmethod
    def _tz_aware(cls, value: datetime) -> datetime:
        return _ensure_utc(value)

    @property
    def ewkt(self) -> str:
        """Extended WKT for ``ST_GeographyFromText``."""
        return f"SRID=4326;POINTZ({self.longitude:f} {self.latitude:f} {self.altitude:f})"


class LoggedFix(BaseModel):
    """A row read back from ``gps_logs``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    logged_at: datetime
    gps_timestamp: datetime | None = None
    longitude: float | None = None
    latitude: float | None = None
    altitude: float | None = None

    @field_validator("logged_at", "gps_timestamp")
    @classmethod
    def _tz_aware(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return _ensure_utc(value)
