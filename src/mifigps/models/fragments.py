"""Fix fragment models: one variant per tracked NMEA sentence type."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from mifigps.models._base import FixBaseModel


class PositionVelocity(FixBaseModel):
    """Recommended minimum data (RMC).

    Parameters
    ----------
    latitude, longitude : float or None
        Signed decimal degrees (south/west negative).
    speed : float or None
        Speed over ground in knots.
    course : float or None
        Course over ground, degrees true.
    date : str or None
        Device date as ``DD/MM/YY``.
    time : str or None
        Device UTC time as ``HH:MM:SS`` with optional fraction.
    status : str or None
        ``A`` when the receiver reports the fix valid, ``V`` otherwise.
    """

    kind: Literal["rmc"] = "rmc"
    latitude: float | None = None
    longitude: float | None = None
    speed: float | None = None
    course: float | None = None
    date: str | None = None
    time: str | None = None
    status: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.status == "A"


class AltitudeFix(FixBaseModel):
    """Fix data with altitude (GGA)."""

    kind: Literal["gga"] = "gga"
    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None
    fix_quality: int | None = None
    num_satellites: int | None = None
    hdop: float | None = None
    time: str | None = None


class SatelliteGeometry(FixBaseModel):
    """DOP and active satellites (GSA)."""

    kind: Literal["gsa"] = "gsa"
    mode: str | None = None
    fix_type: int | None = None
    satellite_ids: tuple[int, ...] = ()
    pdop: float | None = None
    hdop: float | None = None
    vdop: float | None = None


class SatelliteInfo(BaseModel):
    """One satellite entry of a GSV sentence."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    prn: int
    elevation: int | None = None
    azimuth: int | None = None
    snr: int | None = None


class SatellitesInView(FixBaseModel):
    """Satellites in view (GSV).

    A full GSV cycle spans several sentences; only the latest one is kept,
    so ``satellites`` lists at most four entries.
    """

    kind: Literal["gsv"] = "gsv"
    total_messages: int | None = None
    message_number: int | None = None
    satellites_in_view: int | None = None
    satellites: tuple[SatelliteInfo, ...] = ()


class TrackMadeGood(FixBaseModel):
    """Track made good and ground speed (VTG)."""

    kind: Literal["vtg"] = "vtg"
    true_track: float | None = None
    magnetic_track: float | None = None
    speed_knots: float | None = None
    speed_kmh: float | None = None
    faa_mode: str | None = None


FixFragment = Annotated[
    PositionVelocity | AltitudeFix | SatelliteGeometry | SatellitesInView | TrackMadeGood,
    Field(discriminator="kind"),
]
"""Closed union of the five fragment variants, discriminated on ``kind``."""
