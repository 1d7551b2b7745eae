"""Data models for decoded telemetry and persisted fixes."""

from mifigps.models._base import FixBaseModel
from mifigps.models.fragments import (
    AltitudeFix,
    FixFragment,
    PositionVelocity,
    SatelliteGeometry,
    SatelliteInfo,
    SatellitesInView,
    TrackMadeGood,
)
from mifigps.models.record import LoggedFix, PersistenceRecord

__all__ = [
    "AltitudeFix",
    "FixBaseModel",
    "FixFragment",
    "LoggedFix",
    "PersistenceRecord",
    "PositionVelocity",
    "SatelliteGeometry",
    "SatelliteInfo",
    "SatellitesInView",
    "TrackMadeGood",
]
