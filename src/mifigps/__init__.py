"""mifigps - MiFi hotspot GPS stream logger."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mifigps")
except PackageNotFoundError:
    __version__ = "0+local"

from mifigps.config import MifiGpsConfig
from mifigps.exceptions import (
    DeviceStreamError,
    MifiConfigError,
    MifiGpsError,
    NoDataToLog,
    ParseError,
    PersistenceError,
    SamplingError,
    SentenceError,
    UnsupportedSentenceType,
)
from mifigps.ingestion.parser import parse_sentence
from mifigps.ingestion.stream import DeviceStreamReader
from mifigps.models import (
    AltitudeFix,
    FixFragment,
    LoggedFix,
    PersistenceRecord,
    PositionVelocity,
    SatelliteGeometry,
    SatelliteInfo,
    SatellitesInView,
    TrackMadeGood,
)
from mifigps.persistence import Flusher, OutboundQueue, Sampler, sample_fix
from mifigps.state import FixSnapshot, FixStore

__all__ = [
    "__version__",
    "AltitudeFix",
    "DeviceStreamError",
    "DeviceStreamReader",
    "FixFragment",
    "FixSnapshot",
    "FixStore",
    "Flusher",
    "LoggedFix",
    "MifiConfigError",
    "MifiGpsConfig",
    "MifiGpsError",
    "NoDataToLog",
    "OutboundQueue",
    "ParseError",
    "PersistenceError",
    "PersistenceRecord",
    "PositionVelocity",
    "Sampler",
    "SamplingError",
    "SatelliteGeometry",
    "SatelliteInfo",
    "SatellitesInView",
    "SentenceError",
    "TrackMadeGood",
    "UnsupportedSentenceType",
    "parse_sentence",
    "sample_fix",
]
