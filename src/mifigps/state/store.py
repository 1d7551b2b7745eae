"""Lock-guarded store of the latest fragment per sentence type.

This is the only component allowed to hold mutable fix state. Fragments are
frozen models, so a snapshot is a copy of five references taken under the
lock: readers never see a half-applied update.
"""

from __future__ import annotations

import threading

from pydantic import BaseModel, ConfigDict

from mifigps.exceptions import UnsupportedSentenceType
from mifigps.models.fragments import (
    AltitudeFix,
    FixFragment,
    PositionVelocity,
    SatelliteGeometry,
    SatellitesInView,
    TrackMadeGood,
)


class FixSnapshot(BaseModel):
    """Point-in-time copy of every fragment slot.

    Slots are independent: there is no guarantee that ``rmc`` and ``gga``
    describe the same receiver epoch, only that each is the latest of its
    type.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rmc: PositionVelocity | None = None
    gga: AltitudeFix | None = None
    gsa: SatelliteGeometry | None = None
    gsv: SatellitesInView | None = None
    vtg: TrackMadeGood | None = None

    @property
    def is_empty(self) -> bool:
        return all(slot is None for slot in (self.rmc, self.gga, self.gsa, self.gsv, self.vtg))


class FixStore:
    """Latest known value of each fix fragment.

    Construct one per process and hand it to every task that needs it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rmc: PositionVelocity | None = None
        self._gga: AltitudeFix | None = None
        self._gsa: SatelliteGeometry | None = None
        self._gsv: SatellitesInView | None = None
        self._vtg: TrackMadeGood | None = None

    def update(self, fragment: FixFragment) -> None:
        """Overwrite the slot matching *fragment*'s variant."""
        with self._lock:
            match fragment:
                case PositionVelocity():
                    self._rmc = fragment
                case AltitudeFix():
                    self._gga = fragment
                case SatelliteGeometry():
                    self._gsa = fragment
                case SatellitesInView():
                    self._gsv = fragment
                case TrackMadeGood():
                    self._vtg = fragment
                case _:
                    raise UnsupportedSentenceType(
                        f"no slot for fragment {type(fragment).__name__}",
                        sentence_type=type(fragment).__name__,
                    )

    def snapshot(self) -> FixSnapshot:
        """Copy all five slots as of a single instant."""
        with self._lock:
            return FixSnapshot(
                rmc=self._rmc,
                gga=self._gga,
                gsa=self._gsa,
                gsv=self._gsv,
                vtg=self._vtg,
            )

    def clear(self) -> None:
        """Drop every slot; observers then see "no current data"."""
        with self._lock:
            self._rmc = None
            self._gga = None
            self._gsa = None
            self._gsv = None
            self._vtg = None
