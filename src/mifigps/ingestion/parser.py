"""NMEA sentence parser.

Decodes one line of device telemetry into a :data:`FixFragment`. Framing and
checksums are handled by :mod:`pynmea2`; field conversion is done here from
the raw field text so that an empty field stays ``None`` instead of
``pynmea2``'s zero defaults.
"""

from __future__ import annotations

from collections.abc import Callable

import pynmea2

from mifigps.exceptions import ParseError, UnsupportedSentenceType
from mifigps.ingestion.normalize import (
    nmea_date,
    nmea_time,
    nmea_to_degrees,
    optional_float,
    optional_int,
    optional_str,
)
from mifigps.models.fragments import (
    AltitudeFix,
    FixFragment,
    PositionVelocity,
    SatelliteGeometry,
    SatelliteInfo,
    SatellitesInView,
    TrackMadeGood,
)

_GSV_SLOTS = 4
_GSA_SLOTS = 12


def _field(msg: pynmea2.NMEASentence, name: str) -> str:
    """Raw text of a named field, ``""`` when the sentence is short."""
    idx = type(msg).name_to_idx.get(name)
    if idx is None or idx >= len(msg.data):
        return ""
    return str(msg.data[idx]).strip()


def _parse_rmc(msg: pynmea2.NMEASentence, line: str) -> PositionVelocity:
    return PositionVelocity(
        talker=msg.talker,
        raw=line,
        latitude=nmea_to_degrees(_field(msg, "lat"), _field(msg, "lat_dir")),
        longitude=nmea_to_degrees(_field(msg, "lon"), _field(msg, "lon_dir")),
        speed=optional_float(_field(msg, "spd_over_grnd")),
        course=optional_float(_field(msg, "true_course")),
        date=nmea_date(_field(msg, "datestamp")),
        time=nmea_time(_field(msg, "timestamp")),
        status=optional_str(_field(msg, "status")),
    )


def _parse_gga(msg: pynmea2.NMEASentence, line: str) -> AltitudeFix:
    return AltitudeFix(
        talker=msg.talker,
        raw=line,
        latitude=nmea_to_degrees(_field(msg, "lat"), _field(msg, "lat_dir")),
        longitude=nmea_to_degrees(_field(msg, "lon"), _field(msg, "lon_dir")),
        altitude=optional_float(_field(msg, "altitude")),
        fix_quality=optional_int(_field(msg, "gps_qual")),
        num_satellites=optional_int(_field(msg, "num_sats")),
        hdop=optional_float(_field(msg, "horizontal_dil")),
        time=nmea_time(_field(msg, "timestamp")),
    )


def _parse_gsa(msg: pynmea2.NMEASentence, line: str) -> SatelliteGeometry:
    ids: list[int] = []
    for slot in range(1, _GSA_SLOTS + 1):
        prn = optional_int(_field(msg, f"sv_id{slot:02d}"))
        if prn is not None:
            ids.append(prn)
    return SatelliteGeometry(
        talker=msg.talker,
        raw=line,
        mode=optional_str(_field(msg, "mode")),
        fix_type=optional_int(_field(msg, "mode_fix_type")),
        satellite_ids=tuple(ids),
        pdop=optional_float(_field(msg, "pdop")),
        hdop=optional_float(_field(msg, "hdop")),
        vdop=optional_float(_field(msg, "vdop")),
    )


def _parse_gsv(msg: pynmea2.NMEASentence, line: str) -> SatellitesInView:
    satellites: list[SatelliteInfo] = []
    for slot in range(1, _GSV_SLOTS + 1):
        prn = optional_int(_field(msg, f"sv_prn_num_{slot}"))
        if prn is None:
            continue
        satellites.append(
            SatelliteInfo(
                prn=prn,
                elevation=optional_int(_field(msg, f"elevation_deg_{slot}")),
                azimuth=optional_int(_field(msg, f"azimuth_{slot}")),
                snr=optional_int(_field(msg, f"snr_{slot}")),
            )
        )
    return SatellitesInView(
        talker=msg.talker,
        raw=line,
        total_messages=optional_int(_field(msg, "num_messages")),
        message_number=optional_int(_field(msg, "msg_num")),
        satellites_in_view=optional_int(_field(msg, "num_sv_in_view")),
        satellites=tuple(satellites),
    )


def _parse_vtg(msg: pynmea2.NMEASentence, line: str) -> TrackMadeGood:
    return TrackMadeGood(
        talker=msg.talker,
        raw=line,
        true_track=optional_float(_field(msg, "true_track")),
        magnetic_track=optional_float(_field(msg, "mag_track")),
        speed_knots=optional_float(_field(msg, "spd_over_grnd_kts")),
        speed_kmh=optional_float(_field(msg, "spd_over_grnd_kmph")),
        faa_mode=optional_str(_field(msg, "faa_mode")),
    )


_BUILDERS: dict[str, Callable[[pynmea2.NMEASentence, str], FixFragment]] = {
    "RMC": _parse_rmc,
    "GGA": _parse_gga,
    "GSA": _parse_gsa,
    "GSV": _parse_gsv,
    "VTG": _parse_vtg,
}

SUPPORTED_SENTENCE_TYPES: frozenset[str] = frozenset(_BUILDERS)


def parse_sentence(line: str) -> FixFragment:
    """Decode one NMEA sentence.

    Raises
    ------
    ParseError
        Bad framing, checksum mismatch or a field that does not convert.
    UnsupportedSentenceType
        A well-formed sentence of a type other than RMC/GGA/GSA/GSV/VTG.
    """
    try:
        msg = pynmea2.parse(line, check=True)
    except pynmea2.SentenceTypeError as exc:
        raise UnsupportedSentenceType(f"unknown sentence type: {exc}", line=line) from exc
    except (pynmea2.ParseError, ValueError) as exc:
        raise ParseError(f"failed to parse nmea line: {exc}", line=line) from exc
    except Exception as exc:
        # pynmea2 proprietary sentence classes index fields without bounds checks.
        raise ParseError(f"failed to parse nmea line: {exc!r}", line=line) from exc

    if not isinstance(msg, pynmea2.TalkerSentence):
        raise UnsupportedSentenceType(
            f"unexpected nmea sentence: {type(msg).__name__}",
            sentence_type=type(msg).__name__,
            line=line,
        )

    sentence_type = msg.sentence_type
    builder = _BUILDERS.get(sentence_type)
    if builder is None:
        raise UnsupportedSentenceType(
            f"unexpected nmea data type: {sentence_type}",
            sentence_type=sentence_type,
            line=line,
        )

    try:
        return builder(msg, line)
    except (ValueError, OverflowError) as exc:
        raise ParseError(f"invalid {sentence_type} field: {exc}", line=line) from exc
