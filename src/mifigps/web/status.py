"""Status page routes.

``GET /`` renders the current fix store snapshot as HTML; ``GET
/status.json`` returns the same snapshot as JSON. Rendering reads one
snapshot and never touches the store otherwise.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Callable, Iterable
from string import Template
from typing import Any

from aiohttp import web

from mifigps.state.store import FixSnapshot, FixStore
from mifigps.web.formatting import format_dms, format_gps, map_embed_url, map_link

_logger = logging.getLogger(__name__)

Renderer = Callable[[FixSnapshot, str | None], str]

STORE_KEY = web.AppKey("store", FixStore)
MAPS_API_KEY = web.AppKey("maps_api_key", str)
RENDERER_KEY = web.AppKey("renderer", Callable[..., str])

_PAGE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta http-equiv="refresh" content="15">
<title>MiFi GPS</title>
<style>
body { font-family: sans-serif; margin: 1.5em; }
table { border-collapse: collapse; margin-bottom: 1em; }
th, td { border: 1px solid #ccc; padding: 0.25em 0.6em; text-align: left; }
.empty { color: #888; }
</style>
</head>
<body>
<h1>MiFi GPS</h1>
$body
</body>
</html>
"""
)

_FIX_QUALITY = {
    0: "invalid",
    1: "GPS fix",
    2: "DGPS fix",
    3: "PPS fix",
    4: "RTK",
    5: "float RTK",
    6: "estimated",
    7: "manual",
    8: "simulation",
}

_FIX_TYPE = {1: "no fix", 2: "2D", 3: "3D"}

_JSON_EXCLUDE = {slot: {"raw"} for slot in ("rmc", "gga", "gsa", "gsv", "vtg")}


def _fmt(value: Any, unit: str = "", digits: int | None = None) -> str:
    if value is None:
        return "n/a"
    if digits is not None and isinstance(value, float):
        text = f"{value:.{digits}f}"
    else:
        text = str(value)
    return f"{text} {unit}".strip()


def _table(title: str, rows: Iterable[tuple[str, str]]) -> str:
    cells = "\n".join(f"<tr><th>{html.escape(label)}</th><td>{html.escape(value)}</td></tr>" for label, value in rows)
    return f"<h2>{html.escape(title)}</h2>\n<table>\n{cells}\n</table>"


def _coordinate_rows(latitude: float | None, longitude: float | None) -> list[tuple[str, str]]:
    if latitude is None or longitude is None:
        return [("Latitude", "n/a"), ("Longitude", "n/a")]
    return [
        ("Latitude", f"{latitude:.6f} / {format_gps(latitude)} / {format_dms(latitude, 'NS')}"),
        ("Longitude", f"{longitude:.6f} / {format_gps(longitude)} / {format_dms(longitude, 'EW')}"),
    ]


def _map_section(latitude: float, longitude: float, maps_api_key: str | None) -> str:
    link = html.escape(map_link(latitude, longitude))
    parts = [f'<p><a href="{link}">Open in Google Maps</a></p>']
    if maps_api_key:
        src = html.escape(map_embed_url(latitude, longitude, maps_api_key))
        parts.append(
            f'<iframe title="map" width="600" height="450" style="border:0" loading="lazy" src="{src}"></iframe>'
        )
    return "\n".join(parts)


def render_status_page(snapshot: FixSnapshot, maps_api_key: str | None = None) -> str:
    """Render *snapshot* as a complete HTML document."""
    if snapshot.is_empty:
        return _PAGE.substitute(body='<p class="empty">No GPS data. Waiting for the device stream.</p>')

    sections: list[str] = []
    rmc, gga, gsa, gsv, vtg = snapshot.rmc, snapshot.gga, snapshot.gsa, snapshot.gsv, snapshot.vtg

    if rmc is not None:
        rows = _coordinate_rows(rmc.latitude, rmc.longitude)
        rows += [
            ("Speed", _fmt(rmc.speed, "kn", 1)),
            ("Course", _fmt(rmc.course, "°", 1)),
            ("Device time (UTC)", f"{rmc.date or '?'} {rmc.time or '?'}"),
            ("Status", "valid" if rmc.is_valid else _fmt(rmc.status)),
        ]
        sections.append(_table("Position", rows))

    if gga is not None:
        quality = _FIX_QUALITY.get(gga.fix_quality, _fmt(gga.fix_quality)) if gga.fix_quality is not None else "n/a"
        rows = [
            ("Altitude", _fmt(gga.altitude, "m", 1)),
            ("Fix quality", quality),
            ("Satellites used", _fmt(gga.num_satellites)),
            ("HDOP", _fmt(gga.hdop, digits=1)),
        ]
        if rmc is None:
            rows = _coordinate_rows(gga.latitude, gga.longitude) + rows
        sections.append(_table("Altitude fix", rows))

    if gsa is not None:
        fix_type = _FIX_TYPE.get(gsa.fix_type, _fmt(gsa.fix_type)) if gsa.fix_type is not None else "n/a"
        sections.append(
            _table(
                "Dilution of precision",
                [
                    ("Mode", "automatic" if gsa.mode == "A" else "manual" if gsa.mode == "M" else _fmt(gsa.mode)),
                    ("Fix type", fix_type),
                    ("PDOP", _fmt(gsa.pdop, digits=1)),
                    ("HDOP", _fmt(gsa.hdop, digits=1)),
                    ("VDOP", _fmt(gsa.vdop, digits=1)),
                    ("Satellites", ", ".join(str(prn) for prn in gsa.satellite_ids) or "none"),
                ],
            )
        )

    if gsv is not None:
        header = (
            f"<h2>Satellites in view: {html.escape(_fmt(gsv.satellites_in_view))}</h2>\n"
            f"<p>Message {html.escape(_fmt(gsv.message_number))} of {html.escape(_fmt(gsv.total_messages))}</p>"
        )
        rows_html = "\n".join(
            f"<tr><td>{sat.prn}</td><td>{html.escape(_fmt(sat.elevation, '°'))}</td>"
            f"<td>{html.escape(_fmt(sat.azimuth, '°'))}</td><td>{html.escape(_fmt(sat.snr, 'dB'))}</td></tr>"
            for sat in gsv.satellites
        )
        sections.append(
            f"{header}\n<table>\n<tr><th>PRN</th><th>Elevation</th><th>Azimuth</th><th>SNR</th></tr>\n"
            f"{rows_html}\n</table>"
        )

    if vtg is not None:
        sections.append(
            _table(
                "Track made good",
                [
                    ("True track", _fmt(vtg.true_track, "°", 1)),
                    ("Magnetic track", _fmt(vtg.magnetic_track, "°", 1)),
                    ("Speed", f"{_fmt(vtg.speed_knots, 'kn', 1)} / {_fmt(vtg.speed_kmh, 'km/h', 1)}"),
                    ("Mode", _fmt(vtg.faa_mode)),
                ],
            )
        )

    latitude = rmc.latitude if rmc is not None else gga.latitude if gga is not None else None
    longitude = rmc.longitude if rmc is not None else gga.longitude if gga is not None else None
    if latitude is not None and longitude is not None:
        sections.append(_map_section(latitude, longitude, maps_api_key))

    return _PAGE.substitute(body="\n".join(sections))


async def index_handler(request: web.Request) -> web.Response:
    """GET / - Render the current fix."""
    snapshot = request.app[STORE_KEY].snapshot()
    renderer = request.app[RENDERER_KEY]
    try:
        body = renderer(snapshot, request.app[MAPS_API_KEY] or None)
    except Exception:
        _logger.exception("Error rendering web page")
        raise web.HTTPInternalServerError(text="failed to render status page") from None
    return web.Response(text=body, content_type="text/html")


async def status_json_handler(request: web.Request) -> web.Response:
    """GET /status.json - Current fix as JSON."""
    snapshot = request.app[STORE_KEY].snapshot()
    return web.json_response(snapshot.model_dump(mode="json", exclude=_JSON_EXCLUDE))


def create_status_app(
    store: FixStore,
    *,
    maps_api_key: str | None = None,
    renderer: Renderer = render_status_page,
) -> web.Application:
    """Build the aiohttp application serving the status page."""
    app = web.Application()
    app[STORE_KEY] = store
    app[MAPS_API_KEY] = maps_api_key or ""
    app[RENDERER_KEY] = renderer
    app.router.add_get("/", index_handler)
    app.router.add_get("/status.json", status_json_handler)
    return app
