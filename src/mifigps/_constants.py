"""Internal constants shared across the package."""

DEFAULT_DEVICE_HOST = "192.168.1.1"
DEFAULT_DEVICE_PORT = 11010
DEFAULT_BIND_HOST = "0.0.0.0"  # noqa: S104
DEFAULT_BIND_PORT = 8080

DEFAULT_RECONNECT_DELAY: float = 60.0
DEFAULT_SAMPLE_INTERVAL: float = 15 * 60.0
DEFAULT_SAMPLE_INITIAL_DELAY: float = 10.0
DEFAULT_FLUSH_INTERVAL: float = 5 * 60.0
DEFAULT_QUEUE_CAP = 100

# The hotspot answers with a bare HTTP/0.9 byte stream. The first read of the
# socket is replaced by this head so the rest can be read as a normal body.
HTTP09_PREAMBLE = b"HTTP/1.1 200 OK\r\nConnection: keep-alive\r\nContent-Type: text/plain\r\n\r\n"

# asyncio.StreamReader buffer limit; long garbage lines fail the read instead
# of growing memory.
STREAM_LINE_LIMIT = 64 * 1024

USER_AGENT = "mifigps"

GOOGLE_MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query={lat},{lon}"
GOOGLE_MAPS_EMBED_URL = "https://www.google.com/maps/embed/v1/place?key={key}&q={lat},{lon}&zoom=15"
