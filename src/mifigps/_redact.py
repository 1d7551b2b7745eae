"""Helpers for safe logging of connection strings.

The database DSN usually embeds a password. This module strips it before the
DSN reaches a log line or an exception message.
"""

from __future__ import annotations

import re

_URL_PASSWORD = re.compile(r"^(?P<scheme>[a-z][a-z0-9+.-]*://)(?P<user>[^:@/]*):(?P<password>[^@/]*)@", re.I)
_KV_PASSWORD = re.compile(r"(?P<key>\bpassword\s*=\s*)(?P<value>'(?:[^'\\]|\\.)*'|\S+)", re.I)


def redact_dsn(dsn: str) -> str:
    """Return *dsn* with any password replaced by ``<redacted>``.

    Handles both URL form (``postgres://user:pw@host/db``) and libpq
    key/value form (``host=db password=pw``).
    """
    redacted = _URL_PASSWORD.sub(r"\g<scheme>\g<user>:<redacted>@", dsn)
    return _KV_PASSWORD.sub(r"\g<key><redacted>", redacted)
