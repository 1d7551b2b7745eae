"""Custom exception hierarchy for mifigps."""

from __future__ import annotations


class MifiGpsError(Exception):
    """Base exception for all mifigps errors."""


class MifiConfigError(MifiGpsError):
    """Invalid or missing configuration."""


class SentenceError(MifiGpsError):
    """A single telemetry line could not be turned into a fix fragment."""

    def __init__(self, message: str, *, line: str = "") -> None:
        self.line = line
        super().__init__(message)


class ParseError(SentenceError):
    """Malformed framing, checksum mismatch or unconvertible field."""


class UnsupportedSentenceType(SentenceError):
    """Well-framed sentence of a type the fix store does not track."""

    def __init__(self, message: str, *, sentence_type: str = "", line: str = "") -> None:
        self.sentence_type = sentence_type
        super().__init__(message, line=line)


class DeviceStreamError(MifiGpsError):
    """Connection or read failure on the device telemetry stream."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class NoDataToLog(MifiGpsError):
    """Sampling skipped: position or altitude fragment is missing.

    Not an alarm condition; callers log it at low severity.
    """


class SamplingError(MifiGpsError):
    """Sampling failed, e.g. the device date/time did not combine."""


class PersistenceError(MifiGpsError):
    """Database transaction or insert failure.

    The batch that was being written stays queued for the next flush cycle.
    """

    def __init__(self, message: str, *, pending: int = 0) -> None:
        self.pending = pending
        super().__init__(message)
