"""Persistence layer: sampling, outbound buffering and PostGIS writes."""

from mifigps.persistence.flusher import Flusher, RecordSink
from mifigps.persistence.queue import OutboundQueue
from mifigps.persistence.sampler import Sampler, device_timestamp, sample_fix

__all__ = [
    "Flusher",
    "OutboundQueue",
    "RecordSink",
    "Sampler",
    "device_timestamp",
    "sample_fix",
]
