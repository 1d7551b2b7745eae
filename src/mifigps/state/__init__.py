"""State layer.

Holds the single latest-known fix shared by the stream reader, the sampler
and the status page.
"""

from mifigps.state.store import FixSnapshot, FixStore

__all__ = ["FixSnapshot", "FixStore"]
