"""Base model for decoded telemetry.

Every fragment model inherits from :class:`FixBaseModel` which provides:

* frozen instances, so a fragment can be shared between the stream reader,
  the sampler and the status page without copying.
* ``extra="forbid"`` so a typo in a field name fails loudly in tests.
* A ``raw`` string carrying the sentence exactly as it arrived.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FixBaseModel(BaseModel):
    """Base for decoded NMEA fix fragments."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    talker: str = ""
    """Talker identifier (``GP``, ``GN``, ``GL``...)."""

    raw: str = Field(default="", repr=False)
    """Original sentence text."""
