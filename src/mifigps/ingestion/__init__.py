"""Ingestion layer.

Turns the hotspot's telemetry stream into fix fragments and writes them into
the fix store.
"""

__all__: list[str] = []
