"""Shared constants for geometry ingestion."""

from __future__ import annotations

from gingles_geo.core.constants import MAX_LATITUDE, MAX_LONGITUDE, MIN_LATITUDE, MIN_LONGITUDE

# Minimum positions for a valid ring (3 distinct + closing = 4)
MIN_RING_POSITIONS = 4

SUPPORTED_GEOMETRY_TYPES = frozenset({"Point", "Polygon", "MultiPolygon"})

__all__ = [
    "MAX_LATITUDE",
    "MAX_LONGITUDE",
    "MIN_LATITUDE",
    "MIN_LONGITUDE",
    "MIN_RING_POSITIONS",
    "SUPPORTED_GEOMETRY_TYPES",
]
