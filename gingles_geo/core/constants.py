"""Shared engine constants: single source of truth.

Centralises coordinate bounds, index limits, unit conversions and
numeric tolerances that were otherwise duplicated across the kernel,
the indexer and the crosswalk builder.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Coordinate reference
# ---------------------------------------------------------------------------

WGS84_CRS: str = "EPSG:4326"
"""CRS of every geometry crossing the engine boundary."""

MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0

# ---------------------------------------------------------------------------
# H3 index
# ---------------------------------------------------------------------------

MIN_RESOLUTION = 0
MAX_RESOLUTION = 15
DEFAULT_RESOLUTION = 9
"""Roughly 0.1 km² cells, the usual choice for census-block alignment."""

DEFAULT_ID_KEY: str = "id"

# ---------------------------------------------------------------------------
# Numeric tolerances
# ---------------------------------------------------------------------------

WEIGHT_TOLERANCE = 1e-6
"""Allowed drift of a per-source weight total above 1.0."""

# ---------------------------------------------------------------------------
# Length units accepted by ``buffer`` (metres per unit)
# ---------------------------------------------------------------------------

METRES_PER_UNIT: dict[str, float] = {
    "meters": 1.0,
    "metres": 1.0,
    "kilometers": 1_000.0,
    "kilometres": 1_000.0,
    "miles": 1_609.344,
    "feet": 0.3048,
}

DEFAULT_QUAD_SEGS = 16
"""Segments per quarter circle when buffering (64-gon for a point buffer)."""
