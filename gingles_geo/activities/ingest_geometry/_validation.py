"""Validation helpers for geometry ingestion.

Responsibilities:
- Coordinate bounds checking (WGS 84)
- Ring structure validation (closure, position count)
- Topology detection with shapely (reporting only, never repair)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gingles_geo.activities.ingest_geometry._constants import (
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    MIN_RING_POSITIONS,
)
from gingles_geo.core.exceptions import InvalidCoordinateError, InvalidGeometryError

if TYPE_CHECKING:
    from gingles_geo.models.geometry import Coordinate, Geometry, Ring

logger = logging.getLogger("gingles_geo.activities.ingest_geometry")


# ---------------------------------------------------------------------------
# Coordinate validation
# ---------------------------------------------------------------------------


def validate_coordinate(coord: Coordinate, context: str) -> None:
    """Validate that a coordinate is within WGS 84 bounds.

    Raises:
        InvalidCoordinateError: If the coordinate is out of bounds.
    """
    lon, lat = coord
    if not (MIN_LONGITUDE <= lon <= MAX_LONGITUDE):
        msg = f"Longitude {lon} out of WGS 84 range [{MIN_LONGITUDE}, {MAX_LONGITUDE}] in {context}"
        raise InvalidCoordinateError(msg)
    if not (MIN_LATITUDE <= lat <= MAX_LATITUDE):
        msg = f"Latitude {lat} out of WGS 84 range [{MIN_LATITUDE}, {MAX_LATITUDE}] in {context}"
        raise InvalidCoordinateError(msg)


# ---------------------------------------------------------------------------
# Ring validation
# ---------------------------------------------------------------------------


def validate_ring(ring: Ring, context: str) -> None:
    """Validate a linear ring is closed and long enough.

    Unclosed rings are rejected rather than auto-closed. Collinear or
    otherwise zero-area rings pass.

    Raises:
        InvalidGeometryError: If the ring is too short or not closed.
        InvalidCoordinateError: If any position is out of bounds.
    """
    if len(ring) < MIN_RING_POSITIONS:
        msg = (
            f"Ring has only {len(ring)} position(s), need at least "
            f"{MIN_RING_POSITIONS} (including closure) in {context}"
        )
        raise InvalidGeometryError(msg)

    if ring[0] != ring[-1]:
        msg = f"Ring is not closed (first {ring[0]} != last {ring[-1]}) in {context}"
        raise InvalidGeometryError(msg)

    for coord in ring:
        validate_coordinate(coord, context)


# ---------------------------------------------------------------------------
# Topology detection
# ---------------------------------------------------------------------------


def describe_topology(geometry: Geometry) -> str | None:
    """Report a topology problem without repairing it.

    Returns:
        ``None`` when shapely considers the geometry valid, otherwise
        the GEOS explanation (e.g. ``"Self-intersection[1 1]"``).
    """
    from shapely.validation import explain_validity

    shape = geometry.to_shapely()
    if shape.is_valid:
        return None
    return explain_validity(shape)
