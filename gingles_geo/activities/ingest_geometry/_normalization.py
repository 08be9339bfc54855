"""Coordinate normalization helpers for geometry ingestion.

Responsibilities:
- Convert raw GeoJSON positions to clean ``(lon, lat)`` float tuples
- Convert raw rings and polygon coordinate arrays
"""

from __future__ import annotations

import math
from numbers import Real

from gingles_geo.core.exceptions import InvalidCoordinateError, InvalidGeometryError
from gingles_geo.models.geometry import Coordinate, Ring


def position_to_tuple(raw: object, context: str) -> Coordinate:
    """Convert a GeoJSON position to a ``(lon, lat)`` tuple.

    Drops altitude (third element) if present.

    Raises:
        InvalidGeometryError: If the position is not a list/tuple of at
            least two elements.
        InvalidCoordinateError: If a value is not a finite real number.
    """
    if not isinstance(raw, list | tuple):
        msg = f"Malformed position in {context}: expected list/tuple, got {type(raw).__name__}"
        raise InvalidGeometryError(msg)
    if len(raw) < 2:
        msg = f"Malformed position in {context}: expected at least 2 elements, got {len(raw)}"
        raise InvalidGeometryError(msg)

    lon, lat = raw[0], raw[1]
    for name, value in (("longitude", lon), ("latitude", lat)):
        if isinstance(value, bool) or not isinstance(value, Real):
            msg = f"Non-numeric {name} {value!r} in {context}"
            raise InvalidCoordinateError(msg)
        if not math.isfinite(value):
            msg = f"Non-finite {name} {value!r} in {context}"
            raise InvalidCoordinateError(msg)
    return (float(lon), float(lat))


def ring_to_tuples(raw: object, context: str) -> Ring:
    """Convert a raw linear ring to a list of ``(lon, lat)`` tuples.

    Raises:
        InvalidGeometryError: If the ring is not a list of positions.
    """
    if not isinstance(raw, list | tuple):
        msg = f"Malformed ring in {context}: expected list of positions, got {type(raw).__name__}"
        raise InvalidGeometryError(msg)
    return [
        position_to_tuple(position, f"{context}, position {idx}")
        for idx, position in enumerate(raw)
    ]


def polygon_rings(raw: object, context: str) -> list[Ring]:
    """Convert raw Polygon coordinates (``[exterior, *holes]``) to rings.

    Raises:
        InvalidGeometryError: If the coordinates are not a non-empty list
            of rings.
    """
    if not isinstance(raw, list | tuple) or not raw:
        msg = f"Polygon in {context} must have at least an exterior ring"
        raise InvalidGeometryError(msg)
    return [ring_to_tuples(ring, f"{context}, ring {idx}") for idx, ring in enumerate(raw)]
