"""Spatial primitives kernel.

Area, perimeter, centroid, buffer, intersection, union, convex hull,
distance and minimum enclosing circle over the internal geometry model.

Convention: topology (intersection, union, hull) is computed with shapely
directly on WGS 84 coordinates; every measurement (area, length,
distance, buffer radius) is taken in the local UTM projection chosen by
``LocalProjection.for_bounds``. Pairwise measurements share a single
projection. Areas are square metres, lengths metres.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from gingles_geo.core.constants import DEFAULT_QUAD_SEGS, METRES_PER_UNIT
from gingles_geo.core.exceptions import SpatialOperationError, SpatialParameterError
from gingles_geo.models.geometry import (
    Geometry,
    PointGeometry,
    from_shapely,
    polygon_parts,
)
from gingles_geo.models.spatial import BufferAnalysis, EnclosingCircle, IntersectionAnalysis
from gingles_geo.spatial.enclosing_circle import minimum_enclosing_circle as _welzl
from gingles_geo.spatial.projection import Bounds, LocalProjection, combined_bounds

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger("gingles_geo.spatial.primitives")


# ---------------------------------------------------------------------------
# Bounds / projection
# ---------------------------------------------------------------------------


def bounds(geometry: Geometry) -> Bounds:
    """Tight bounding box ``(min_lon, min_lat, max_lon, max_lat)``."""
    if isinstance(geometry, PointGeometry):
        lon, lat = geometry.coordinates
        return (lon, lat, lon, lat)
    coords = [c for polygon in polygon_parts(geometry) for c in polygon.exterior]
    lons = [c[0] for c in coords]
    lats = [c[1] for c in coords]
    return (min(lons), min(lats), max(lons), max(lats))


def projection_for(*geometries: Geometry) -> LocalProjection:
    """Single metric projection shared by all ``geometries``."""
    return LocalProjection.for_bounds(combined_bounds(*(bounds(g) for g in geometries)))


def _projected(geometry: Geometry, projection: LocalProjection | None) -> BaseGeometry:
    projection = projection or projection_for(geometry)
    return projection.forward(geometry.to_shapely())


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------


def area(geometry: Geometry, *, projection: LocalProjection | None = None) -> float:
    """Planar area in square metres (0 for points and degenerate rings)."""
    if isinstance(geometry, PointGeometry):
        return 0.0
    return abs(float(_projected(geometry, projection).area))


def perimeter(geometry: Geometry, *, projection: LocalProjection | None = None) -> float:
    """Planar boundary length in metres, hole boundaries included."""
    if isinstance(geometry, PointGeometry):
        return 0.0
    return float(_projected(geometry, projection).length)


def centroid(geometry: Geometry) -> PointGeometry:
    """Area-weighted centroid, computed in the metric projection.

    Degenerate polygons fall back to the mean of their vertices.
    """
    if isinstance(geometry, PointGeometry):
        return geometry

    projection = projection_for(geometry)
    projected = projection.forward(geometry.to_shapely())
    center = projected.centroid
    if center.is_empty:
        coords = [c for polygon in polygon_parts(geometry) for c in polygon.exterior[:-1]]
        lon = sum(c[0] for c in coords) / len(coords)
        lat = sum(c[1] for c in coords) / len(coords)
        return PointGeometry((lon, lat))
    return PointGeometry(projection.inverse_point(center.x, center.y))


def distance(g1: Geometry, g2: Geometry) -> float:
    """Minimum planar distance in metres (0 when the geometries touch)."""
    projection = projection_for(g1, g2)
    return float(projection.forward(g1.to_shapely()).distance(projection.forward(g2.to_shapely())))


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def buffer(
    geometry: Geometry,
    radius: float,
    units: str = "meters",
    *,
    quad_segs: int = DEFAULT_QUAD_SEGS,
) -> Geometry:
    """Expand a geometry by ``radius`` in the metric projection.

    A zero radius returns ``geometry`` unchanged.

    Raises:
        SpatialParameterError: If ``radius`` is not a finite, non-negative
            number or ``units`` is not a supported length unit.
        SpatialOperationError: If the buffer result is empty.
    """
    if isinstance(radius, bool) or not isinstance(radius, (int, float)):
        msg = f"Buffer radius must be a number, got {type(radius).__name__}"
        raise SpatialParameterError(msg)
    if not math.isfinite(radius):
        msg = f"Buffer radius must be finite, got {radius}"
        raise SpatialParameterError(msg)
    if not isinstance(units, str):
        msg = f"Buffer units must be a string, got {type(units).__name__}"
        raise SpatialParameterError(msg)
    metres_per_unit = METRES_PER_UNIT.get(units.lower())
    if metres_per_unit is None:
        msg = f"Unsupported buffer units '{units}'; expected one of {sorted(METRES_PER_UNIT)}"
        raise SpatialParameterError(msg)
    if radius < 0:
        msg = f"Buffer radius must be >= 0, got {radius}"
        raise SpatialParameterError(msg)
    if radius == 0:
        return geometry

    projection = projection_for(geometry)
    projected = projection.forward(geometry.to_shapely())
    buffered = _run_geos(
        "buffer", lambda: projected.buffer(radius * metres_per_unit, quad_segs=quad_segs)
    )
    result = from_shapely(projection.inverse(buffered), polygonal_only=True)
    if result is None:
        msg = f"Buffer of {geometry.geom_type} by {radius} {units} produced an empty geometry"
        raise SpatialOperationError(msg)
    return result


def intersection(g1: Geometry, g2: Geometry) -> Geometry | None:
    """Shared area (or shared point) of two geometries.

    Returns:
        The intersection, or ``None`` when the geometries do not overlap.
        Boundary-only contact (shared edge or vertex between polygons)
        counts as no overlap.
    """
    s1, s2 = g1.to_shapely(), g2.to_shapely()
    if not s1.intersects(s2):
        return None
    shared = _run_geos("intersection", lambda: s1.intersection(s2))
    polygonal = not isinstance(g1, PointGeometry) and not isinstance(g2, PointGeometry)
    return from_shapely(shared, polygonal_only=polygonal)


def union(geometries: Sequence[Geometry]) -> Geometry:
    """Dissolve polygonal geometries into one.

    Raises:
        SpatialParameterError: If no polygonal geometry is supplied.
    """
    from shapely import union_all

    polygonal = [g for g in geometries if not isinstance(g, PointGeometry)]
    if not polygonal:
        msg = "Union requires at least one Polygon or MultiPolygon"
        raise SpatialParameterError(msg)
    merged = _run_geos("union", lambda: union_all([g.to_shapely() for g in polygonal]))
    result = from_shapely(merged, polygonal_only=True)
    if result is None:
        # All inputs were zero-area; keep the first as the representative
        return polygonal[0]
    return result


def convex_hull(geometry: Geometry) -> Geometry | None:
    """Convex hull polygon, or ``None`` for points and collinear input."""
    hull = geometry.to_shapely().convex_hull
    if hull.geom_type != "Polygon" or hull.area == 0:
        return None
    return from_shapely(hull, polygonal_only=True)


def minimum_enclosing_circle(
    geometry: Geometry, *, projection: LocalProjection | None = None
) -> EnclosingCircle:
    """True minimum enclosing circle of the geometry's vertices.

    Only convex-hull vertices can lie on the circle, so Welzl's algorithm
    runs over the projected hull.
    """
    projection = projection or projection_for(geometry)
    hull = projection.forward(geometry.to_shapely()).convex_hull
    cx, cy, radius = _welzl((x, y) for x, y, *_ in _vertices(hull))
    return EnclosingCircle(center=PointGeometry(projection.inverse_point(cx, cy)), radius_m=radius)


# ---------------------------------------------------------------------------
# Composite analyses
# ---------------------------------------------------------------------------


def analyze_intersection(g1: Geometry, g2: Geometry) -> IntersectionAnalysis:
    """Intersection geometry plus its area and overlap fraction.

    The overlap fraction is the intersection area over the smaller of the
    two input areas, and 0 when either input has no area.
    """
    projection = projection_for(g1, g2)
    shared = intersection(g1, g2)
    shared_area = area(shared, projection=projection) if shared is not None else 0.0
    smaller = min(area(g1, projection=projection), area(g2, projection=projection))
    overlap = min(1.0, shared_area / smaller) if smaller > 0 else 0.0

    logger.info(
        "Spatial intersection | area=%.2f m2 | overlap=%.4f | crs=%s",
        shared_area,
        overlap,
        projection.crs,
    )
    return IntersectionAnalysis(geometry=shared, area_m2=shared_area, overlap_fraction=overlap)


def analyze_buffer(
    geometry: Geometry,
    radius: float,
    units: str = "meters",
    *,
    quad_segs: int = DEFAULT_QUAD_SEGS,
) -> BufferAnalysis:
    """Buffer a geometry and report the buffered area in square metres."""
    buffered = buffer(geometry, radius, units, quad_segs=quad_segs)
    buffered_area = area(buffered)
    logger.info(
        "Buffer analysis | type=%s | radius=%s %s | area=%.2f m2",
        geometry.geom_type,
        radius,
        units,
        buffered_area,
    )
    return BufferAnalysis(geometry=buffered, area_m2=buffered_area, radius=radius, units=units)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_geos(operation: str, func: Callable[[], BaseGeometry]) -> BaseGeometry:
    """Run a shapely operation, translating GEOS failures."""
    from shapely.errors import GEOSException

    try:
        return func()
    except GEOSException as exc:
        msg = f"GEOS {operation} failed: {exc}"
        raise SpatialOperationError(msg) from exc


def _vertices(shape: BaseGeometry) -> list[tuple[float, ...]]:
    """Coordinates of a hull result (Polygon, LineString or Point)."""
    if shape.geom_type == "Polygon":
        return list(shape.exterior.coords)
    return list(shape.coords)


__all__ = [
    "analyze_buffer",
    "analyze_intersection",
    "area",
    "bounds",
    "buffer",
    "centroid",
    "convex_hull",
    "distance",
    "intersection",
    "minimum_enclosing_circle",
    "perimeter",
    "projection_for",
    "union",
]
