"""Compactness calculation activity.

Computes the standard redistricting compactness measures for a single
district geometry:

- **Polsby-Popper**: ``4πA / P²``: area relative to a circle with the
  same perimeter.
- **Reock**: area relative to the true minimum enclosing circle of the
  district's vertices (Welzl's algorithm, not a perimeter-derived circle).
- **Convex hull ratio**: area relative to the convex hull.

All three are clamped to ``[0, 1]``. Every measurement uses one local
UTM projection chosen from the district's bounds, so the three ratios
share a single planar convention. A zero-area district (including a
Point) scores 0 on all three rather than failing.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING

from gingles_geo.activities.ingest_geometry import validate_geometry
from gingles_geo.core.exceptions import InvalidGeometryError
from gingles_geo.models.compactness import CompactnessResult
from gingles_geo.models.geometry import PointGeometry
from gingles_geo.spatial import primitives

if TYPE_CHECKING:
    from gingles_geo.models.geometry import Geometry

logger = logging.getLogger("gingles_geo.activities.calculate_compactness")


def calculate_compactness(geometry: Geometry | Mapping[str, object]) -> CompactnessResult:
    """Compute Polsby-Popper, Reock and convex hull ratio for a district.

    Args:
        geometry: A validated ``Geometry`` or a raw GeoJSON geometry
            mapping (validated here).

    Returns:
        A ``CompactnessResult`` with clamped scores and raw area (m²)
        and perimeter (m).

    Raises:
        InvalidGeometryError: If ingestion rejects the geometry.
    """
    if isinstance(geometry, Mapping):
        geometry = validate_geometry(geometry, context="district geometry")
    if isinstance(geometry, PointGeometry):
        logger.warning("Point district geometry has no area; scores set to 0")
        return _zero_scores(0.0, 0.0)

    projection = primitives.projection_for(geometry)
    area = primitives.area(geometry, projection=projection)
    perimeter = primitives.perimeter(geometry, projection=projection)

    if area <= 0 or perimeter <= 0:
        logger.warning(
            "Degenerate district geometry (area=%.3f m2, perimeter=%.3f m); scores set to 0",
            area,
            perimeter,
        )
        return _zero_scores(area, perimeter)

    polsby_popper = clamp(4 * math.pi * area / perimeter**2)

    circle = primitives.minimum_enclosing_circle(geometry, projection=projection)
    reock = clamp(area / circle.area_m2) if circle.area_m2 > 0 else 0.0

    hull = primitives.convex_hull(geometry)
    hull_area = primitives.area(hull, projection=projection) if hull is not None else 0.0
    convex_hull_ratio = clamp(area / hull_area) if hull_area > 0 else 1.0

    result = CompactnessResult(
        polsby_popper=polsby_popper,
        reock=reock,
        convex_hull_ratio=convex_hull_ratio,
        area_m2=area,
        perimeter_m=perimeter,
    )
    logger.info(
        "Compactness calculated | type=%s | polsby_popper=%.4f | reock=%.4f | "
        "convex_hull_ratio=%.4f | area=%.1f m2 | perimeter=%.1f m | crs=%s",
        geometry.geom_type,
        polsby_popper,
        reock,
        convex_hull_ratio,
        area,
        perimeter,
        projection.crs,
    )
    return result


def calculate_compactness_many(
    districts: Mapping[str, Geometry | Mapping[str, object]],
) -> dict[str, CompactnessResult]:
    """Score every district of a plan, keyed by district id.

    Raises:
        InvalidGeometryError: If any district geometry is malformed; the
            message names the district.
    """
    results: dict[str, CompactnessResult] = {}
    for district_id, geometry in districts.items():
        try:
            results[district_id] = calculate_compactness(geometry)
        except InvalidGeometryError as exc:
            msg = f"District '{district_id}': {exc.message}"
            raise type(exc)(msg, stage=exc.stage, code=exc.code) from exc
    return results


def _zero_scores(area: float, perimeter: float) -> CompactnessResult:
    return CompactnessResult(
        polsby_popper=0.0,
        reock=0.0,
        convex_hull_ratio=0.0,
        area_m2=area,
        perimeter_m=perimeter,
    )


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))
