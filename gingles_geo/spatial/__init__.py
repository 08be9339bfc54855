"""Spatial primitives kernel.

- primitives: area, perimeter, centroid, buffer, intersection, union,
  convex hull, distance, minimum enclosing circle
- projection: local UTM projection used for every measurement
- enclosing_circle: planar Welzl minimum enclosing circle
"""

from gingles_geo.spatial.primitives import (
    analyze_buffer,
    analyze_intersection,
    area,
    bounds,
    buffer,
    centroid,
    convex_hull,
    distance,
    intersection,
    minimum_enclosing_circle,
    perimeter,
    projection_for,
    union,
)

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
