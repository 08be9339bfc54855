"""Internal geometry model.

A ``Geometry`` is one of three frozen dataclasses: ``PointGeometry``,
``PolygonGeometry`` or ``MultiPolygonGeometry``. Instances are produced
by the ingestion activity (validated) or by kernel operations, and are
converted to shapely objects at the point of computation.

All coordinates are WGS 84 ``(lon, lat)`` tuples. Polygon rings are
closed (first == last) and carry at least four positions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from gingles_geo.models.contracts import GeometryPayload

Coordinate = tuple[float, float]
Ring = list[Coordinate]


@dataclass(frozen=True, slots=True)
class PointGeometry:
    """A single ``(lon, lat)`` position."""

    coordinates: Coordinate

    @property
    def geom_type(self) -> str:
        return "Point"

    def to_geojson(self) -> GeometryPayload:
        return {"type": "Point", "coordinates": list(self.coordinates)}

    def to_shapely(self) -> BaseGeometry:
        from shapely.geometry import Point

        return Point(self.coordinates)


@dataclass(frozen=True, slots=True)
class PolygonGeometry:
    """A polygon with one exterior ring and optional holes.

    Attributes:
        exterior: Closed exterior ring as ``(lon, lat)`` tuples.
        interiors: Closed interior rings (holes).
    """

    exterior: Ring
    interiors: list[Ring] = field(default_factory=list)

    @property
    def geom_type(self) -> str:
        return "Polygon"

    @property
    def rings(self) -> list[Ring]:
        """Exterior ring followed by any holes."""
        return [self.exterior, *self.interiors]

    def to_geojson(self) -> GeometryPayload:
        return {
            "type": "Polygon",
            "coordinates": [[list(c) for c in ring] for ring in self.rings],
        }

    def to_shapely(self) -> BaseGeometry:
        from shapely.geometry import Polygon

        return Polygon(self.exterior, self.interiors)


@dataclass(frozen=True, slots=True)
class MultiPolygonGeometry:
    """A non-empty collection of polygons."""

    polygons: list[PolygonGeometry]

    @property
    def geom_type(self) -> str:
        return "MultiPolygon"

    def to_geojson(self) -> GeometryPayload:
        return {
            "type": "MultiPolygon",
            "coordinates": [
                [[list(c) for c in ring] for ring in polygon.rings] for polygon in self.polygons
            ],
        }

    def to_shapely(self) -> BaseGeometry:
        from shapely.geometry import MultiPolygon

        return MultiPolygon([(p.exterior, p.interiors) for p in self.polygons])


Geometry = PointGeometry | PolygonGeometry | MultiPolygonGeometry


def polygon_parts(geometry: Geometry) -> list[PolygonGeometry]:
    """Return the polygons making up ``geometry`` (empty for a point)."""
    if isinstance(geometry, PolygonGeometry):
        return [geometry]
    if isinstance(geometry, MultiPolygonGeometry):
        return list(geometry.polygons)
    if isinstance(geometry, PointGeometry):
        return []
    msg = f"Unsupported geometry variant: {type(geometry).__name__}"
    raise TypeError(msg)


def from_shapely(shape: BaseGeometry, *, polygonal_only: bool = False) -> Geometry | None:
    """Convert a shapely result back into the internal model.

    Polygonal parts of mixed results (``GeometryCollection``) are kept;
    line fragments are dropped. A lone point survives unless
    ``polygonal_only`` is set.

    Returns:
        The converted geometry, or ``None`` for an empty or non-areal
        result.
    """
    if shape.is_empty:
        return None

    kind = shape.geom_type
    if kind == "Point":
        if polygonal_only:
            return None
        return PointGeometry((float(shape.x), float(shape.y)))
    if kind == "Polygon":
        return _polygon_from_shapely(shape)
    if kind in ("MultiPolygon", "GeometryCollection"):
        polygons = []
        points = []
        for part in shape.geoms:
            converted = from_shapely(part, polygonal_only=polygonal_only)
            if isinstance(converted, PolygonGeometry):
                polygons.append(converted)
            elif isinstance(converted, MultiPolygonGeometry):
                polygons.extend(converted.polygons)
            elif isinstance(converted, PointGeometry):
                points.append(converted)
        if len(polygons) == 1:
            return polygons[0]
        if polygons:
            return MultiPolygonGeometry(polygons)
        if len(points) == 1:
            return points[0]
        return None
    return None


def _polygon_from_shapely(shape: BaseGeometry) -> PolygonGeometry | None:
    if shape.is_empty:
        return None
    exterior = [(float(x), float(y)) for x, y, *_ in shape.exterior.coords]
    interiors = [[(float(x), float(y)) for x, y, *_ in ring.coords] for ring in shape.interiors]
    return PolygonGeometry(exterior=exterior, interiors=interiors)
