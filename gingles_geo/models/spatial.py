"""Result records returned by the spatial primitives kernel."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gingles_geo.models.contracts import BufferPayload, IntersectionPayload
    from gingles_geo.models.geometry import Geometry, PointGeometry


@dataclass(frozen=True, slots=True)
class EnclosingCircle:
    """Minimum enclosing circle of a vertex set.

    Attributes:
        center: Circle centre in WGS 84.
        radius_m: Radius in metres (local planar projection).
    """

    center: PointGeometry
    radius_m: float

    @property
    def area_m2(self) -> float:
        return math.pi * self.radius_m**2


@dataclass(frozen=True, slots=True)
class IntersectionAnalysis:
    """Overlap between two geometries.

    Attributes:
        geometry: Intersection geometry, ``None`` when they do not overlap.
        area_m2: Intersection area in square metres.
        overlap_fraction: Intersection area over the smaller input area,
            in ``[0, 1]``.
    """

    geometry: Geometry | None
    area_m2: float
    overlap_fraction: float

    def to_dict(self) -> IntersectionPayload:
        return {
            "geometry": self.geometry.to_geojson() if self.geometry is not None else None,
            "area": self.area_m2,
            "overlap_fraction": self.overlap_fraction,
        }


@dataclass(frozen=True, slots=True)
class BufferAnalysis:
    """A buffered geometry and its area."""

    geometry: Geometry
    area_m2: float
    radius: float
    units: str

    def to_dict(self) -> BufferPayload:
        return {
            "geometry": self.geometry.to_geojson(),
            "area": self.area_m2,
            "units": "square meters",
        }
