"""Data model for district compactness scores.

The three scores are dimensionless and clamped to ``[0, 1]`` (1.0 is
maximally compact). Area and perimeter are returned unclamped in
square metres and metres, measured in the local planar projection, so
callers can audit the scores.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gingles_geo.models.contracts import CompactnessPayload


@dataclass(frozen=True, slots=True)
class CompactnessResult:
    """Compactness scores for one district geometry.

    Attributes:
        polsby_popper: ``4πA / P²``.
        reock: Area over the area of the minimum enclosing circle.
        convex_hull_ratio: Area over the area of the convex hull.
        area_m2: Planar area in square metres.
        perimeter_m: Planar perimeter in metres (holes included).
    """

    polsby_popper: float
    reock: float
    convex_hull_ratio: float
    area_m2: float
    perimeter_m: float

    def to_dict(self) -> CompactnessPayload:
        return {
            "polsby_popper": self.polsby_popper,
            "reock": self.reock,
            "convex_hull_ratio": self.convex_hull_ratio,
            "area": self.area_m2,
            "perimeter": self.perimeter_m,
        }
