"""Data models and schemas.

Defines the data structures used throughout the engine:
- Geometry: Point, Polygon and MultiPolygon in WGS 84
- Feature / FeatureSet: Identified geometry with properties
- CrosswalkResult: Weighted H3 crosswalk with quality metrics
- CompactnessResult: Per-district compactness scores
- AlignmentRecord / CompactnessRecord: Persisted JSON schemas
"""

from gingles_geo.models.compactness import CompactnessResult
from gingles_geo.models.crosswalk import (
    CrosswalkEntry,
    CrosswalkPair,
    CrosswalkResult,
    QualityMetrics,
)
from gingles_geo.models.feature import Feature, FeatureSet
from gingles_geo.models.geometry import (
    Geometry,
    MultiPolygonGeometry,
    PointGeometry,
    PolygonGeometry,
)

__all__ = [
    "CompactnessResult",
    "CrosswalkEntry",
    "CrosswalkPair",
    "CrosswalkResult",
    "Feature",
    "FeatureSet",
    "Geometry",
    "MultiPolygonGeometry",
    "PointGeometry",
    "PolygonGeometry",
    "QualityMetrics",
]
