"""Canonical payload contracts for the engine boundary.

Every dict the engine accepts from, or hands back to, the surrounding
service is described here as a ``TypedDict``. Input contracts mirror
GeoJSON; output contracts keep the field names the persistence layer
and HTTP responses already use (``h3_index``, ``quality_metrics``).

Design notes:
- ``TypedDict`` rather than ``dataclass`` because the surrounding layer
  stores and transmits plain JSON dicts.
- Input contracts are documentation only: ingestion validates every
  field at runtime and never trusts the static shape.
"""

from __future__ import annotations

from typing import TypedDict

# ---------------------------------------------------------------------------
# GeoJSON input
# ---------------------------------------------------------------------------


class GeometryPayload(TypedDict):
    """GeoJSON geometry (Point, Polygon or MultiPolygon)."""

    type: str
    coordinates: list


class FeaturePayload(TypedDict, total=False):
    """GeoJSON feature. ``id`` is informational; ids come from properties."""

    type: str
    id: str | None
    properties: dict[str, object]
    geometry: GeometryPayload


class FeatureCollectionPayload(TypedDict):
    """GeoJSON feature collection."""

    type: str
    features: list[FeaturePayload]


# ---------------------------------------------------------------------------
# Alignment output
# ---------------------------------------------------------------------------


class CrosswalkEntryPayload(TypedDict):
    """Serialised ``CrosswalkEntry``."""

    source_id: str
    target_id: str
    h3_index: str
    weight: float


class QualityMetricsPayload(TypedDict):
    """Serialised ``QualityMetrics`` (fractions in ``[0, 1]``)."""

    coverage: float
    accuracy: float
    resolution: int


class CrosswalkPayload(TypedDict):
    """Serialised ``CrosswalkResult``."""

    crosswalk: list[CrosswalkEntryPayload]
    quality_metrics: QualityMetricsPayload


# ---------------------------------------------------------------------------
# Compactness / kernel output
# ---------------------------------------------------------------------------


class CompactnessPayload(TypedDict):
    """Serialised ``CompactnessResult`` (area m², perimeter m)."""

    polsby_popper: float
    reock: float
    convex_hull_ratio: float
    area: float
    perimeter: float


class IntersectionPayload(TypedDict):
    """Serialised ``IntersectionAnalysis``."""

    geometry: GeometryPayload | None
    area: float
    overlap_fraction: float


class BufferPayload(TypedDict):
    """Serialised ``BufferAnalysis``."""

    geometry: GeometryPayload
    area: float
    units: str
