"""Geometry ingestion activity: validation at the engine boundary.

Normalizes GeoJSON geometry, features and feature collections into the
internal model, rejecting malformed input with ``InvalidGeometryError``.

The pipeline is split into focused stages:
- **_normalization**: raw position/ring arrays → ``(lon, lat)`` tuples
- **_validation**: WGS 84 bounds, ring closure and length, topology report

Supported geometry: Point, Polygon (with holes), MultiPolygon.
Degenerate but well-formed geometry (zero-area rings) is accepted and
flows through; downstream activities return zero-valued metrics for it.
Topology problems (self-intersection) are detected and logged, never
repaired.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from gingles_geo.activities.ingest_geometry._constants import (
    MIN_RING_POSITIONS,
    SUPPORTED_GEOMETRY_TYPES,
)
from gingles_geo.activities.ingest_geometry._normalization import (
    polygon_rings,
    position_to_tuple,
)
from gingles_geo.activities.ingest_geometry._validation import (
    describe_topology,
    validate_coordinate,
    validate_ring,
)
from gingles_geo.core.constants import DEFAULT_ID_KEY
from gingles_geo.core.exceptions import InvalidCoordinateError, InvalidGeometryError
from gingles_geo.models.feature import Feature, FeatureSet, read_feature_id
from gingles_geo.models.geometry import (
    Geometry,
    MultiPolygonGeometry,
    PointGeometry,
    PolygonGeometry,
)

logger = logging.getLogger("gingles_geo.activities.ingest_geometry")

__all__ = [
    "MIN_RING_POSITIONS",
    "SUPPORTED_GEOMETRY_TYPES",
    "InvalidCoordinateError",
    "InvalidGeometryError",
    "describe_topology",
    "parse_feature",
    "parse_feature_collection",
    "validate_geometry",
]


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


def validate_geometry(raw: object, *, context: str = "geometry") -> Geometry:
    """Validate a GeoJSON geometry and convert it to the internal model.

    Args:
        raw: A GeoJSON geometry mapping with ``type`` and ``coordinates``.
        context: Label used in error messages (e.g. ``"feature 3"``).

    Returns:
        A ``PointGeometry``, ``PolygonGeometry`` or ``MultiPolygonGeometry``.

    Raises:
        InvalidGeometryError: If the geometry is missing, of an
            unsupported type, or has malformed rings.
        InvalidCoordinateError: If any coordinate is non-numeric,
            non-finite or outside WGS 84 bounds.
    """
    if not isinstance(raw, Mapping):
        msg = f"Expected a GeoJSON geometry object in {context}, got {type(raw).__name__}"
        raise InvalidGeometryError(msg)

    geom_type = raw.get("type")
    if geom_type not in SUPPORTED_GEOMETRY_TYPES:
        msg = (
            f"Unsupported geometry type {geom_type!r} in {context}; "
            f"expected one of {sorted(SUPPORTED_GEOMETRY_TYPES)}"
        )
        raise InvalidGeometryError(msg)

    if "coordinates" not in raw:
        msg = f"{geom_type} in {context} has no coordinates"
        raise InvalidGeometryError(msg)
    coordinates = raw["coordinates"]

    if geom_type == "Point":
        coord = position_to_tuple(coordinates, context)
        validate_coordinate(coord, context)
        return PointGeometry(coord)

    if geom_type == "Polygon":
        return _validate_polygon(coordinates, context)

    if not isinstance(coordinates, list | tuple) or not coordinates:
        msg = f"MultiPolygon in {context} must contain at least one polygon"
        raise InvalidGeometryError(msg)
    return MultiPolygonGeometry(
        [
            _validate_polygon(polygon, f"{context}, polygon {idx}")
            for idx, polygon in enumerate(coordinates)
        ]
    )


def _validate_polygon(coordinates: object, context: str) -> PolygonGeometry:
    rings = polygon_rings(coordinates, context)
    for idx, ring in enumerate(rings):
        validate_ring(ring, f"{context}, ring {idx}")
    return PolygonGeometry(exterior=rings[0], interiors=rings[1:])


# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------


def parse_feature(raw: object, *, id_key: str = DEFAULT_ID_KEY, index: int = 0) -> Feature:
    """Validate a GeoJSON feature.

    The identifier is read from ``properties[id_key]``; a missing or blank
    value leaves ``feature_id`` as ``None`` rather than failing.

    Raises:
        InvalidGeometryError: If the feature or its geometry is malformed.
    """
    context = f"feature {index}"
    if not isinstance(raw, Mapping):
        msg = f"Expected a GeoJSON Feature object for {context}, got {type(raw).__name__}"
        raise InvalidGeometryError(msg)

    properties = raw.get("properties") or {}
    if not isinstance(properties, Mapping):
        msg = f"properties of {context} must be an object, got {type(properties).__name__}"
        raise InvalidGeometryError(msg)
    properties = {str(k): v for k, v in properties.items()}

    feature_id = read_feature_id(properties, id_key)
    if feature_id is not None:
        context = f"feature {index} ({id_key}={feature_id})"

    geometry = validate_geometry(raw.get("geometry"), context=context)

    problem = describe_topology(geometry)
    if problem:
        logger.warning("Invalid topology in %s: %s", context, problem)

    return Feature(
        geometry=geometry,
        properties=properties,
        feature_id=feature_id,
        feature_index=index,
    )


def parse_feature_collection(raw: object, *, id_key: str = DEFAULT_ID_KEY) -> FeatureSet:
    """Validate a GeoJSON FeatureCollection (or a bare list of features).

    All features must validate; the first malformed feature aborts the
    whole collection so no partial set reaches the crosswalk builder.

    Raises:
        InvalidGeometryError: If the collection or any feature is malformed.
    """
    if isinstance(raw, Mapping):
        if raw.get("type") != "FeatureCollection":
            msg = f"Expected a FeatureCollection, got type {raw.get('type')!r}"
            raise InvalidGeometryError(msg)
        raw_features = raw.get("features")
    else:
        raw_features = raw

    if not isinstance(raw_features, list | tuple):
        msg = f"Feature collection must hold a list of features, got {type(raw_features).__name__}"
        raise InvalidGeometryError(msg)

    features = [
        parse_feature(item, id_key=id_key, index=idx) for idx, item in enumerate(raw_features)
    ]
    feature_set = FeatureSet(features=features, id_key=id_key)

    if feature_set.unidentified_count:
        logger.warning(
            "%d of %d feature(s) have no '%s' property and will not be aligned",
            feature_set.unidentified_count,
            len(feature_set),
            id_key,
        )
    logger.info(
        "Ingested feature collection | features=%d | id_key=%s", len(feature_set), id_key
    )
    return feature_set
