"""Shared pytest fixtures for the gingles-geo test suite."""

from __future__ import annotations

import pytest

from gingles_geo.models.geometry import PolygonGeometry
from tests.geo_builders import (
    ORIGIN_LAT,
    ORIGIN_LON,
    collection,
    feature,
    offset_lon,
    rectangle_ring,
    square_geojson,
    square_polygon,
)

# ---------------------------------------------------------------------------
# Geometry fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def km_square_geojson() -> dict[str, object]:
    """A 1 km x 1 km square in central Los Angeles."""
    return square_geojson(ORIGIN_LON, ORIGIN_LAT, 1000.0)


@pytest.fixture()
def km_square() -> PolygonGeometry:
    """The same 1 km square as an internal geometry."""
    return square_polygon(ORIGIN_LON, ORIGIN_LAT, 1000.0)


@pytest.fixture()
def collinear_polygon_geojson() -> dict[str, object]:
    """A closed, zero-area ring whose vertices all lie on one line."""
    return {
        "type": "Polygon",
        "coordinates": [
            [
                [ORIGIN_LON, ORIGIN_LAT],
                [ORIGIN_LON + 0.01, ORIGIN_LAT],
                [ORIGIN_LON + 0.02, ORIGIN_LAT],
                [ORIGIN_LON, ORIGIN_LAT],
            ]
        ],
    }


@pytest.fixture()
def adjacent_halves() -> dict[str, object]:
    """Two 500 m x 1 km precincts splitting the 1 km square west/east."""
    east_lon = offset_lon(ORIGIN_LON, ORIGIN_LAT, 500.0)
    west = {"type": "Polygon", "coordinates": [rectangle_ring(ORIGIN_LON, ORIGIN_LAT, 500, 1000)]}
    east = {"type": "Polygon", "coordinates": [rectangle_ring(east_lon, ORIGIN_LAT, 500, 1000)]}
    return collection(feature(west, id="west"), feature(east, id="east"))
