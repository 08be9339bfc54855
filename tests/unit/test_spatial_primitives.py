"""Tests for the spatial primitives kernel.

Covers:
- Planar measurement in the local UTM projection (area, perimeter, distance)
- Centroid, bounds and projection choice
- Buffer (units, zero radius, parameter errors)
- Intersection, union, convex hull, minimum enclosing circle
- Composite analyses and their payloads
"""

from __future__ import annotations

import math

import pytest

from gingles_geo.core.exceptions import SpatialOperationError, SpatialParameterError
from gingles_geo.models.geometry import (
    MultiPolygonGeometry,
    PointGeometry,
    PolygonGeometry,
)
from gingles_geo.spatial import primitives
from gingles_geo.spatial.projection import LocalProjection, combined_bounds, utm_crs_for
from tests.geo_builders import (
    ORIGIN_LAT,
    ORIGIN_LON,
    offset_lon,
    rectangle_ring,
    square_polygon,
)

CENTRE = PointGeometry((ORIGIN_LON, ORIGIN_LAT))


def _rectangle(lon: float, lat: float, width_m: float, height_m: float) -> PolygonGeometry:
    ring = rectangle_ring(lon, lat, width_m, height_m)
    return PolygonGeometry(exterior=[(x, y) for x, y in ring])


class TestProjection:
    """UTM zone selection."""

    def test_los_angeles_zone_11n(self) -> None:
        assert utm_crs_for(-118.25, 34.05) == "EPSG:32611"

    def test_southern_hemisphere(self) -> None:
        assert utm_crs_for(151.2, -33.9) == "EPSG:32756"

    def test_antimeridian_clamped(self) -> None:
        assert utm_crs_for(180.0, 10.0) == "EPSG:32660"
        assert utm_crs_for(-180.0, 10.0) == "EPSG:32601"

    def test_combined_bounds(self) -> None:
        assert combined_bounds((0, 0, 1, 1), (-1, 0.5, 0.5, 2)) == (-1, 0, 1, 2)

    def test_projection_shared_by_pair(self, km_square: PolygonGeometry) -> None:
        other = square_polygon(ORIGIN_LON + 0.02, ORIGIN_LAT, 100)
        assert primitives.projection_for(km_square, other).crs == "EPSG:32611"

    def test_round_trip_point(self) -> None:
        projection = LocalProjection.for_crs("EPSG:32611")
        projected = projection.forward(CENTRE.to_shapely())
        lon, lat = projection.inverse_point(projected.x, projected.y)
        assert (lon, lat) == pytest.approx((ORIGIN_LON, ORIGIN_LAT), abs=1e-9)


class TestMeasurement:
    """Area, perimeter, centroid, distance and bounds."""

    def test_square_area(self, km_square: PolygonGeometry) -> None:
        assert primitives.area(km_square) == pytest.approx(1_000_000, rel=0.01)

    def test_square_perimeter(self, km_square: PolygonGeometry) -> None:
        assert primitives.perimeter(km_square) == pytest.approx(4000, rel=0.01)

    def test_point_has_no_area_or_perimeter(self) -> None:
        assert primitives.area(CENTRE) == 0.0
        assert primitives.perimeter(CENTRE) == 0.0

    def test_hole_reduces_area(self, km_square: PolygonGeometry) -> None:
        hole = square_polygon(ORIGIN_LON + 0.002, ORIGIN_LAT + 0.002, 200).exterior
        holed = PolygonGeometry(exterior=km_square.exterior, interiors=[hole])
        assert primitives.area(holed) == pytest.approx(
            primitives.area(km_square) - 40_000, rel=0.01
        )
        assert primitives.perimeter(holed) > primitives.perimeter(km_square)

    def test_multipolygon_area_sums(self) -> None:
        a = square_polygon(ORIGIN_LON, ORIGIN_LAT, 100)
        b = square_polygon(ORIGIN_LON + 0.01, ORIGIN_LAT, 100)
        multi = MultiPolygonGeometry([a, b])
        assert primitives.area(multi) == pytest.approx(
            primitives.area(a) + primitives.area(b), rel=1e-6
        )

    def test_collinear_polygon_zero_area(self) -> None:
        flat = PolygonGeometry(exterior=[(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (0.0, 0.0)])
        assert primitives.area(flat) == 0.0

    def test_bounds(self, km_square: PolygonGeometry) -> None:
        min_lon, min_lat, max_lon, max_lat = primitives.bounds(km_square)
        assert (min_lon, min_lat) == (ORIGIN_LON, ORIGIN_LAT)
        assert max_lon > min_lon
        assert max_lat > min_lat

    def test_point_bounds(self) -> None:
        assert primitives.bounds(CENTRE) == (ORIGIN_LON, ORIGIN_LAT, ORIGIN_LON, ORIGIN_LAT)

    def test_centroid_of_square(self, km_square: PolygonGeometry) -> None:
        min_lon, min_lat, max_lon, max_lat = primitives.bounds(km_square)
        centre = primitives.centroid(km_square)
        assert centre.coordinates == pytest.approx(
            ((min_lon + max_lon) / 2, (min_lat + max_lat) / 2), abs=1e-5
        )

    def test_centroid_of_point_is_point(self) -> None:
        assert primitives.centroid(CENTRE) is CENTRE

    def test_centroid_of_degenerate_polygon(self) -> None:
        flat = PolygonGeometry(exterior=[(0.0, 0.0), (3.0, 0.0), (6.0, 0.0), (0.0, 0.0)])
        centre = primitives.centroid(flat)
        assert centre.coordinates == pytest.approx((3.0, 0.0), abs=1e-6)

    def test_distance_between_squares(self) -> None:
        a = square_polygon(ORIGIN_LON, ORIGIN_LAT, 100)
        b = square_polygon(offset_lon(ORIGIN_LON, ORIGIN_LAT, 600), ORIGIN_LAT, 100)
        assert primitives.distance(a, b) == pytest.approx(500, rel=0.02)

    def test_distance_zero_when_overlapping(self, km_square: PolygonGeometry) -> None:
        assert primitives.distance(km_square, primitives.centroid(km_square)) == 0.0


class TestBuffer:
    """Buffer radius handling and units."""

    def test_point_buffer_area(self) -> None:
        buffered = primitives.buffer(CENTRE, 500, "meters")
        assert isinstance(buffered, PolygonGeometry)
        assert primitives.area(buffered) == pytest.approx(math.pi * 500**2, rel=0.01)

    def test_kilometre_units(self) -> None:
        buffered = primitives.buffer(CENTRE, 1, "kilometers")
        assert primitives.area(buffered) == pytest.approx(math.pi * 1000**2, rel=0.01)

    def test_mile_and_feet_units(self) -> None:
        miles = primitives.area(primitives.buffer(CENTRE, 0.1, "miles"))
        feet = primitives.area(primitives.buffer(CENTRE, 528, "feet"))
        assert miles == pytest.approx(feet, rel=0.01)

    def test_units_case_insensitive(self) -> None:
        assert primitives.area(primitives.buffer(CENTRE, 100, "Meters")) > 0

    def test_zero_radius_is_identity(self, km_square: PolygonGeometry) -> None:
        assert primitives.buffer(km_square, 0) is km_square

    def test_polygon_buffer_grows(self, km_square: PolygonGeometry) -> None:
        grown = primitives.buffer(km_square, 100)
        expected = primitives.area(km_square) + 4 * 1000 * 100 + math.pi * 100**2
        assert primitives.area(grown) == pytest.approx(expected, rel=0.02)

    def test_negative_radius_rejected(self) -> None:
        with pytest.raises(SpatialParameterError, match="must be >= 0"):
            primitives.buffer(CENTRE, -1)

    def test_unknown_units_rejected(self) -> None:
        with pytest.raises(SpatialParameterError, match="Unsupported buffer units"):
            primitives.buffer(CENTRE, 1, "furlongs")

    @pytest.mark.parametrize("radius", ["10", None, True])
    def test_non_numeric_radius_rejected(self, radius: object) -> None:
        with pytest.raises(SpatialParameterError, match="must be a number"):
            primitives.buffer(CENTRE, radius)  # type: ignore[arg-type]

    @pytest.mark.parametrize("radius", [math.inf, math.nan])
    def test_non_finite_radius_rejected(self, radius: float) -> None:
        with pytest.raises(SpatialParameterError, match="must be finite"):
            primitives.buffer(CENTRE, radius)

    def test_non_string_units_rejected(self) -> None:
        with pytest.raises(SpatialParameterError, match="units must be a string"):
            primitives.buffer(CENTRE, 10, None)  # type: ignore[arg-type]

    def test_quad_segs_controls_vertex_count(self) -> None:
        coarse = primitives.buffer(CENTRE, 100, quad_segs=2)
        fine = primitives.buffer(CENTRE, 100, quad_segs=16)
        assert len(coarse.exterior) < len(fine.exterior)


class TestIntersection:
    """Intersection semantics."""

    def test_half_overlap(self) -> None:
        a = _rectangle(ORIGIN_LON, ORIGIN_LAT, 1000, 1000)
        b = _rectangle(offset_lon(ORIGIN_LON, ORIGIN_LAT, 500), ORIGIN_LAT, 1000, 1000)
        shared = primitives.intersection(a, b)
        assert isinstance(shared, PolygonGeometry)
        assert primitives.area(shared) == pytest.approx(primitives.area(a) / 2, rel=0.01)

    def test_disjoint_is_none(self) -> None:
        a = square_polygon(ORIGIN_LON, ORIGIN_LAT, 100)
        b = square_polygon(ORIGIN_LON + 0.1, ORIGIN_LAT, 100)
        assert primitives.intersection(a, b) is None

    def test_shared_edge_is_none(self) -> None:
        a = PolygonGeometry(exterior=[(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0), (0.0, 0.0)])
        b = PolygonGeometry(exterior=[(1.0, 0.0), (2.0, 0.0), (2.0, 1.0), (1.0, 1.0), (1.0, 0.0)])
        assert primitives.intersection(a, b) is None

    def test_point_inside_polygon(self, km_square: PolygonGeometry) -> None:
        inside = primitives.centroid(km_square)
        shared = primitives.intersection(km_square, inside)
        assert isinstance(shared, PointGeometry)

    def test_analyze_half_overlap(self) -> None:
        a = _rectangle(ORIGIN_LON, ORIGIN_LAT, 1000, 1000)
        b = _rectangle(offset_lon(ORIGIN_LON, ORIGIN_LAT, 500), ORIGIN_LAT, 1000, 1000)
        analysis = primitives.analyze_intersection(a, b)
        assert analysis.overlap_fraction == pytest.approx(0.5, rel=0.01)
        assert analysis.area_m2 == pytest.approx(500_000, rel=0.01)

    def test_analyze_contained(self, km_square: PolygonGeometry) -> None:
        small = square_polygon(ORIGIN_LON + 0.001, ORIGIN_LAT + 0.001, 100)
        analysis = primitives.analyze_intersection(km_square, small)
        assert analysis.overlap_fraction == pytest.approx(1.0)

    def test_analyze_disjoint(self) -> None:
        a = square_polygon(ORIGIN_LON, ORIGIN_LAT, 100)
        b = square_polygon(ORIGIN_LON + 0.1, ORIGIN_LAT, 100)
        analysis = primitives.analyze_intersection(a, b)
        assert analysis.geometry is None
        assert analysis.area_m2 == 0.0
        assert analysis.overlap_fraction == 0.0
        assert analysis.to_dict() == {"geometry": None, "area": 0.0, "overlap_fraction": 0.0}


class TestUnionAndHull:
    """Union, convex hull and minimum enclosing circle."""

    def test_union_of_adjacent_halves(self) -> None:
        west = _rectangle(ORIGIN_LON, ORIGIN_LAT, 500, 1000)
        east = _rectangle(offset_lon(ORIGIN_LON, ORIGIN_LAT, 500), ORIGIN_LAT, 500, 1000)
        merged = primitives.union([west, east])
        assert isinstance(merged, PolygonGeometry)
        assert primitives.area(merged) == pytest.approx(
            primitives.area(west) + primitives.area(east), rel=1e-3
        )

    def test_union_of_disjoint_is_multipolygon(self) -> None:
        a = square_polygon(ORIGIN_LON, ORIGIN_LAT, 100)
        b = square_polygon(ORIGIN_LON + 0.1, ORIGIN_LAT, 100)
        assert isinstance(primitives.union([a, b]), MultiPolygonGeometry)

    def test_union_ignores_points(self, km_square: PolygonGeometry) -> None:
        merged = primitives.union([km_square, CENTRE])
        assert isinstance(merged, PolygonGeometry)

    def test_union_requires_polygon(self) -> None:
        with pytest.raises(SpatialParameterError, match="at least one Polygon"):
            primitives.union([CENTRE])

    def test_hull_of_l_shape_is_larger(self) -> None:
        l_shape = PolygonGeometry(
            exterior=[
                (0.0, 0.0),
                (0.02, 0.0),
                (0.02, 0.01),
                (0.01, 0.01),
                (0.01, 0.02),
                (0.0, 0.02),
                (0.0, 0.0),
            ]
        )
        hull = primitives.convex_hull(l_shape)
        assert hull is not None
        assert primitives.area(hull) > primitives.area(l_shape)

    def test_hull_of_convex_polygon_matches(self, km_square: PolygonGeometry) -> None:
        hull = primitives.convex_hull(km_square)
        assert hull is not None
        assert primitives.area(hull) == pytest.approx(primitives.area(km_square), rel=1e-9)

    def test_hull_of_point_and_collinear_is_none(self) -> None:
        flat = PolygonGeometry(exterior=[(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (0.0, 0.0)])
        assert primitives.convex_hull(CENTRE) is None
        assert primitives.convex_hull(flat) is None

    def test_enclosing_circle_of_square(self, km_square: PolygonGeometry) -> None:
        circle = primitives.minimum_enclosing_circle(km_square)
        side = math.sqrt(primitives.area(km_square))
        assert circle.radius_m == pytest.approx(side / math.sqrt(2), rel=0.01)
        assert circle.area_m2 == pytest.approx(math.pi * circle.radius_m**2)

    def test_enclosing_circle_centre_in_wgs84(self, km_square: PolygonGeometry) -> None:
        circle = primitives.minimum_enclosing_circle(km_square)
        centre = primitives.centroid(km_square)
        assert circle.center.coordinates == pytest.approx(centre.coordinates, abs=1e-5)

    def test_enclosing_circle_of_point(self) -> None:
        assert primitives.minimum_enclosing_circle(CENTRE).radius_m == pytest.approx(0.0)


class TestAnalysesAndErrors:
    """Buffer analysis payload and GEOS failure translation."""

    def test_analyze_buffer_payload(self) -> None:
        analysis = primitives.analyze_buffer(CENTRE, 250, "meters")
        payload = analysis.to_dict()
        assert payload["units"] == "square meters"
        assert payload["geometry"]["type"] == "Polygon"
        assert payload["area"] == pytest.approx(math.pi * 250**2, rel=0.01)
        assert analysis.radius == 250

    def test_geos_failure_translated(self) -> None:
        from shapely.errors import GEOSException

        def _boom() -> None:
            raise GEOSException("TopologyException: side location conflict")

        with pytest.raises(SpatialOperationError, match="GEOS union failed") as exc_info:
            primitives._run_geos("union", _boom)  # type: ignore[arg-type]
        assert exc_info.value.category == "permanent"
