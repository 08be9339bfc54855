"""Tests for the H3 indexing activity.

Covers:
- Resolution validation (0-15, integers only)
- Cell coverage of points, polygons, holes and multipolygons
- Small-polygon centroid fallback and zero-area parts
- Feature fan-out: duplicate ids, unidentified features, threading,
  cancellation and progress
"""

from __future__ import annotations

import pytest
from h3.api import basic_int as h3

from gingles_geo.activities.index_cells import (
    cells_area_m2,
    cells_covering,
    index_features,
    string_to_cell,
    validate_resolution,
)
from gingles_geo.core.exceptions import AlignmentCancelledError, InvalidResolutionError
from gingles_geo.models.crosswalk import cell_to_string
from gingles_geo.models.feature import Feature
from gingles_geo.models.geometry import (
    Geometry,
    MultiPolygonGeometry,
    PointGeometry,
    PolygonGeometry,
)
from tests.geo_builders import ORIGIN_LAT, ORIGIN_LON, square_polygon


def _features(*pairs: tuple[str | None, Geometry]) -> list[Feature]:
    return [
        Feature(geometry=geometry, feature_id=feature_id, feature_index=idx)
        for idx, (feature_id, geometry) in enumerate(pairs)
    ]


class TestResolutionValidation:
    """Resolution must be an integer in [0, 15]."""

    @pytest.mark.parametrize("resolution", [0, 9, 15])
    def test_valid(self, resolution: int) -> None:
        assert validate_resolution(resolution) == resolution

    @pytest.mark.parametrize("resolution", [-1, 16, 100])
    def test_out_of_range(self, resolution: int) -> None:
        with pytest.raises(InvalidResolutionError, match="between 0 and 15"):
            validate_resolution(resolution)

    @pytest.mark.parametrize("resolution", [9.0, "9", True, None])
    def test_not_an_integer(self, resolution: object) -> None:
        with pytest.raises(InvalidResolutionError, match="must be an integer"):
            validate_resolution(resolution)

    def test_error_metadata(self) -> None:
        with pytest.raises(InvalidResolutionError) as exc_info:
            validate_resolution(16)
        assert exc_info.value.stage == "index_cells"
        assert exc_info.value.code == "RESOLUTION_INVALID"
        assert exc_info.value.category == "validation"

    def test_cells_covering_validates(self, km_square: PolygonGeometry) -> None:
        with pytest.raises(InvalidResolutionError):
            cells_covering(km_square, 16)


class TestCellsCovering:
    """Single-geometry coverage."""

    def test_point_single_cell(self) -> None:
        cells = cells_covering(PointGeometry((ORIGIN_LON, ORIGIN_LAT)), 9)
        assert cells == frozenset({h3.latlng_to_cell(ORIGIN_LAT, ORIGIN_LON, 9)})

    def test_cells_are_at_requested_resolution(self, km_square: PolygonGeometry) -> None:
        cells = cells_covering(km_square, 9)
        assert cells
        assert {h3.get_resolution(cell) for cell in cells} == {9}

    def test_km_square_area_approximated(self, km_square: PolygonGeometry) -> None:
        """Cell area tracks polygon area; finer resolution tracks it better."""
        coarse = cells_area_m2(cells_covering(km_square, 9))
        fine = cells_area_m2(cells_covering(km_square, 10))
        assert 0.5e6 < coarse < 1.5e6
        assert 0.75e6 < fine < 1.25e6

    def test_finer_resolution_has_more_cells(self, km_square: PolygonGeometry) -> None:
        assert len(cells_covering(km_square, 10)) > len(cells_covering(km_square, 9))

    @pytest.mark.parametrize("resolution", range(16))
    def test_small_polygon_never_empty(self, resolution: int) -> None:
        """A real footprint always gets at least one cell (centroid fallback)."""
        small = square_polygon(ORIGIN_LON, ORIGIN_LAT, 50)
        assert len(cells_covering(small, resolution)) >= 1

    def test_tiny_polygon_gets_centroid_cell(self) -> None:
        small = square_polygon(ORIGIN_LON, ORIGIN_LAT, 20)
        cells = cells_covering(small, 5)
        assert len(cells) == 1
        (cell,) = cells
        assert h3.get_resolution(cell) == 5

    def test_zero_area_polygon_has_no_cells(self) -> None:
        flat = PolygonGeometry(
            exterior=[
                (ORIGIN_LON, ORIGIN_LAT),
                (ORIGIN_LON + 0.01, ORIGIN_LAT),
                (ORIGIN_LON + 0.02, ORIGIN_LAT),
                (ORIGIN_LON, ORIGIN_LAT),
            ]
        )
        assert cells_covering(flat, 9) == frozenset()

    def test_hole_excludes_cells(self) -> None:
        outer = square_polygon(ORIGIN_LON, ORIGIN_LAT, 2000)
        hole = square_polygon(ORIGIN_LON + 0.005, ORIGIN_LAT + 0.005, 1000)
        holed = PolygonGeometry(exterior=outer.exterior, interiors=[hole.exterior])
        full_cells = cells_covering(outer, 10)
        holed_cells = cells_covering(holed, 10)
        inside_hole = square_polygon(ORIGIN_LON + 0.006, ORIGIN_LAT + 0.006, 700)
        assert holed_cells < full_cells
        assert not holed_cells & cells_covering(inside_hole, 10)

    def test_multipolygon_is_union_of_parts(self) -> None:
        a = square_polygon(ORIGIN_LON, ORIGIN_LAT, 500)
        b = square_polygon(ORIGIN_LON + 0.05, ORIGIN_LAT, 500)
        multi = MultiPolygonGeometry([a, b])
        assert cells_covering(multi, 10) == cells_covering(a, 10) | cells_covering(b, 10)

    def test_deterministic(self, km_square: PolygonGeometry) -> None:
        assert cells_covering(km_square, 9) == cells_covering(km_square, 9)


class TestIndexFeatures:
    """Collection indexing."""

    def test_keyed_by_id(self) -> None:
        a = square_polygon(ORIGIN_LON, ORIGIN_LAT, 500)
        b = square_polygon(ORIGIN_LON + 0.05, ORIGIN_LAT, 500)
        index = index_features(_features(("a", a), ("b", b)), 10)
        assert list(index) == ["a", "b"]
        assert index["a"] == cells_covering(a, 10)

    def test_duplicate_ids_unioned(self) -> None:
        a = square_polygon(ORIGIN_LON, ORIGIN_LAT, 500)
        b = square_polygon(ORIGIN_LON + 0.05, ORIGIN_LAT, 500)
        index = index_features(_features(("d1", a), ("d1", b)), 10)
        assert list(index) == ["d1"]
        assert index["d1"] == cells_covering(a, 10) | cells_covering(b, 10)

    def test_unidentified_skipped(self, km_square: PolygonGeometry) -> None:
        index = index_features(_features((None, km_square), ("a", km_square)), 9)
        assert list(index) == ["a"]

    def test_threaded_matches_serial(self) -> None:
        features = _features(
            *[(f"f{i}", square_polygon(ORIGIN_LON + i * 0.01, ORIGIN_LAT, 300)) for i in range(7)]
        )
        serial = index_features(features, 10)
        threaded = index_features(features, 10, max_workers=3, batch_size=2)
        assert threaded == serial
        assert list(threaded) == list(serial)

    def test_progress_reported(self, km_square: PolygonGeometry) -> None:
        ticks: list[tuple[int, int]] = []
        index_features(
            _features(("a", km_square), ("b", km_square), (None, km_square)),
            9,
            on_feature_done=lambda done, total: ticks.append((done, total)),
        )
        assert ticks == [(1, 2), (2, 2)]

    def test_cancellation_serial(self, km_square: PolygonGeometry) -> None:
        done: list[int] = []
        with pytest.raises(AlignmentCancelledError) as exc_info:
            index_features(
                _features(*[(str(i), km_square) for i in range(5)]),
                9,
                should_cancel=lambda: len(done) >= 2,
                on_feature_done=lambda d, _total: done.append(d),
            )
        assert done == [1, 2]
        assert exc_info.value.stage == "index_cells"
        assert exc_info.value.category == "cancelled"

    def test_cancellation_threaded(self, km_square: PolygonGeometry) -> None:
        with pytest.raises(AlignmentCancelledError):
            index_features(
                _features(("a", km_square), ("b", km_square)),
                9,
                max_workers=2,
                should_cancel=lambda: True,
            )

    def test_cancellation_threaded_mid_batch(self, km_square: PolygonGeometry) -> None:
        done: list[int] = []
        index: dict[str, frozenset[int]] | None = None
        with pytest.raises(AlignmentCancelledError) as exc_info:
            index = index_features(
                _features(*[(str(i), km_square) for i in range(6)]),
                9,
                max_workers=2,
                batch_size=4,
                should_cancel=lambda: len(done) >= 2,
                on_feature_done=lambda d, _total: done.append(d),
            )
        assert index is None
        assert done == [1, 2]
        assert exc_info.value.stage == "index_cells"

    def test_empty_input(self) -> None:
        assert index_features([], 9) == {}


class TestCellHelpers:
    """Cell string conversion and area."""

    def test_string_round_trip(self) -> None:
        cell = h3.latlng_to_cell(ORIGIN_LAT, ORIGIN_LON, 9)
        text = cell_to_string(cell)
        assert text == h3.int_to_str(cell)
        assert string_to_cell(text) == cell

    def test_cells_area_matches_h3(self) -> None:
        cell = h3.latlng_to_cell(ORIGIN_LAT, ORIGIN_LON, 9)
        assert cells_area_m2([cell]) == pytest.approx(h3.cell_area(cell, unit="m^2"))
        assert cells_area_m2([]) == 0
