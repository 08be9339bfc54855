"""H3 indexing activity.

Converts validated geometry into the set of H3 cells it covers at a
caller-chosen resolution. Cells are held as packed 64-bit integers so
set membership and "same cell" comparisons are exact and cheap; they
are rendered as hex strings only at the output boundary.

Polygons are filled directly on the hexagonal lattice (H3
polygon-to-cells, a cell is kept when its centre lies inside the
polygon). A non-degenerate polygon part too small to contain any cell
centre falls back to the cell holding its centroid, so a real footprint
is never empty. Zero-area parts contribute no cells.

Feature collections are indexed per feature with a bounded thread-pool
fan-out; the caller's cancellation check is polled between features.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from gingles_geo.core.constants import MAX_RESOLUTION, MIN_RESOLUTION
from gingles_geo.core.exceptions import AlignmentCancelledError, InvalidResolutionError
from gingles_geo.models.geometry import Geometry, PointGeometry, PolygonGeometry, polygon_parts

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from gingles_geo.models.feature import Feature

logger = logging.getLogger("gingles_geo.activities.index_cells")

CellSet = frozenset[int]

DEFAULT_BATCH_SIZE = 64


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def validate_resolution(resolution: object) -> int:
    """Return ``resolution`` if it is an integer in ``[0, 15]``.

    Raises:
        InvalidResolutionError: If it is not an int (bools excluded) or is
            out of range.
    """
    if isinstance(resolution, bool) or not isinstance(resolution, int):
        msg = f"H3 resolution must be an integer, got {type(resolution).__name__}"
        raise InvalidResolutionError(msg)
    if not MIN_RESOLUTION <= resolution <= MAX_RESOLUTION:
        msg = (
            f"H3 resolution must be between {MIN_RESOLUTION} and {MAX_RESOLUTION}, "
            f"got {resolution}"
        )
        raise InvalidResolutionError(msg)
    return resolution


# ---------------------------------------------------------------------------
# Single geometry
# ---------------------------------------------------------------------------


def cells_covering(geometry: Geometry, resolution: int) -> CellSet:
    """Return the H3 cells covering ``geometry`` at ``resolution``.

    Raises:
        InvalidResolutionError: If ``resolution`` is outside ``[0, 15]``.
    """
    from h3.api import basic_int as h3

    validate_resolution(resolution)

    if isinstance(geometry, PointGeometry):
        lon, lat = geometry.coordinates
        return frozenset({h3.latlng_to_cell(lat, lon, resolution)})

    cells: set[int] = set()
    for polygon in polygon_parts(geometry):
        cells.update(_polygon_cells(polygon, resolution))
    return frozenset(cells)


def _polygon_cells(polygon: PolygonGeometry, resolution: int) -> set[int]:
    from h3 import LatLngPoly
    from h3.api import basic_int as h3

    shape = polygon.to_shapely()
    if shape.area == 0:
        return set()

    # H3 takes open loops of (lat, lng)
    outer = [(lat, lon) for lon, lat in polygon.exterior[:-1]]
    holes = [[(lat, lon) for lon, lat in ring[:-1]] for ring in polygon.interiors]
    cells = set(h3.polygon_to_cells(LatLngPoly(outer, *holes), resolution))
    if cells:
        return cells

    center = shape.centroid
    logger.debug(
        "Polygon smaller than one cell at resolution %d, using centroid cell (%.6f, %.6f)",
        resolution,
        center.x,
        center.y,
    )
    return {h3.latlng_to_cell(center.y, center.x, resolution)}


# ---------------------------------------------------------------------------
# Feature collections
# ---------------------------------------------------------------------------


def index_features(
    features: Sequence[Feature],
    resolution: int,
    *,
    max_workers: int = 1,
    batch_size: int = DEFAULT_BATCH_SIZE,
    should_cancel: Callable[[], bool] | None = None,
    on_feature_done: Callable[[int, int], None] | None = None,
) -> dict[str, CellSet]:
    """Index every identified feature, keyed by feature id.

    Features sharing an id (a multipart district split across records)
    have their cell sets unioned. Features without an id are skipped.

    Args:
        features: Features to index, in order.
        resolution: H3 resolution.
        max_workers: Thread pool size; 1 indexes serially.
        batch_size: Features submitted per fan-out batch.
        should_cancel: Polled between features; return ``True`` to abort.
        on_feature_done: Called with ``(done, total)`` after each feature.

    Returns:
        Mapping of feature id to cell set, in first-seen id order.

    Raises:
        InvalidResolutionError: If ``resolution`` is outside ``[0, 15]``.
        AlignmentCancelledError: If ``should_cancel`` returns ``True``.
    """
    validate_resolution(resolution)
    identified = [f for f in features if f.feature_id is not None]
    total = len(identified)
    index: dict[str, set[int]] = {}

    def _collect(feature: Feature, cells: CellSet, done: int) -> None:
        index.setdefault(feature.feature_id, set()).update(cells)  # type: ignore[arg-type]
        if on_feature_done is not None:
            on_feature_done(done, total)

    done = 0
    if max_workers <= 1:
        for feature in identified:
            _check_cancelled(should_cancel)
            done += 1
            _collect(feature, cells_covering(feature.geometry, resolution), done)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for batch in _batched(identified, batch_size):
                _check_cancelled(should_cancel)
                results = executor.map(lambda f: cells_covering(f.geometry, resolution), batch)
                for feature, cells in zip(batch, results, strict=True):
                    done += 1
                    _collect(feature, cells, done)
                    _check_cancelled(should_cancel)

    logger.info(
        "Indexed features | features=%d | ids=%d | resolution=%d | workers=%d",
        total,
        len(index),
        resolution,
        max_workers,
    )
    return {feature_id: frozenset(cells) for feature_id, cells in index.items()}


def _check_cancelled(should_cancel: Callable[[], bool] | None) -> None:
    if should_cancel is not None and should_cancel():
        msg = "Indexing cancelled by caller; partial results discarded"
        raise AlignmentCancelledError(msg, stage="index_cells")


def _batched(items: Sequence[Feature], size: int) -> Iterable[Sequence[Feature]]:
    for start in range(0, len(items), max(1, size)):
        yield items[start : start + size]


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------


def cells_area_m2(cells: Iterable[int]) -> float:
    """Total area of a cell set in square metres."""
    from h3.api import basic_int as h3

    return sum(h3.cell_area(cell, unit="m^2") for cell in cells)


def string_to_cell(cell_id: str) -> int:
    """Parse a canonical H3 hex string into a packed cell."""
    from h3.api import basic_int as h3

    return h3.str_to_int(cell_id)
