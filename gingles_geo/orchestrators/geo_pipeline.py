"""Engine entry points for alignment and compactness jobs.

Coordinates the activities for one caller request:

1. Ingest - validate raw GeoJSON into the internal model
2. Index - fan out H3 indexing per feature (thread pool, batched)
3. Assemble - build crosswalk entries and quality metrics
4. Report - attach coverage warnings to the result and log them

Compactness requests skip indexing and score each district directly.

Every entry point stamps the caller's ``correlation_id`` onto raised
engine errors. Failures that escape the activities as anything other
than a ``GeoEngineError`` are wrapped in the stage's typed error so the
caller only ever sees the engine taxonomy.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import TYPE_CHECKING

from gingles_geo.activities.build_crosswalk import build_crosswalk
from gingles_geo.activities.calculate_compactness import (
    calculate_compactness,
    calculate_compactness_many,
)
from gingles_geo.activities.index_cells import validate_resolution
from gingles_geo.activities.ingest_geometry import (
    parse_feature_collection,
    validate_geometry,
)
from gingles_geo.activities.quality_metrics import coverage_warnings
from gingles_geo.core.config import EngineConfig
from gingles_geo.core.exceptions import (
    AlignmentComputationError,
    CompactnessComputationError,
    GeoEngineError,
    SpatialOperationError,
)
from gingles_geo.spatial import primitives

if TYPE_CHECKING:
    from collections.abc import Callable

    from gingles_geo.models.compactness import CompactnessResult
    from gingles_geo.models.crosswalk import CrosswalkResult
    from gingles_geo.models.geometry import Geometry
    from gingles_geo.models.spatial import BufferAnalysis, IntersectionAnalysis

logger = logging.getLogger("gingles_geo.orchestrators.geo_pipeline")


# ---------------------------------------------------------------------------
# Alignment
# ---------------------------------------------------------------------------


def align_feature_collections(
    source_raw: object,
    target_raw: object,
    resolution: int | None = None,
    source_id_key: str | None = None,
    target_id_key: str | None = None,
    *,
    config: EngineConfig | None = None,
    should_cancel: Callable[[], bool] | None = None,
    on_progress: Callable[[str, float], None] | None = None,
    correlation_id: str = "",
) -> CrosswalkResult:
    """Align two GeoJSON feature collections through a shared H3 grid.

    Args:
        source_raw: Source FeatureCollection (or list of features).
        target_raw: Target FeatureCollection (or list of features).
        resolution: H3 resolution; defaults to ``config.default_resolution``.
        source_id_key: Source id property; defaults to ``config.source_id_key``.
        target_id_key: Target id property; defaults to ``config.target_id_key``.
        config: Engine configuration; defaults to ``EngineConfig()``.
        should_cancel: Polled between features; ``True`` aborts the job.
        on_progress: Receives ``(phase, fraction)`` ticks.
        correlation_id: Caller job identifier stamped onto errors.

    Returns:
        The complete ``CrosswalkResult``, carrying any coverage warnings.

    Raises:
        InvalidGeometryError: If either collection is malformed.
        InvalidResolutionError: If the resolution is outside ``[0, 15]``.
        AlignmentComputationError: On an internal numeric failure.
        AlignmentCancelledError: If ``should_cancel`` fires.
    """
    config = config or EngineConfig()
    resolution = config.default_resolution if resolution is None else resolution
    source_id_key = source_id_key or config.source_id_key
    target_id_key = target_id_key or config.target_id_key

    logger.info(
        "Alignment started | resolution=%s | source_key=%s | target_key=%s | correlation_id=%s",
        resolution,
        source_id_key,
        target_id_key,
        correlation_id,
    )

    try:
        validate_resolution(resolution)
        source_set = parse_feature_collection(source_raw, id_key=source_id_key)
        target_set = parse_feature_collection(target_raw, id_key=target_id_key)
        if on_progress is not None:
            on_progress("ingest", 1.0)

        result = build_crosswalk(
            source_set,
            target_set,
            resolution,
            max_workers=config.max_workers,
            batch_size=config.index_batch_size,
            weight_tolerance=config.weight_tolerance,
            should_cancel=should_cancel,
            on_progress=on_progress,
        )
    except GeoEngineError as exc:
        _stamp(exc, correlation_id)
        logger.error(
            "Alignment failed | stage=%s | code=%s | error=%s | correlation_id=%s",
            exc.stage,
            exc.code,
            exc.message,
            correlation_id,
        )
        raise
    except Exception as exc:
        msg = f"Unexpected alignment failure: {exc}"
        logger.exception("%s | correlation_id=%s", msg, correlation_id)
        raise AlignmentComputationError(msg, correlation_id=correlation_id) from exc

    warnings = coverage_warnings(result.quality_metrics, min_coverage=config.min_coverage)
    result = replace(result, warnings=warnings)
    logger.info(
        "Alignment finished | entries=%d | coverage=%.4f | accuracy=%.4f | correlation_id=%s",
        len(result.entries),
        result.quality_metrics.coverage,
        result.quality_metrics.accuracy,
        correlation_id,
    )
    return result


# ---------------------------------------------------------------------------
# Compactness
# ---------------------------------------------------------------------------


def measure_compactness(raw_geometry: object, *, correlation_id: str = "") -> CompactnessResult:
    """Score one district geometry (raw GeoJSON geometry mapping)."""
    try:
        geometry = validate_geometry(raw_geometry, context="district geometry")
        return calculate_compactness(geometry)
    except GeoEngineError as exc:
        _stamp(exc, correlation_id)
        raise
    except Exception as exc:
        msg = f"Unexpected compactness failure: {exc}"
        logger.exception("%s | correlation_id=%s", msg, correlation_id)
        raise CompactnessComputationError(msg, correlation_id=correlation_id) from exc


def measure_plan_compactness(
    raw_districts: object,
    *,
    id_key: str | None = None,
    config: EngineConfig | None = None,
    correlation_id: str = "",
) -> dict[str, CompactnessResult]:
    """Score every district of a plan.

    ``raw_districts`` is either a mapping of district id to GeoJSON
    geometry, or a FeatureCollection whose features carry the district
    id under ``id_key`` (default ``config.target_id_key``). Features
    sharing an id are dissolved into one district; features without an
    id are skipped.
    """
    config = config or EngineConfig()
    try:
        if isinstance(raw_districts, Mapping) and "type" not in raw_districts:
            districts: dict[str, Geometry] = {
                str(district_id): validate_geometry(raw, context=f"district '{district_id}'")
                for district_id, raw in raw_districts.items()
            }
        else:
            districts = _districts_from_features(raw_districts, id_key or config.target_id_key)
        results = calculate_compactness_many(districts)
    except GeoEngineError as exc:
        _stamp(exc, correlation_id)
        raise
    except Exception as exc:
        msg = f"Unexpected compactness failure: {exc}"
        logger.exception("%s | correlation_id=%s", msg, correlation_id)
        raise CompactnessComputationError(msg, correlation_id=correlation_id) from exc

    logger.info(
        "Plan compactness measured | districts=%d | correlation_id=%s",
        len(results),
        correlation_id,
    )
    return results


def _districts_from_features(raw: object, id_key: str) -> dict[str, Geometry]:
    feature_set = parse_feature_collection(raw, id_key=id_key)
    grouped: dict[str, list[Geometry]] = {}
    for feature in feature_set.identified():
        district_id = str(feature.feature_id)
        grouped.setdefault(district_id, []).append(feature.geometry)
    return {
        district_id: parts[0] if len(parts) == 1 else primitives.union(parts)
        for district_id, parts in grouped.items()
    }


# ---------------------------------------------------------------------------
# Kernel passthroughs
# ---------------------------------------------------------------------------


def measure_buffer(
    raw_geometry: object,
    radius: float,
    units: str = "meters",
    *,
    config: EngineConfig | None = None,
    correlation_id: str = "",
) -> BufferAnalysis:
    """Validate, buffer, and report the buffered area."""
    config = config or EngineConfig()
    try:
        geometry = validate_geometry(raw_geometry)
        return primitives.analyze_buffer(
            geometry, radius, units, quad_segs=config.buffer_quad_segs
        )
    except GeoEngineError as exc:
        _stamp(exc, correlation_id)
        raise
    except Exception as exc:
        msg = f"Unexpected buffer failure: {exc}"
        logger.exception("%s | correlation_id=%s", msg, correlation_id)
        raise SpatialOperationError(msg, correlation_id=correlation_id) from exc


def measure_intersection(
    raw_first: object, raw_second: object, *, correlation_id: str = ""
) -> IntersectionAnalysis:
    """Validate two geometries and report their shared area."""
    try:
        first = validate_geometry(raw_first, context="first geometry")
        second = validate_geometry(raw_second, context="second geometry")
        return primitives.analyze_intersection(first, second)
    except GeoEngineError as exc:
        _stamp(exc, correlation_id)
        raise
    except Exception as exc:
        msg = f"Unexpected intersection failure: {exc}"
        logger.exception("%s | correlation_id=%s", msg, correlation_id)
        raise SpatialOperationError(msg, correlation_id=correlation_id) from exc


def _stamp(exc: GeoEngineError, correlation_id: str) -> None:
    if correlation_id and not exc.correlation_id:
        exc.correlation_id = correlation_id
