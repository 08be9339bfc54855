"""Crosswalk builder activity.

Builds a weighted mapping between two feature sets (e.g. census blocks
to precincts) using H3 cells as the common grid.

Weighting: a source whose footprint has ``N`` cells gives each cell a
share of ``1/N``. A shared cell's share is split evenly across every
target holding it, and one entry is emitted per (source, target, cell).
Consequently:

- a pair's weight (the sum of its entries) is ``|shared cells| / N``
  whenever the targets partition the plane;
- a fully covered source's entries sum to 1.0, a partially covered
  source's to less.

Sources with an empty footprint (zero-area geometry) are skipped with a
warning. A non-finite weight, or a per-source total above
``1 + tolerance``, raises ``AlignmentComputationError``; no partial
crosswalk is ever returned.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from gingles_geo.activities.index_cells import (
    DEFAULT_BATCH_SIZE,
    CellSet,
    index_features,
    validate_resolution,
)
from gingles_geo.activities.quality_metrics import compute_quality_metrics
from gingles_geo.core.constants import WEIGHT_TOLERANCE
from gingles_geo.core.exceptions import AlignmentCancelledError, AlignmentComputationError
from gingles_geo.models.crosswalk import CrosswalkEntry, CrosswalkResult

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from gingles_geo.models.feature import FeatureSet

logger = logging.getLogger("gingles_geo.activities.build_crosswalk")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_crosswalk(
    source_set: FeatureSet,
    target_set: FeatureSet,
    resolution: int,
    source_id_key: str | None = None,
    target_id_key: str | None = None,
    *,
    max_workers: int = 1,
    batch_size: int = DEFAULT_BATCH_SIZE,
    weight_tolerance: float = WEIGHT_TOLERANCE,
    should_cancel: Callable[[], bool] | None = None,
    on_progress: Callable[[str, float], None] | None = None,
) -> CrosswalkResult:
    """Index two feature sets and build the crosswalk between them.

    Args:
        source_set: Features apportioned from (e.g. census blocks).
        target_set: Features apportioned onto (e.g. precincts).
        resolution: H3 resolution, 0-15.
        source_id_key: Property holding source ids; defaults to the
            set's own id key.
        target_id_key: Property holding target ids; defaults to the
            set's own id key.
        max_workers: Thread pool size for indexing.
        batch_size: Features per indexing batch.
        weight_tolerance: Allowed per-source total above 1.0.
        should_cancel: Polled between features; ``True`` aborts.
        on_progress: Receives ``(phase, fraction)`` progress ticks.

    Returns:
        A ``CrosswalkResult`` with entries and quality metrics.

    Raises:
        InvalidResolutionError: If ``resolution`` is outside ``[0, 15]``.
        AlignmentComputationError: On a numeric failure during assembly.
        AlignmentCancelledError: If the caller cancels.
    """
    validate_resolution(resolution)

    if source_id_key:
        source_set = source_set.rekeyed(source_id_key)
    if target_id_key:
        target_set = target_set.rekeyed(target_id_key)

    for label, feature_set in (("source", source_set), ("target", target_set)):
        if feature_set.unidentified_count:
            logger.warning(
                "Skipping %d %s feature(s) without '%s'",
                feature_set.unidentified_count,
                label,
                feature_set.id_key,
            )

    logger.info(
        "Starting H3 alignment | sources=%d | targets=%d | resolution=%d",
        len(source_set),
        len(target_set),
        resolution,
    )

    def _report(phase: str) -> Callable[[int, int], None] | None:
        if on_progress is None:
            return None
        return lambda done, total: on_progress(phase, done / total if total else 1.0)

    source_cells = index_features(
        source_set.features,
        resolution,
        max_workers=max_workers,
        batch_size=batch_size,
        should_cancel=should_cancel,
        on_feature_done=_report("index_source"),
    )
    target_cells = index_features(
        target_set.features,
        resolution,
        max_workers=max_workers,
        batch_size=batch_size,
        should_cancel=should_cancel,
        on_feature_done=_report("index_target"),
    )

    result = assemble_crosswalk(
        source_cells,
        target_cells,
        resolution,
        weight_tolerance=weight_tolerance,
        should_cancel=should_cancel,
    )
    if on_progress is not None:
        on_progress("assemble", 1.0)
    return result


def assemble_crosswalk(
    source_cells: Mapping[str, CellSet],
    target_cells: Mapping[str, CellSet],
    resolution: int,
    *,
    weight_tolerance: float = WEIGHT_TOLERANCE,
    should_cancel: Callable[[], bool] | None = None,
) -> CrosswalkResult:
    """Build crosswalk entries from already-indexed cell sets.

    Args:
        source_cells: Source id → cell set.
        target_cells: Target id → cell set.
        resolution: H3 resolution the cell sets were built at.
        weight_tolerance: Allowed per-source total above 1.0.
        should_cancel: Polled between sources; ``True`` aborts.

    Raises:
        AlignmentComputationError: On a non-finite weight or a source
            total above ``1 + weight_tolerance``.
        AlignmentCancelledError: If the caller cancels.
    """
    validate_resolution(resolution)

    target_rank = {target_id: rank for rank, target_id in enumerate(target_cells)}
    cell_targets: dict[int, list[str]] = {}
    for target_id, cells in target_cells.items():
        for cell in cells:
            cell_targets.setdefault(cell, []).append(target_id)

    entries: list[CrosswalkEntry] = []
    footprints: dict[str, int] = {}
    skipped = 0

    for source_id, cells in source_cells.items():
        if should_cancel is not None and should_cancel():
            msg = "Alignment cancelled by caller; partial crosswalk discarded"
            raise AlignmentCancelledError(msg)

        footprints[source_id] = len(cells)
        if not cells:
            skipped += 1
            logger.warning("Source '%s' has an empty cell footprint; skipped", source_id)
            continue

        share = 1.0 / len(cells)
        shared: dict[str, list[tuple[int, float]]] = {}
        for cell in sorted(cells):
            holders = cell_targets.get(cell)
            if not holders:
                continue
            cell_weight = share / len(holders)
            for target_id in holders:
                shared.setdefault(target_id, []).append((cell, cell_weight))

        source_total = 0.0
        for target_id in sorted(shared, key=target_rank.__getitem__):
            for cell, weight in shared[target_id]:
                _check_weight(source_id, target_id, weight)
                entries.append(
                    CrosswalkEntry(
                        source_id=source_id, target_id=target_id, cell=cell, weight=weight
                    )
                )
                source_total += weight

        if source_total > 1.0 + weight_tolerance:
            msg = (
                f"Weights for source '{source_id}' sum to {source_total:.9f}, "
                f"exceeding 1 + {weight_tolerance}"
            )
            raise AlignmentComputationError(msg)

    quality = compute_quality_metrics(entries, footprints, resolution)

    logger.info(
        "H3 alignment completed | entries=%d | sources=%d | skipped=%d | "
        "coverage=%.4f | accuracy=%.4f | resolution=%d",
        len(entries),
        len(footprints),
        skipped,
        quality.coverage,
        quality.accuracy,
        resolution,
    )
    return CrosswalkResult(entries=entries, quality_metrics=quality, source_cell_counts=footprints)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_weight(source_id: str, target_id: str, weight: float) -> None:
    if not math.isfinite(weight) or not 0.0 < weight <= 1.0:
        msg = f"Invalid weight {weight!r} for source '{source_id}' / target '{target_id}'"
        raise AlignmentComputationError(msg)
