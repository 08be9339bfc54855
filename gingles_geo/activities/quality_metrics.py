"""Crosswalk quality metrics.

Pure functions over a finished crosswalk:

- **coverage**: fraction of all source cells that appear in at least one
  entry (i.e. matched some target).
- **accuracy**: mean pair-level weight, a confidence proxy that is high
  when sources map mostly onto single targets.

Both are fractions in ``[0, 1]`` and 0 when there is nothing to measure.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gingles_geo.models.crosswalk import QualityMetrics, aggregate_pairs

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from gingles_geo.models.crosswalk import CrosswalkEntry

logger = logging.getLogger("gingles_geo.activities.quality_metrics")

DEFAULT_MIN_COVERAGE = 0.8


def compute_quality_metrics(
    entries: Sequence[CrosswalkEntry],
    source_cell_counts: Mapping[str, int],
    resolution: int,
) -> QualityMetrics:
    """Summarise crosswalk completeness and confidence.

    Args:
        entries: Crosswalk entries.
        source_cell_counts: Footprint size of every indexed source,
            including sources that matched nothing.
        resolution: H3 resolution of the crosswalk.
    """
    total_cells = sum(source_cell_counts.values())
    covered: dict[str, set[int]] = {}
    for entry in entries:
        covered.setdefault(entry.source_id, set()).add(entry.cell)
    covered_cells = sum(len(cells) for cells in covered.values())
    coverage = min(1.0, covered_cells / total_cells) if total_cells else 0.0

    pairs = aggregate_pairs(list(entries))
    accuracy = min(1.0, sum(p.weight for p in pairs) / len(pairs)) if pairs else 0.0

    return QualityMetrics(coverage=coverage, accuracy=accuracy, resolution=resolution)


def coverage_warnings(
    metrics: QualityMetrics, *, min_coverage: float = DEFAULT_MIN_COVERAGE
) -> list[str]:
    """Human-readable warnings for a crosswalk below quality thresholds."""
    warnings: list[str] = []
    if metrics.coverage < min_coverage:
        warnings.append(
            f"Coverage {metrics.coverage:.1%} is below {min_coverage:.0%}: "
            "part of the source geography has no matching target"
        )
    if metrics.accuracy == 0.0:
        warnings.append("Crosswalk is empty: no source overlaps any target")
    for warning in warnings:
        logger.warning("%s (resolution %d)", warning, metrics.resolution)
    return warnings
