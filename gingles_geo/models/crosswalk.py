"""Data models for an H3 crosswalk between two feature sets.

A crosswalk apportions each source feature's footprint onto the target
features it overlaps. Footprints are H3 cell sets; every entry records
the share of one source's footprint contributed by one shared cell.

Ratios (weights, coverage, accuracy) are fractions in ``[0, 1]``
throughout; nothing is scaled to percentages.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from gingles_geo.models.contracts import (
        CrosswalkEntryPayload,
        CrosswalkPayload,
        QualityMetricsPayload,
    )


def cell_to_string(cell: int) -> str:
    """Render a packed H3 cell as its canonical hex string."""
    from h3.api import basic_int as h3

    return h3.int_to_str(cell)


@dataclass(frozen=True, slots=True)
class CrosswalkEntry:
    """One shared cell between a source and a target feature.

    Attributes:
        source_id: Source feature identifier.
        target_id: Target feature identifier.
        cell: Packed 64-bit H3 cell.
        weight: Share of the source footprint carried by this cell
            for this target, in ``[0, 1]``.
    """

    source_id: str
    target_id: str
    cell: int
    weight: float

    @property
    def cell_id(self) -> str:
        return cell_to_string(self.cell)

    def to_dict(self) -> CrosswalkEntryPayload:
        return {
            "source_id": self.source_id,
            "target_id": self.target_id,
            "h3_index": self.cell_id,
            "weight": self.weight,
        }


@dataclass(frozen=True, slots=True)
class CrosswalkPair:
    """Pair-level aggregate of all entries for one (source, target).

    ``weight`` equals ``cell_count / |source footprint|`` whenever the
    targets sharing those cells do not overlap each other.
    """

    source_id: str
    target_id: str
    weight: float
    cell_count: int


@dataclass(frozen=True, slots=True)
class QualityMetrics:
    """Completeness and confidence summary for a crosswalk.

    Attributes:
        coverage: Fraction of source cells matched by at least one target.
        accuracy: Mean pair-level weight (a confidence proxy).
        resolution: H3 resolution the crosswalk was built at.
    """

    coverage: float
    accuracy: float
    resolution: int

    def to_dict(self) -> QualityMetricsPayload:
        return {
            "coverage": self.coverage,
            "accuracy": self.accuracy,
            "resolution": self.resolution,
        }


@dataclass(frozen=True, slots=True)
class CrosswalkResult:
    """A complete crosswalk with its quality metrics.

    Attributes:
        entries: One entry per (source, target, shared cell).
        quality_metrics: Coverage/accuracy summary.
        source_cell_counts: Footprint size of every indexed source.
        warnings: Quality warnings raised for this crosswalk.
    """

    entries: list[CrosswalkEntry] = field(default_factory=list)
    quality_metrics: QualityMetrics = field(
        default_factory=lambda: QualityMetrics(coverage=0.0, accuracy=0.0, resolution=0)
    )
    source_cell_counts: dict[str, int] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def pairs(self) -> list[CrosswalkPair]:
        """Aggregate entries to one record per (source, target) pair."""
        return aggregate_pairs(self.entries)

    def source_totals(self) -> dict[str, float]:
        """Sum of weights per source id (1.0 for a fully covered source)."""
        totals: dict[str, float] = dict.fromkeys(self.source_cell_counts, 0.0)
        for entry in self.entries:
            totals[entry.source_id] = totals.get(entry.source_id, 0.0) + entry.weight
        return totals

    def apportion(self, values: Mapping[str, float]) -> dict[str, float]:
        """Redistribute per-source values onto targets by crosswalk weight.

        Sources absent from ``values`` contribute nothing. Value lost to
        partial coverage is not reassigned.
        """
        allocated: dict[str, float] = defaultdict(float)
        for pair in self.pairs():
            value = values.get(pair.source_id)
            if value is None:
                continue
            allocated[pair.target_id] += value * pair.weight
        return dict(allocated)

    def to_dict(self) -> CrosswalkPayload:
        return {
            "crosswalk": [entry.to_dict() for entry in self.entries],
            "quality_metrics": self.quality_metrics.to_dict(),
        }


def aggregate_pairs(entries: list[CrosswalkEntry]) -> list[CrosswalkPair]:
    """Group entries by (source, target), preserving first-seen order.

    Pair weights are capped at 1.0 to absorb summation rounding.
    """
    weights: dict[tuple[str, str], float] = {}
    counts: dict[tuple[str, str], int] = {}
    for entry in entries:
        key = (entry.source_id, entry.target_id)
        weights[key] = weights.get(key, 0.0) + entry.weight
        counts[key] = counts.get(key, 0) + 1
    return [
        CrosswalkPair(
            source_id=s, target_id=t, weight=min(1.0, weights[(s, t)]), cell_count=counts[(s, t)]
        )
        for s, t in weights
    ]
