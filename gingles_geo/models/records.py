"""Pydantic records handed to the surrounding service for persistence.

The engine persists nothing itself. These records are the documents the
caller stores per case: one ``AlignmentRecord`` per crosswalk run and one
``CompactnessRecord`` per district evaluated. Every ratio is a fraction
in ``[0, 1]``; areas are square metres and lengths metres.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from gingles_geo.models.compactness import CompactnessResult
    from gingles_geo.models.crosswalk import CrosswalkResult

# Schema versions for forward compatibility
ALIGNMENT_SCHEMA_VERSION = "h3-crosswalk-v1"
COMPACTNESS_SCHEMA_VERSION = "compactness-v1"


class CrosswalkEntryRecord(BaseModel):
    """One persisted crosswalk row."""

    source_id: str
    target_id: str
    h3_index: str
    weight: float = Field(ge=0.0, le=1.0)


class QualityMetricsRecord(BaseModel):
    """Persisted quality summary (fractions, not percentages)."""

    coverage: float = Field(ge=0.0, le=1.0)
    accuracy: float = Field(ge=0.0, le=1.0)
    resolution: int = Field(ge=0, le=15)


class AlignmentRecord(BaseModel):
    """Top-level persisted crosswalk document.

    Attributes:
        schema_version: Schema identifier for forward compatibility.
        case_id: Owning case, supplied by the caller.
        correlation_id: Job or request identifier for traceability.
        computed_at: Computation timestamp (ISO 8601, UTC).
        crosswalk: Per-cell crosswalk rows.
        quality_metrics: Coverage/accuracy summary.
        warnings: Human-readable quality warnings.
    """

    schema_version: str = Field(default=ALIGNMENT_SCHEMA_VERSION, alias="$schema")
    case_id: str = ""
    correlation_id: str = ""
    computed_at: str = ""
    crosswalk: list[CrosswalkEntryRecord] = Field(default_factory=list)
    quality_metrics: QualityMetricsRecord
    warnings: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(
        cls,
        result: CrosswalkResult,
        *,
        case_id: str = "",
        correlation_id: str = "",
        warnings: list[str] | None = None,
        timestamp: str = "",
    ) -> AlignmentRecord:
        """Construct a record from a finished ``CrosswalkResult``.

        Args:
            result: Output of ``build_crosswalk``.
            case_id: Owning case identifier.
            correlation_id: Job or request identifier.
            warnings: Quality warnings to store; defaults to the warnings
                carried on ``result``.
            timestamp: Computation timestamp (ISO 8601).  If empty, uses
                the current UTC time.
        """
        if not timestamp:
            timestamp = datetime.now(UTC).isoformat()

        return cls(
            case_id=case_id,
            correlation_id=correlation_id,
            computed_at=timestamp,
            crosswalk=[CrosswalkEntryRecord(**entry.to_dict()) for entry in result.entries],
            quality_metrics=QualityMetricsRecord(**result.quality_metrics.to_dict()),
            warnings=list(result.warnings if warnings is None else warnings),
        )

    def to_json(self, *, indent: int = 2) -> str:
        """Serialise to a JSON string using the ``$schema`` alias."""
        return self.model_dump_json(indent=indent, by_alias=True)


class CompactnessRecord(BaseModel):
    """Persisted compactness scores for one district."""

    schema_version: str = Field(default=COMPACTNESS_SCHEMA_VERSION, alias="$schema")
    case_id: str = ""
    district_id: str = "unknown"
    computed_at: str = ""
    polsby_popper: float = Field(ge=0.0, le=1.0)
    reock: float = Field(ge=0.0, le=1.0)
    convex_hull_ratio: float = Field(ge=0.0, le=1.0)
    area_m2: float = Field(ge=0.0)
    perimeter_m: float = Field(ge=0.0)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(
        cls,
        result: CompactnessResult,
        *,
        case_id: str = "",
        district_id: str = "",
        timestamp: str = "",
    ) -> CompactnessRecord:
        """Construct a record from a ``CompactnessResult``."""
        if not timestamp:
            timestamp = datetime.now(UTC).isoformat()

        return cls(
            case_id=case_id,
            district_id=district_id or "unknown",
            computed_at=timestamp,
            polsby_popper=result.polsby_popper,
            reock=result.reock,
            convex_hull_ratio=result.convex_hull_ratio,
            area_m2=result.area_m2,
            perimeter_m=result.perimeter_m,
        )

    def to_json(self, *, indent: int = 2) -> str:
        """Serialise to a JSON string using the ``$schema`` alias."""
        return self.model_dump_json(indent=indent, by_alias=True)
