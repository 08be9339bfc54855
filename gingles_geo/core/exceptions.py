"""Unified engine exception taxonomy.

Provides a shared base exception hierarchy for the alignment and
compactness engine. Every domain exception inherits from
``GeoEngineError`` and carries structured context fields that let the
caller's job executor record, alert on, and report failures consistently.

Taxonomy categories
-------------------
- ``ValidationError``: input contract violations (bad geometry,
  resolution, parameters). Never retryable.
- ``PermanentError``: computation failures inside the engine. Not
  retryable: the engine performs no I/O, so a retry reproduces the error.
- ``AlignmentCancelledError``: caller-requested abort; partial output
  has been discarded.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for job history and logging.
"""

from __future__ import annotations


class GeoEngineError(Exception):
    """Base exception for all engine-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Engine stage where the error occurred
            (e.g. ``"ingest_geometry"``, ``"build_crosswalk"``).
        code: Machine-readable error code (e.g. ``"GEOMETRY_INVALID"``).
        retryable: Whether a caller retry could succeed.
        correlation_id: Request/job correlation identifier.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, AlignmentCancelledError):
            return "cancelled"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(GeoEngineError):
    """Input or domain-model validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(GeoEngineError):
    """Unrecoverable computation failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Domain errors
# ---------------------------------------------------------------------------


class InvalidGeometryError(ValidationError):
    """Raised when a geometry is malformed or of an unsupported shape."""

    default_stage = "ingest_geometry"
    default_code = "GEOMETRY_INVALID"


class InvalidCoordinateError(InvalidGeometryError):
    """Raised when a coordinate is non-numeric, non-finite or outside WGS 84 bounds."""

    default_code = "GEOMETRY_COORDINATE_INVALID"


class InvalidResolutionError(ValidationError):
    """Raised when an H3 resolution is outside ``[0, 15]``."""

    default_stage = "index_cells"
    default_code = "RESOLUTION_INVALID"


class SpatialParameterError(ValidationError):
    """Raised when a kernel operation receives an unusable argument."""

    default_stage = "spatial"
    default_code = "SPATIAL_PARAMETER_INVALID"


class SpatialOperationError(PermanentError):
    """Raised when the geometry engine fails on otherwise valid input."""

    default_stage = "spatial"
    default_code = "SPATIAL_OPERATION_FAILED"


class AlignmentComputationError(PermanentError):
    """Raised when crosswalk assembly hits an internal numeric failure."""

    default_stage = "build_crosswalk"
    default_code = "ALIGNMENT_COMPUTATION_FAILED"


class AlignmentCancelledError(PermanentError):
    """Raised when the caller cancels a running alignment."""

    default_stage = "build_crosswalk"
    default_code = "ALIGNMENT_CANCELLED"


class CompactnessComputationError(PermanentError):
    """Raised when compactness scores cannot be computed."""

    default_stage = "calculate_compactness"
    default_code = "COMPACTNESS_COMPUTATION_FAILED"
