"""Engine configuration loaded from environment variables.

All values have defaults suitable for census-block to precinct alignment.
The surrounding service may construct ``EngineConfig`` directly or call
``from_env()`` at worker startup.

``from_env()`` raises ``ConfigValidationError`` if any value is out of
its valid range, so bad configuration is caught before the first job.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from gingles_geo.core.constants import (
    DEFAULT_ID_KEY,
    DEFAULT_QUAD_SEGS,
    DEFAULT_RESOLUTION,
    MAX_RESOLUTION,
    MIN_RESOLUTION,
    WEIGHT_TOLERANCE,
)
from gingles_geo.core.exceptions import GeoEngineError


class ConfigValidationError(GeoEngineError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable engine configuration.

    Attributes:
        default_resolution: H3 resolution used when a request omits one.
        source_id_key: Default property key holding source feature ids.
        target_id_key: Default property key holding target feature ids.
        min_coverage: Coverage fraction below which a warning is raised.
        max_workers: Thread pool size for per-feature indexing (1 = serial).
        index_batch_size: Features submitted per fan-out batch; the
            cancellation check runs between batches and between results.
        weight_tolerance: Allowed per-source weight total above 1.0.
        buffer_quad_segs: Segments per quarter circle when buffering.
    """

    default_resolution: int = DEFAULT_RESOLUTION
    source_id_key: str = DEFAULT_ID_KEY
    target_id_key: str = DEFAULT_ID_KEY
    min_coverage: float = 0.8
    max_workers: int = 1
    index_batch_size: int = 64
    weight_tolerance: float = WEIGHT_TOLERANCE
    buffer_quad_segs: int = DEFAULT_QUAD_SEGS

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a key
                name is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``GEO_MAX_WORKERS=abc``).
        """
        config = cls(
            default_resolution=int(os.getenv("GEO_DEFAULT_RESOLUTION", str(DEFAULT_RESOLUTION))),
            source_id_key=os.getenv("GEO_SOURCE_ID_KEY", DEFAULT_ID_KEY),
            target_id_key=os.getenv("GEO_TARGET_ID_KEY", DEFAULT_ID_KEY),
            min_coverage=float(os.getenv("GEO_MIN_COVERAGE", "0.8")),
            max_workers=int(os.getenv("GEO_MAX_WORKERS", "1")),
            index_batch_size=int(os.getenv("GEO_INDEX_BATCH_SIZE", "64")),
            weight_tolerance=float(os.getenv("GEO_WEIGHT_TOLERANCE", str(WEIGHT_TOLERANCE))),
            buffer_quad_segs=int(os.getenv("GEO_BUFFER_QUAD_SEGS", str(DEFAULT_QUAD_SEGS))),
        )
        validate_config(config)
        return config


def validate_config(config: EngineConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not MIN_RESOLUTION <= config.default_resolution <= MAX_RESOLUTION:
        raise ConfigValidationError(
            "GEO_DEFAULT_RESOLUTION",
            config.default_resolution,
            f"must be between {MIN_RESOLUTION} and {MAX_RESOLUTION}",
        )

    if not config.source_id_key:
        raise ConfigValidationError("GEO_SOURCE_ID_KEY", config.source_id_key, "must not be empty")

    if not config.target_id_key:
        raise ConfigValidationError("GEO_TARGET_ID_KEY", config.target_id_key, "must not be empty")

    if not 0.0 <= config.min_coverage <= 1.0:
        raise ConfigValidationError(
            "GEO_MIN_COVERAGE",
            config.min_coverage,
            "must be between 0 and 1 (fraction, not percentage)",
        )

    if config.max_workers < 1:
        raise ConfigValidationError("GEO_MAX_WORKERS", config.max_workers, "must be >= 1")

    if config.index_batch_size < 1:
        raise ConfigValidationError(
            "GEO_INDEX_BATCH_SIZE", config.index_batch_size, "must be >= 1"
        )

    if not 0.0 <= config.weight_tolerance < 0.01:
        raise ConfigValidationError(
            "GEO_WEIGHT_TOLERANCE",
            config.weight_tolerance,
            "must be >= 0 and < 0.01",
        )

    if config.buffer_quad_segs < 1:
        raise ConfigValidationError(
            "GEO_BUFFER_QUAD_SEGS", config.buffer_quad_segs, "must be >= 1"
        )
