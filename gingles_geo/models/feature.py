"""Data model for an ingested geographic feature.

A Feature is one validated geometry from a GeoJSON feature collection,
together with its property map and the identifier read from a
configurable property key. A FeatureSet is the ordered collection the
crosswalk builder consumes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gingles_geo.models.contracts import FeaturePayload
    from gingles_geo.models.geometry import Geometry


@dataclass(frozen=True, slots=True)
class Feature:
    """A single validated feature.

    Attributes:
        geometry: Validated geometry.
        properties: Property map carried through from the input.
        feature_id: Identifier read from the id key, or ``None`` when the
            property is missing or blank.
        feature_index: Zero-based index of this feature within its collection.
    """

    geometry: Geometry
    properties: dict[str, object] = field(default_factory=dict)
    feature_id: str | None = None
    feature_index: int = 0

    def to_dict(self) -> FeaturePayload:
        """Serialise as a GeoJSON ``Feature``."""
        return {
            "type": "Feature",
            "id": self.feature_id,
            "properties": dict(self.properties),
            "geometry": self.geometry.to_geojson(),
        }

    def with_id_key(self, id_key: str) -> Feature:
        """Return a copy whose identifier is read from ``id_key``."""
        return replace(self, feature_id=read_feature_id(self.properties, id_key))


@dataclass(frozen=True, slots=True)
class FeatureSet:
    """An ordered list of features plus the id key used to read their ids."""

    features: list[Feature] = field(default_factory=list)
    id_key: str = "id"

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    def identified(self) -> list[Feature]:
        """Features that carry an identifier, in input order."""
        return [f for f in self.features if f.feature_id is not None]

    @property
    def unidentified_count(self) -> int:
        return sum(1 for f in self.features if f.feature_id is None)

    def rekeyed(self, id_key: str) -> FeatureSet:
        """Return a set whose ids are re-read from another property key."""
        if id_key == self.id_key:
            return self
        return FeatureSet(
            features=[f.with_id_key(id_key) for f in self.features],
            id_key=id_key,
        )


def read_feature_id(properties: dict[str, object], id_key: str) -> str | None:
    """Read and normalise an identifier property.

    Numeric ids are coerced to ``str``; missing, ``None`` and blank
    values yield ``None``.
    """
    value = properties.get(id_key)
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None
