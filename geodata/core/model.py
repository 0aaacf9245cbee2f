"""
In-memory model of a data.geojson file.

A FeatureCollection holds the sibling places of one level of the tree. Each
Feature is keyed by its English name (the id) and carries an optional point
geometry and a mapping of language code to translated name.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from shapely.geometry import shape

from .exceptions import ParseError

FEATURE_COLLECTION = "FeatureCollection"
FEATURE = "Feature"
POINT = "Point"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class Geometry:
    """A GeoJSON geometry. Places are stored as points, longitude first."""

    type: str
    coordinates: list

    @classmethod
    def point(cls, longitude: float, latitude: float) -> "Geometry":
        return cls(POINT, [longitude, latitude])

    @classmethod
    def from_dict(cls, data: Any) -> "Geometry":
        """
        Build a geometry from decoded JSON, validating it with shapely.

        Raises:
            ParseError: If the value is not a geometry shapely accepts
        """
        if not isinstance(data, dict):
            raise ParseError("geometry must be an object")

        geometry_type = data.get("type")
        coordinates = data.get("coordinates")

        if not isinstance(geometry_type, str) or not isinstance(coordinates, list):
            raise ParseError("geometry must have a type and a list of coordinates")

        if geometry_type == POINT and not (
            len(coordinates) == 2 and all(_is_number(c) for c in coordinates)
        ):
            raise ParseError(f"invalid point coordinates: {coordinates}")

        try:
            shape({"type": geometry_type, "coordinates": coordinates})
        except Exception as e:
            raise ParseError(f"invalid {geometry_type} geometry: {e}") from e

        return cls(geometry_type, coordinates)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "coordinates": self.coordinates}

    @property
    def shape(self):
        """The shapely equivalent of this geometry."""
        return shape(self.to_dict())


@dataclass
class Feature:
    """One place: a country, region, city..."""

    id: str
    type: str = FEATURE
    geometry: Optional[Geometry] = None
    properties: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Feature":
        if not isinstance(data, dict):
            raise ParseError("feature must be an object")

        feature_id = data.get("id")
        if not isinstance(feature_id, str) or feature_id == "":
            raise ParseError(f"feature has no id: {json.dumps(data, ensure_ascii=False)}")

        feature_type = data.get("type")
        if feature_type is None:
            feature_type = FEATURE
        elif not isinstance(feature_type, str):
            raise ParseError(f"{feature_id}: feature type must be a string")

        geometry = data.get("geometry")
        if geometry is not None:
            geometry = Geometry.from_dict(geometry)

        properties = data.get("properties")
        # Older tooling wrote an empty mapping as an empty array
        if properties is None or properties == []:
            properties = {}
        if not isinstance(properties, dict):
            raise ParseError(f"{feature_id}: properties must be an object")
        for language, name in properties.items():
            if not isinstance(name, str):
                raise ParseError(f"{feature_id}: translation for '{language}' must be a string")

        return cls(id=feature_id, type=feature_type, geometry=geometry, properties=dict(properties))

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict in canonical key order."""
        data = {"id": self.id, "type": self.type}
        if self.geometry is not None:
            data["geometry"] = self.geometry.to_dict()
        data["properties"] = dict(self.properties)
        return data

    def translation(self, language: str) -> str:
        return self.properties.get(language) or self.id

    @property
    def has_coordinates(self) -> bool:
        """False for a missing geometry or the [0,0] placeholder."""
        if self.geometry is None or self.geometry.type != POINT:
            return False
        return any(c != 0 for c in self.geometry.coordinates)

    @property
    def longitude(self) -> Optional[float]:
        return self.geometry.coordinates[0] if self.has_coordinates else None

    @property
    def latitude(self) -> Optional[float]:
        return self.geometry.coordinates[1] if self.has_coordinates else None


@dataclass
class FeatureCollection:
    """All the sibling places stored in one data.geojson file."""

    features: List[Feature] = field(default_factory=list)
    type: str = FEATURE_COLLECTION

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> "FeatureCollection":
        """
        Parse the text of a data.geojson file.

        Raises:
            ParseError: If the text is not JSON, or the top-level value is not an object
        """
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"not UTF-8: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(str(e)) from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> "FeatureCollection":
        if not isinstance(data, dict):
            raise ParseError("top-level value must be an object")

        features = data.get("features")
        if features is None:
            features = []
        if not isinstance(features, list):
            raise ParseError("features must be an array")

        collection_type = data.get("type")
        if not isinstance(collection_type, str):
            collection_type = FEATURE_COLLECTION

        return cls(features=[Feature.from_dict(f) for f in features], type=collection_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "features": [feature.to_dict() for feature in self.features],
        }

    def find(self, feature_id: str) -> Optional[Feature]:
        for feature in self.features:
            if feature.id == feature_id:
                return feature
        return None

    def includes(self, feature_id: str) -> bool:
        return features_include(self.features, feature_id)

    def ids(self) -> List[str]:
        return [feature.id for feature in self.features]

    def duplicate_ids(self) -> List[str]:
        """Ids used by more than one feature, in order of first repetition."""
        seen = set()
        duplicates = []
        for feature in self.features:
            if feature.id in seen and feature.id not in duplicates:
                duplicates.append(feature.id)
            seen.add(feature.id)
        return duplicates


def features_include(features: Iterable[Feature], feature_id: str) -> bool:
    """Exact, case-sensitive test for a feature with this id."""
    return any(feature.id == feature_id for feature in features)


def stub_feature(feature_id: str) -> Feature:
    """A placeholder feature with no geometry and no translations."""
    return Feature(id=feature_id)
