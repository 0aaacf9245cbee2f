"""
Canonical serialization of data.geojson files.

The data tree lives under version control, so every file is written in one
deterministic form: features sorted by id, translations sorted by language,
fixed key order, tab indentation, literal UTF-8 and coordinate pairs kept on
a single line. Re-formatting an unmodified collection gives identical bytes.
"""

import json
import math
from decimal import Decimal
from typing import Any, Dict

from .exceptions import EncodeError
from .model import Feature, FeatureCollection

INDENT = "\t"


def canonical_dict(collection: FeatureCollection) -> Dict[str, Any]:
    """
    Plain-dict form of a collection in canonical order.

    Features are sorted by id (ordinal), properties by language code.
    """
    features = sorted(collection.features, key=lambda feature: feature.id)
    return {
        "type": collection.type,
        "features": [_canonical_feature(feature) for feature in features],
    }


def _canonical_feature(feature: Feature) -> Dict[str, Any]:
    data = feature.to_dict()
    data["properties"] = dict(sorted(feature.properties.items()))
    return data


def format_geojson(collection: FeatureCollection) -> str:
    """
    Pretty-print a collection in canonical form.

    Raises:
        EncodeError: If any value is not representable as UTF-8 JSON
    """
    try:
        text = _encode(canonical_dict(collection), 0)
        text.encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeError(str(e)) from e

    return text


def encode_geojson(collection: FeatureCollection) -> bytes:
    """The canonical form as UTF-8 bytes, ready to store."""
    return format_geojson(collection).encode("utf-8")


def _encode(value: Any, level: int) -> str:
    if isinstance(value, dict):
        if not value:
            return "{}"
        inner = INDENT * (level + 1)
        items = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"keys must be str, not {type(key).__name__}")
            items.append(f"{inner}{_encode_string(key)}: {_encode(item, level + 1)}")
        return "{\n" + ",\n".join(items) + "\n" + INDENT * level + "}"

    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        # Coordinate pairs stay on one line
        if len(value) == 2 and all(_is_number(item) for item in value):
            return "[" + ",".join(_encode_number(item) for item in value) + "]"
        inner = INDENT * (level + 1)
        items = [inner + _encode(item, level + 1) for item in value]
        return "[\n" + ",\n".join(items) + "\n" + INDENT * level + "]"

    if isinstance(value, str):
        return _encode_string(value)

    if value is None or isinstance(value, bool):
        return json.dumps(value)

    if _is_number(value):
        return _encode_number(value)

    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _encode_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _encode_number(value) -> str:
    if isinstance(value, int):
        return str(value)

    if not math.isfinite(value):
        raise ValueError(f"Out of range float values are not JSON compliant: {value}")

    text = repr(value)
    if "e" in text or "E" in text:
        # Plain decimals only, e.g. 1e-05 -> 0.00001
        text = format(Decimal(text), "f")
    return text
