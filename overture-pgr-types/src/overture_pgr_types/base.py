"""
Base Type

Shared pydantic base for every record flowing through the topology
pipeline, plus the geometry coercion used by the geometry fields.
"""
import json
from typing import Any

from pydantic import BaseModel, ConfigDict
from shapely import wkb, wkt
from shapely.errors import ShapelyError
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class PgrType(BaseModel):
    """Base model: shapely geometries allowed, fields settable by name or alias."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
    )


def to_geometry(value: Any) -> Any:
    """
    Coerce a raw geometry value into a shapely geometry.

    Accepts shapely geometries, WKB bytes, WKB hex strings, WKT strings
    and GeoJSON mappings (or their JSON text). Anything else is returned
    untouched so the field's own type check reports it.
    """
    if value is None or isinstance(value, BaseGeometry):
        return value
    try:
        return _parse_geometry(value)
    except (ShapelyError, ValueError, TypeError, KeyError) as e:
        raise ValueError(f"Unreadable geometry: {e}") from e


def _parse_geometry(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return wkb.loads(bytes(value))
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("{"):
            return shape(json.loads(text))
        if text and set(text) <= _HEX_DIGITS:
            return wkb.loads(text, hex=True)
        return wkt.loads(text)
    if isinstance(value, dict):
        return shape(value)
    return value


def decode_json(value: Any) -> Any:
    """Decode JSON-encoded nested columns; pass already-decoded values through."""
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value.strip() else None
    if hasattr(value, "tolist"):
        # numpy / arrow arrays coming out of parquet readers
        return value.tolist()
    return value
