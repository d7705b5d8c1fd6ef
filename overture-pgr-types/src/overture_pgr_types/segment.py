"""
Road Segment Type

Represents one raw Overture transportation segment: the full, un-chopped
road geometry together with the connectors that touch it and the
attributes (class, surface, speed, access) needed to route over it.
"""
from typing import Any, List, Optional, Self, Union

from pydantic import Field, field_validator, model_validator
from shapely.geometry import LineString

from overture_pgr_types.base import PgrType, decode_json, to_geometry


def _first(value: Any, what: str) -> Any:
    if not isinstance(value, list):
        raise ValueError(f"{what} must be a list, got {value!r}")
    return value[0]


def _mapping(value: Any, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be an object, got {value!r}")
    return value


class ConnectorRef(PgrType):
    """A connector touching a segment at a fractional offset along its geometry."""

    connector_id: str = Field(..., description="Identifier of the connector")
    at: float = Field(
        ...,
        description="Fractional position along the segment geometry",
        ge=0,
        le=1,
    )


class AccessRestriction(PgrType):
    """An access directive, optionally scoped to a travel heading."""

    access_type: str = Field(..., description="allowed, denied, designated...")
    heading: Optional[str] = Field(
        None, description="forward or backward; None when unscoped"
    )

    @model_validator(mode="before")
    @classmethod
    def flatten_when(cls, data: Any) -> Any:
        # Overture nests the heading under "when"
        if isinstance(data, dict) and "when" in data:
            data = dict(data)
            when = data.pop("when") or {}
            if not isinstance(when, dict):
                raise ValueError(f"access restriction \"when\" must be an object, got {when!r}")
            if "heading" not in data:
                data["heading"] = when.get("heading")
        return data


class Segment(PgrType):
    """A road segment as delivered by the upstream map data source."""

    id: str = Field(..., description="Stable segment identifier")
    geometry: LineString = Field(
        ..., description="Full segment line in lon/lat (EPSG:4326)"
    )
    road_class: Optional[str] = Field(
        None, alias="class", description="Road classification (motorway, residential...)"
    )
    subclass: Optional[str] = Field(None, description="Road sub-classification")
    surface: Optional[str] = Field(None, description="First observed road surface")
    primary_name: Optional[str] = Field(None, description="Primary display name")
    speed_value: Optional[Union[float, str]] = Field(
        None, description="First declared maximum speed, as delivered"
    )
    speed_unit: Optional[str] = Field(None, description="Unit of speed_value (kmph or mph)")
    access_restrictions: List[AccessRestriction] = Field(default_factory=list)
    connectors: List[ConnectorRef] = Field(
        ..., min_length=2, description="Connectors ordered by offset"
    )

    @model_validator(mode="before")
    @classmethod
    def from_overture(cls, data: Any) -> Any:
        """Map raw Overture columns (names, road_surface, speed_limits...) onto fields."""
        if not isinstance(data, dict):
            return data
        data = dict(data)

        if "geometry" not in data and "wkb_geometry" in data:
            data["geometry"] = data.pop("wkb_geometry")

        road = decode_json(data.pop("road", None))
        if data.get("class") is None and data.get("road_class") is None and isinstance(road, dict):
            data["class"] = road.get("class")

        names = decode_json(data.pop("names", None))
        if "primary_name" not in data and isinstance(names, dict):
            data["primary_name"] = names.get("primary")

        # Take the first surface rather than chopping the segment by surface
        surfaces = decode_json(data.pop("road_surface", None))
        if "surface" not in data and surfaces:
            first = _first(surfaces, "road_surface")
            data["surface"] = first.get("value") if isinstance(first, dict) else first

        speed_limits = decode_json(data.pop("speed_limits", None))
        if "speed_value" not in data and speed_limits:
            limit = _mapping(_first(speed_limits, "speed_limits"), "speed_limits entry")
            max_speed = _mapping(limit.get("max_speed"), "max_speed")
            data["speed_value"] = max_speed.get("value")
            data["speed_unit"] = max_speed.get("unit")

        for key in ("access_restrictions", "connectors"):
            if key in data:
                data[key] = decode_json(data[key])
        if data.get("access_restrictions") is None:
            data.pop("access_restrictions", None)
        return data

    @field_validator("geometry", mode="before")
    @classmethod
    def parse_geometry(cls, value: Any) -> Any:
        return to_geometry(value)

    @field_validator("geometry")
    @classmethod
    def check_geometry(cls, value: LineString) -> LineString:
        if value.is_empty:
            raise ValueError("segment geometry is empty")
        return value

    @model_validator(mode="after")
    def check_connector_order(self) -> Self:
        """Connector offsets must never decrease along the segment."""
        offsets = [c.at for c in self.connectors]
        for prev, cur in zip(offsets, offsets[1:]):
            if cur < prev:
                raise ValueError(
                    f"connector offsets of segment {self.id} decrease ({prev} -> {cur})"
                )
        return self
