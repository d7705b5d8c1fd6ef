"""
Connector Type

Represents a graph vertex: a connector shared by one or more road
segments, materialized as a point with a dense integer id.
"""
from typing import Any

from pydantic import Field, field_validator
from shapely.geometry import Point

from overture_pgr_types.base import PgrType, to_geometry


class Connector(PgrType):
    """A routing graph vertex."""

    vertex_id: int = Field(..., description="Dense integer vertex id", ge=1)
    connector_id: str = Field(..., description="Original connector identifier")
    geometry: Point = Field(..., description="Connector location in lon/lat")

    @field_validator("geometry", mode="before")
    @classmethod
    def parse_geometry(cls, value: Any) -> Any:
        return to_geometry(value)
