"""
Edge Types

Edge: one chopped piece of a segment between two consecutive distinct
connectors, still referring to its connectors by their textual ids.

GraphEdge: a routable edge with integer vertex ids and traversal costs,
in the shape pgRouting expects (negative reverse_cost = impassable).
"""
from typing import Any, Optional

from pydantic import Field, field_validator
from shapely.geometry import LineString

from overture_pgr_types.base import PgrType, to_geometry


class Edge(PgrType):
    """A minimal, non-zero-length slice of a segment."""

    id: str = Field(..., description="Parent segment id (shared by sibling edges)")
    geometry: LineString = Field(..., description="Sub-line between the two connectors")
    connector_source: str = Field(..., description="Connector id at the start of the edge")
    connector_target: str = Field(..., description="Connector id at the end of the edge")
    road_class: Optional[str] = Field(None, alias="class")
    subclass: Optional[str] = None
    surface: Optional[str] = None
    speed_kmph: float = Field(..., description="Resolved speed in km/h")
    primary_name: Optional[str] = None
    one_way: bool = Field(default=False, description="Backward travel is denied")

    @field_validator("geometry", mode="before")
    @classmethod
    def parse_geometry(cls, value: Any) -> Any:
        return to_geometry(value)


class GraphEdge(Edge):
    """A cost-bearing edge whose endpoints both resolved to vertices."""

    edge_id: int = Field(..., description="Dense integer edge id", ge=1)
    source_vertex_id: int = Field(..., description="Vertex id of connector_source")
    target_vertex_id: int = Field(..., description="Vertex id of connector_target")
    cost: float = Field(..., description="Seconds to traverse source -> target")
    reverse_cost: float = Field(
        ..., description="Seconds to traverse target -> source, negative when forbidden"
    )
    length: float = Field(..., description="Geodesic length in meters", ge=0)
