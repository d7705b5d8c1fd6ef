"""
Topology build settings.

Everything the pipeline treats as policy (routable classes, default
speeds, the one-way sentinel, table names) lives here instead of being
embedded in the algorithms.
"""
import os
from typing import Dict, FrozenSet, Optional

from pydantic import BaseModel, Field

ROUTABLE_CLASSES = frozenset(
    {
        "motorway",
        "primary",
        "residential",
        "secondary",
        "tertiary",
        "trunk",
        "unclassified",
    }
)


class TopologySettings(BaseModel):
    """Parameters for a topology build."""

    routable_classes: FrozenSet[str] = Field(
        default=ROUTABLE_CLASSES,
        description="Road classes admitted into the routing graph",
    )
    default_kmph: float = Field(
        default=40.0,
        description="Speed used when a segment declares none and its class has no default",
        gt=0,
    )
    class_default_kmph: Dict[str, float] = Field(
        default_factory=lambda: {"service": 20.0, "residential": 30.0},
        description="Per-class speed defaults in km/h",
    )
    mph_to_kmph: float = Field(default=1.60934, description="mph -> km/h factor", gt=0)
    one_way_reverse_cost: float = Field(
        default=-1.0,
        description="reverse_cost written for one-way edges (negative = forbidden)",
        lt=0,
    )
    connector_tolerance_m: float = Field(
        default=1.0,
        description="Distance above which duplicate connector geometries are reported",
        ge=0,
    )
    max_workers: int = Field(
        default=1,
        description="Threads used to decompose segments",
        ge=1,
        le=64,
    )
    source_table: str = Field(default="overture", description="Input segment table")
    connectors_table: str = Field(default="pgr_connectors", description="Output vertex table")
    edges_table: str = Field(default="pgr_edges", description="Output edge table")
    database_url: Optional[str] = Field(default=None, description="SQLAlchemy database URL")

    @classmethod
    def from_env(cls) -> "TopologySettings":
        """Build settings from environment variables, keeping defaults for unset ones."""
        values = {}
        if os.getenv("DATABASE_URL"):
            values["database_url"] = os.getenv("DATABASE_URL")
        if os.getenv("PGR_SOURCE_TABLE"):
            values["source_table"] = os.getenv("PGR_SOURCE_TABLE")
        if os.getenv("PGR_MAX_WORKERS"):
            values["max_workers"] = int(os.getenv("PGR_MAX_WORKERS"))
        classes_raw = os.getenv("PGR_ROUTABLE_CLASSES")
        if classes_raw and classes_raw.strip():
            values["routable_classes"] = frozenset(
                c.strip() for c in classes_raw.split(",") if c.strip()
            )
        return cls(**values)
