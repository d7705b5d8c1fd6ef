"""
Topology API endpoints.

Rebuild the routing tables from the raw segment table, and check what
the current tables hold.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import Engine

from overture_pgr.config import TopologySettings
from overture_pgr.rebuild import RebuildReport, rebuild_topology
from overture_pgr.storage import TopologyStore

from ..deps import get_engine, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class NetworkStatsResponse(BaseModel):
    """Current content of the routing tables."""

    vertex_count: int = Field(..., description="Rows in the connector table")
    edge_count: int = Field(..., description="Rows in the edge table")
    has_network: bool = Field(..., description="Both tables exist and are non-empty")


@router.post("/rebuild", response_model=RebuildReport)
def rebuild(
    engine: Engine = Depends(get_engine),
    settings: TopologySettings = Depends(get_settings),
):
    """
    Drop and recreate the connector and edge tables from the source table.

    The rebuild is all-or-nothing: on failure the previous tables are kept.
    """
    try:
        return rebuild_topology(engine, settings)
    except Exception as e:
        logger.error(f"Topology rebuild failed: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Error rebuilding topology: {str(e)}",
        )


@router.get("/stats", response_model=NetworkStatsResponse)
def stats(
    engine: Engine = Depends(get_engine),
    settings: TopologySettings = Depends(get_settings),
):
    """Return row counts of the routing tables."""
    try:
        store = TopologyStore(settings.connectors_table, settings.edges_table)
        with engine.connect() as connection:
            counts = store.counts(connection)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Error checking road network: {str(e)}",
        )

    return NetworkStatsResponse(
        **counts,
        has_network=counts["vertex_count"] > 0 and counts["edge_count"] > 0,
    )
