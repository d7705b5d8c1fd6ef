"""
Rebuild the routing tables from the raw segment table.

Chop segments into edges using the connectors list and proportions,
materialize one vertex per connector, convert speed and length into
cost, and write the vertex and edge tables ready to route with
pgRouting. The whole rebuild runs in one transaction: it either
replaces both tables or leaves the previous ones untouched.
"""
import logging
from pathlib import Path
from typing import List, Optional, Union

from pydantic import Field
from sqlalchemy import Engine

from overture_pgr_types import PgrType, Segment

from .config import TopologySettings
from .sources import load_segments_from_geojson, load_segments_from_table
from .storage import TopologyStore
from .topology import TopologyStats, build_topology

logger = logging.getLogger(__name__)


class RebuildReport(PgrType):
    """Row counts reported after a rebuild."""

    segments_read: int = Field(0, description="Valid segments read from the source table")
    segments_rejected: int = Field(0, description="Source rows that failed validation")
    stats: TopologyStats = Field(default_factory=TopologyStats)

    @property
    def vertex_count(self) -> int:
        return self.stats.connectors

    @property
    def edge_count(self) -> int:
        return self.stats.graph_edges


def rebuild_topology(engine: Engine, settings: Optional[TopologySettings] = None) -> RebuildReport:
    """
    Drop and recreate the connector and edge tables from the source table.

    Raises whatever the pipeline raises (e.g. SpeedConversionError); in
    that case the transaction is rolled back and nothing is written.
    """
    settings = settings or TopologySettings()
    store = TopologyStore(settings.connectors_table, settings.edges_table)

    with engine.begin() as connection:
        segments, rejected = load_segments_from_table(connection, settings.source_table)
        logger.info(f"  {len(segments)} segments read ({rejected} rejected)")

        result = build_topology(segments, settings)
        store.replace(connection, result.connectors, result.edges)

    logger.info("Done.")
    return RebuildReport(
        segments_read=len(segments),
        segments_rejected=rejected,
        stats=result.stats,
    )


def rebuild_topology_from_geojson(
    engine: Engine,
    path: Union[str, Path],
    settings: Optional[TopologySettings] = None,
) -> RebuildReport:
    """Same as rebuild_topology, reading the segments from a GeoJSON file."""
    settings = settings or TopologySettings()
    segments, rejected = load_segments_from_geojson(path)
    return _write(engine, segments, rejected, settings)


def _write(
    engine: Engine,
    segments: List[Segment],
    rejected: int,
    settings: TopologySettings,
) -> RebuildReport:
    store = TopologyStore(settings.connectors_table, settings.edges_table)
    result = build_topology(segments, settings)
    with engine.begin() as connection:
        store.replace(connection, result.connectors, result.edges)

    logger.info("Done.")
    return RebuildReport(
        segments_read=len(segments),
        segments_rejected=rejected,
        stats=result.stats,
    )
