"""
Output tables.

The connector and edge tables are plain SQLAlchemy Core tables with the
geometries stored as WKT (SRID 4326), so they can be written to any
database SQLAlchemy speaks to.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import (
    Boolean,
    Column,
    Connection,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
    inspect,
    select,
)

from overture_pgr_types import Connector, GraphEdge

logger = logging.getLogger(__name__)


def connectors_table(metadata: MetaData, name: str = "pgr_connectors") -> Table:
    return Table(
        name,
        metadata,
        Column("vertex_id", Integer, primary_key=True, autoincrement=False),
        Column("connector_id", String, nullable=False),
        Column("geometry", Text, nullable=False),
        Index(f"{name}_x", "connector_id", unique=True),
    )


def edges_table(metadata: MetaData, name: str = "pgr_edges") -> Table:
    return Table(
        name,
        metadata,
        Column("edge_id", Integer, primary_key=True, autoincrement=False),
        Column("source_vertex_id", Integer, nullable=False),
        Column("target_vertex_id", Integer, nullable=False),
        Column("cost", Float, nullable=False),
        Column("reverse_cost", Float, nullable=False),
        Column("geometry", Text, nullable=False),
        Column("length", Float, nullable=False),
        Column("id", String, nullable=False),
        Column("connector_source", String, nullable=False),
        Column("connector_target", String, nullable=False),
        Column("class", String),
        Column("subclass", String),
        Column("surface", String),
        Column("speed_kmph", Float, nullable=False),
        Column("primary_name", String),
        Column("one_way", Boolean, nullable=False),
        Index(f"{name}_source_x", "source_vertex_id"),
        Index(f"{name}_target_x", "target_vertex_id"),
    )


def connector_row(connector: Connector) -> Dict[str, Any]:
    return {
        "vertex_id": connector.vertex_id,
        "connector_id": connector.connector_id,
        "geometry": connector.geometry.wkt,
    }


def edge_row(edge: GraphEdge) -> Dict[str, Any]:
    row = edge.model_dump(by_alias=True)
    row["geometry"] = edge.geometry.wkt
    return row


class TopologyStore:
    """Reads and replaces the connector/edge tables on one connection."""

    def __init__(
        self,
        connectors_table_name: str = "pgr_connectors",
        edges_table_name: str = "pgr_edges",
    ):
        self.metadata = MetaData()
        self.connectors = connectors_table(self.metadata, connectors_table_name)
        self.edges = edges_table(self.metadata, edges_table_name)

    def replace(
        self,
        connection: Connection,
        connectors: List[Connector],
        edges: List[GraphEdge],
    ) -> None:
        """
        Drop and recreate both tables, then insert the rows.

        Runs on the caller's connection; wrap the call in a transaction
        (engine.begin()) so a failure leaves the previous tables in place.
        """
        logger.info(f"Recreating {self.connectors.name} and {self.edges.name}...")
        self.metadata.drop_all(connection)
        self.metadata.create_all(connection)

        if connectors:
            connection.execute(self.connectors.insert(), [connector_row(c) for c in connectors])
        logger.info(f"  {len(connectors)} rows written to {self.connectors.name}")

        if edges:
            connection.execute(self.edges.insert(), [edge_row(e) for e in edges])
        logger.info(f"  {len(edges)} rows written to {self.edges.name}")

    def exists(self, connection: Connection) -> bool:
        inspector = inspect(connection)
        return inspector.has_table(self.connectors.name) and inspector.has_table(self.edges.name)

    def counts(self, connection: Connection) -> Dict[str, int]:
        """Row counts of both tables, zero when they do not exist yet."""
        if not self.exists(connection):
            return {"vertex_count": 0, "edge_count": 0}
        vertex_count = connection.execute(select(func.count()).select_from(self.connectors)).scalar_one()
        edge_count = connection.execute(select(func.count()).select_from(self.edges)).scalar_one()
        return {"vertex_count": vertex_count, "edge_count": edge_count}

    def load_connectors(self, connection: Connection) -> List[Connector]:
        rows = connection.execute(select(self.connectors).order_by(self.connectors.c.vertex_id))
        return [Connector.model_validate(dict(row._mapping)) for row in rows]

    def load_edges(self, connection: Connection) -> List[GraphEdge]:
        rows = connection.execute(select(self.edges).order_by(self.edges.c.edge_id))
        return [GraphEdge.model_validate(dict(row._mapping)) for row in rows]
