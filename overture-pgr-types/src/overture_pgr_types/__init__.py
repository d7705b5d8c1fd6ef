from overture_pgr_types.base import PgrType
from overture_pgr_types.connector import Connector
from overture_pgr_types.edge import Edge, GraphEdge
from overture_pgr_types.segment import AccessRestriction, ConnectorRef, Segment

__all__ = [
    "PgrType",
    "AccessRestriction",
    "Connector",
    "ConnectorRef",
    "Edge",
    "GraphEdge",
    "Segment",
]
