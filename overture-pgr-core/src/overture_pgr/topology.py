"""
Topology builder.

Turns a collection of segments into the two tables a pgRouting style
shortest-path search consumes:

- connectors: one vertex per distinct connector id, with a dense integer id
- edges: one row per routable edge, with integer source/target vertex ids,
  forward cost and reverse cost (negative when travelling backwards along
  a one-way street)
"""
import itertools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import Field

from overture_pgr_types import Connector, Edge, GraphEdge, PgrType, Segment

from .config import TopologySettings
from .cost import geodesic_distance_m, geodesic_length_m, segment_cost
from .decompose import decompose
from .errors import SegmentCostError

logger = logging.getLogger(__name__)


class TopologyStats(PgrType):
    """Row counts for each stage of a build. Informational only."""

    segments: int = Field(0, description="Segments given to the builder")
    edges: int = Field(0, description="Edges produced by decomposition")
    routable_segments: int = Field(0, description="Segments of a routable class")
    routable_edges: int = Field(0, description="Edges of a routable class")
    connectors: int = Field(0, description="Distinct connectors materialized")
    mismatched_connectors: int = Field(
        0, description="Duplicate connector ids whose geometries disagree"
    )
    graph_edges: int = Field(0, description="Edges with both endpoints resolved")
    unresolved_edges: int = Field(0, description="Edges dropped for a missing endpoint")
    invalid_cost_edges: int = Field(0, description="Edges dropped because cost failed")


class TopologyResult(PgrType):
    connectors: List[Connector] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
    stats: TopologyStats = Field(default_factory=TopologyStats)


def decompose_all(segments: List[Segment], settings: TopologySettings) -> List[Edge]:
    """
    Decompose every segment and concatenate the edges, in segment order.
    Segments are independent, so they can be decomposed on a thread pool.
    """
    def run(segment: Segment) -> List[Edge]:
        return list(decompose(segment, settings))

    if settings.max_workers > 1 and len(segments) > 1:
        with ThreadPoolExecutor(max_workers=settings.max_workers) as pool:
            chunks = list(pool.map(run, segments))
    else:
        chunks = [run(segment) for segment in segments]

    return list(itertools.chain.from_iterable(chunks))


def materialize_connectors(
    segments: Iterable[Segment], settings: TopologySettings
) -> Tuple[Dict[str, Connector], int]:
    """
    Build one vertex per connector id from the routable segments.

    The point is interpolated along the full segment geometry at the
    connector's offset. When several segments carry the same connector
    id, the first one seen in input order wins; the number of duplicates
    lying further apart than the tolerance is returned alongside.
    """
    vertex_ids = itertools.count(1)
    connectors: Dict[str, Connector] = {}
    mismatched = 0

    for segment in segments:
        if segment.road_class not in settings.routable_classes:
            continue
        for ref in segment.connectors:
            point = segment.geometry.interpolate(ref.at, normalized=True)
            existing = connectors.get(ref.connector_id)
            if existing is not None:
                if geodesic_distance_m(existing.geometry, point) > settings.connector_tolerance_m:
                    mismatched += 1
                    logger.debug(
                        f"Connector {ref.connector_id} on segment {segment.id} lies away "
                        f"from its first occurrence, keeping the first geometry"
                    )
                continue
            connectors[ref.connector_id] = Connector(
                vertex_id=next(vertex_ids),
                connector_id=ref.connector_id,
                geometry=point,
            )

    return connectors, mismatched


def resolve_edges(
    edges: Iterable[Edge],
    connectors: Dict[str, Connector],
    settings: TopologySettings,
) -> Tuple[List[GraphEdge], int, int]:
    """
    Attach vertex ids and costs to the routable edges.

    Returns the graph edges plus the counts of edges dropped because an
    endpoint did not resolve and because their cost could not be computed.
    """
    edge_ids = itertools.count(1)
    graph_edges: List[GraphEdge] = []
    unresolved = 0
    invalid_cost = 0

    for edge in edges:
        source = connectors.get(edge.connector_source)
        target = connectors.get(edge.connector_target)
        if source is None or target is None:
            unresolved += 1
            continue

        length = geodesic_length_m(edge.geometry)
        try:
            cost = segment_cost(edge.geometry, edge.speed_kmph, length_m=length)
        except SegmentCostError as e:
            invalid_cost += 1
            logger.warning(f"Dropping edge of segment {edge.id} "
                           f"({edge.connector_source} -> {edge.connector_target}): {e}")
            continue

        # Travelling a one-way street backwards is forbidden
        reverse_cost = settings.one_way_reverse_cost if edge.one_way else cost

        graph_edges.append(
            GraphEdge(
                **edge.model_dump(),
                edge_id=next(edge_ids),
                source_vertex_id=source.vertex_id,
                target_vertex_id=target.vertex_id,
                cost=cost,
                reverse_cost=reverse_cost,
                length=length,
            )
        )

    return graph_edges, unresolved, invalid_cost


def build_topology(
    segments: Iterable[Segment],
    settings: Optional[TopologySettings] = None,
) -> TopologyResult:
    """
    Run the full pipeline over a collection of segments.

    Args:
        segments: The input segments, consumed once
        settings: Build settings, defaults when omitted

    Returns:
        TopologyResult with the connector table, the edge table and stage counts
    """
    settings = settings or TopologySettings()
    segments = list(segments)
    stats = TopologyStats(segments=len(segments))

    logger.info(f"Decomposing {len(segments)} segments into edges...")
    edges = decompose_all(segments, settings)
    stats.edges = len(edges)
    logger.info(f"  {stats.edges} edges created")

    routable = [s for s in segments if s.road_class in settings.routable_classes]
    routable_edges = [e for e in edges if e.road_class in settings.routable_classes]
    stats.routable_segments = len(routable)
    stats.routable_edges = len(routable_edges)

    logger.info("Materializing connectors...")
    connectors, mismatched = materialize_connectors(routable, settings)
    stats.connectors = len(connectors)
    stats.mismatched_connectors = mismatched
    logger.info(f"  {stats.connectors} connectors created")
    if mismatched:
        logger.warning(
            f"{mismatched} duplicate connectors lie more than "
            f"{settings.connector_tolerance_m} m from their first occurrence"
        )

    logger.info("Resolving edges...")
    graph_edges, unresolved, invalid_cost = resolve_edges(routable_edges, connectors, settings)
    stats.graph_edges = len(graph_edges)
    stats.unresolved_edges = unresolved
    stats.invalid_cost_edges = invalid_cost
    logger.info(
        f"  {stats.graph_edges} edges created "
        f"({unresolved} unresolved, {invalid_cost} without a valid cost)"
    )

    return TopologyResult(
        connectors=list(connectors.values()),
        edges=graph_edges,
        stats=stats,
    )
