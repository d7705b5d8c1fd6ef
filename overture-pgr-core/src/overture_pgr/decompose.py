"""
Segment decomposition.

Chop each segment into edges with exactly two connectors, one at each
end: a segment with 3 connectors at distinct offsets yields 2 edges.
Attributes (class, surface, speed, directionality) are carried onto
every edge.
"""
import logging
from typing import Iterator, Optional

from shapely.geometry import LineString
from shapely.ops import substring

from overture_pgr_types import Edge, Segment

from .config import TopologySettings
from .speed import resolve_speed_kmph

logger = logging.getLogger(__name__)


def is_one_way(segment: Segment) -> bool:
    """
    Overture flags one-way segments with a "denied" access restriction
    for the "backward" heading, anywhere in the restriction list.
    """
    return any(
        r.access_type == "denied" and r.heading == "backward"
        for r in segment.access_restrictions
    )


def decompose(segment: Segment, settings: Optional[TopologySettings] = None) -> Iterator[Edge]:
    """
    Yield the edges of `segment` in connector order.

    A connector at the same offset as the previous edge end would give
    a zero-length edge, so it is skipped and the next edge starts from
    the connector already in place.
    """
    speed_kmph = resolve_speed_kmph(
        segment.speed_value, segment.speed_unit, segment.road_class, settings
    )
    one_way = is_one_way(segment)

    source = segment.connectors[0]
    for current in segment.connectors[1:]:
        if current.at == source.at:
            continue

        geometry = substring(segment.geometry, source.at, current.at, normalized=True)
        if not isinstance(geometry, LineString) or geometry.length == 0:
            logger.debug(
                f"Segment {segment.id}: degenerate slice {source.at}..{current.at} skipped"
            )
            continue

        yield Edge(
            id=segment.id,
            geometry=geometry,
            connector_source=source.connector_id,
            connector_target=current.connector_id,
            road_class=segment.road_class,
            subclass=segment.subclass,
            surface=segment.surface,
            speed_kmph=speed_kmph,
            primary_name=segment.primary_name,
            one_way=one_way,
        )
        source = current
