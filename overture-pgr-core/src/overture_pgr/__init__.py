from .config import ROUTABLE_CLASSES, TopologySettings
from .cost import geodesic_length_m, segment_cost
from .decompose import decompose, is_one_way
from .errors import SegmentCostError, SpeedConversionError, TopologyError
from .rebuild import RebuildReport, rebuild_topology
from .speed import resolve_speed_kmph
from .topology import TopologyResult, TopologyStats, build_topology

__all__ = [
    "ROUTABLE_CLASSES",
    "TopologySettings",
    "geodesic_length_m",
    "segment_cost",
    "decompose",
    "is_one_way",
    "SegmentCostError",
    "SpeedConversionError",
    "TopologyError",
    "RebuildReport",
    "rebuild_topology",
    "resolve_speed_kmph",
    "TopologyResult",
    "TopologyStats",
    "build_topology",
]
