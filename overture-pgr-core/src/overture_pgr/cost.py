"""
Traversal cost: the number of seconds needed to traverse a line at a
given speed, measured on the WGS84 ellipsoid.
"""
import math
from typing import Optional

from pyproj import Geod
from shapely.geometry import LineString, Point

from .errors import SegmentCostError

_GEOD = Geod(ellps="WGS84")


def geodesic_length_m(geometry: LineString) -> float:
    """Length of a lon/lat line in meters."""
    return abs(_GEOD.geometry_length(geometry))


def kmph_to_mps(speed_kmph: float) -> float:
    return speed_kmph * 1000.0 / 3600.0


def segment_cost(
    geometry: LineString,
    speed_kmph: Optional[float],
    length_m: Optional[float] = None,
) -> float:
    """
    Seconds to traverse `geometry` at `speed_kmph`.

    Args:
        geometry: Line in lon/lat (EPSG:4326)
        speed_kmph: Speed in km/h, must be a positive finite number
        length_m: Precomputed geodesic length, to avoid measuring twice

    Raises:
        SegmentCostError: the speed is missing, zero, negative or not finite.
    """
    if speed_kmph is None or not math.isfinite(speed_kmph) or speed_kmph <= 0:
        raise SegmentCostError(f"Cannot compute cost at speed {speed_kmph!r} km/h")

    if length_m is None:
        length_m = geodesic_length_m(geometry)

    return length_m / kmph_to_mps(speed_kmph)


def geodesic_distance_m(a: Point, b: Point) -> float:
    """Distance in meters between two lon/lat points."""
    _, _, distance = _GEOD.inv(a.x, a.y, b.x, b.y)
    return distance
