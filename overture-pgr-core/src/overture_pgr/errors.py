class TopologyError(Exception):
    """Base class for failures while building the routing topology."""


class SpeedConversionError(TopologyError, ValueError):
    """A declared speed could not be read as a number."""


class SegmentCostError(TopologyError, ValueError):
    """A traversal cost could not be computed (zero, negative or missing speed)."""
