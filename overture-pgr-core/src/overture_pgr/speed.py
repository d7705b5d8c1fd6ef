"""
Speed resolution: deal with kmph/mph units and fill in missing speeds
with defaults based on the road class.
"""
from typing import Any, Optional

from .config import TopologySettings
from .errors import SpeedConversionError

_DEFAULT_SETTINGS = TopologySettings()


def resolve_speed_kmph(
    speed: Any,
    unit: Optional[str],
    road_class: Optional[str],
    settings: Optional[TopologySettings] = None,
) -> float:
    """
    Return the speed of a segment in km/h.

    A declared speed always wins over the class defaults. Only "mph" is
    converted; any other unit is taken to be km/h already.

    Raises:
        SpeedConversionError: the declared speed is not a number.
    """
    settings = settings or _DEFAULT_SETTINGS

    if speed is not None:
        try:
            speed = float(speed)
        except (TypeError, ValueError) as e:
            raise SpeedConversionError(f"Invalid speed value {speed!r}: {e}") from e
        if unit == "mph":
            speed = speed * settings.mph_to_kmph
        return speed

    # Should not be driving fast on service or residential roads
    return float(settings.class_default_kmph.get(road_class, settings.default_kmph))
