"""
Flight rules classification and LED color mapping.

An observation is classified twice, once on visibility and once on ceiling,
and the worse of the two categories wins.
"""
from enum import Enum, IntEnum
from typing import Iterable

from errors import UnsupportedUnit, VisibilityMissing
from observation import CloudLayer, DistanceUnit, Observation, Visibility


class FlightRules(IntEnum):
    """Flight rules categories, ordered from worst to best."""
    LOW_IFR = 0
    IFR = 1
    MARGINAL_VFR = 2
    VFR = 3


class ColorCode(str, Enum):
    PURPLE = 'p'
    RED = 'r'
    BLUE = 'b'
    GREEN = 'g'


COLORS = {
    FlightRules.LOW_IFR: ColorCode.PURPLE,
    FlightRules.IFR: ColorCode.RED,
    FlightRules.MARGINAL_VFR: ColorCode.BLUE,
    FlightRules.VFR: ColorCode.GREEN,
}


def classify_visibility(visibility: Visibility) -> FlightRules:
    if visibility.unit != DistanceUnit.STATUTE_MILES:
        raise UnsupportedUnit(visibility.unit)

    miles = visibility.value
    if miles < 1.0:
        return FlightRules.LOW_IFR
    elif miles < 3.0:
        return FlightRules.IFR
    elif miles <= 5.0:
        return FlightRules.MARGINAL_VFR
    else:
        return FlightRules.VFR


def classify_ceiling(layers: Iterable[CloudLayer], unknown_ceiling_as_low_ifr: bool = False) -> FlightRules:
    """
    Classify the lowest broken or overcast layer (hundreds of feet).

    Few/scattered layers never form a ceiling. A ceiling reported without an
    altitude is ignored unless unknown_ceiling_as_low_ifr is set, in which
    case it is treated as LIFR.
    """
    altitudes = []
    for layer in layers:
        if not layer.is_ceiling:
            continue
        if layer.altitude is None:
            if unknown_ceiling_as_low_ifr:
                return FlightRules.LOW_IFR
            continue
        altitudes.append(layer.altitude)

    if not altitudes:
        return FlightRules.VFR

    ceiling = min(altitudes)
    if ceiling < 5:
        return FlightRules.LOW_IFR
    elif ceiling < 10:
        return FlightRules.IFR
    elif ceiling <= 30:
        return FlightRules.MARGINAL_VFR
    else:
        return FlightRules.VFR


def classify(observation: Observation, unknown_ceiling_as_low_ifr: bool = False) -> FlightRules:
    """Flight rules for an observation: the worse of visibility and ceiling."""
    if observation.visibility is None:
        raise VisibilityMissing()

    by_visibility = classify_visibility(observation.visibility)
    by_ceiling = classify_ceiling(observation.cloud_layers, unknown_ceiling_as_low_ifr)
    return min(by_visibility, by_ceiling)


def color_for(rules: FlightRules) -> ColorCode:
    return COLORS[rules]
