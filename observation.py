"""
Structured view of the parts of a METAR report used to pick flight rules.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DistanceUnit(Enum):
    STATUTE_MILES = "SM"
    METRES = "M"
    KILOMETRES = "KM"


class CloudCoverage(Enum):
    FEW = "FEW"
    SCATTERED = "SCT"
    BROKEN = "BKN"
    OVERCAST = "OVC"


@dataclass(frozen=True)
class Visibility:
    value: float
    unit: DistanceUnit


@dataclass(frozen=True)
class CloudLayer:
    coverage: CloudCoverage
    altitude: Optional[int]  # hundreds of feet AGL, None when reported as ///
    cloud_type: Optional[str] = None

    @property
    def is_ceiling(self) -> bool:
        """Broken and overcast layers form a ceiling."""
        return self.coverage in (CloudCoverage.BROKEN, CloudCoverage.OVERCAST)


@dataclass(frozen=True)
class Observation:
    station: str
    visibility: Optional[Visibility]
    cloud_layers: tuple[CloudLayer, ...] = ()
    raw: str = ""
