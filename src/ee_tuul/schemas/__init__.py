"""Station and wind schemas.

Pydantic models for upstream reports and API responses.
"""

from .enums import CoordinateFormat, NameMatch, Outcome, PayloadFormat, PayloadShape, WindMode
from .station import (
    CleanStation,
    DirectoryResult,
    PortalStation,
    RankedStation,
    RawStationReport,
)
from .wind import WindObservation, WindResolution

__all__ = [
    "CleanStation",
    "CoordinateFormat",
    "DirectoryResult",
    "NameMatch",
    "Outcome",
    "PayloadFormat",
    "PayloadShape",
    "PortalStation",
    "RankedStation",
    "RawStationReport",
    "WindMode",
    "WindObservation",
    "WindResolution",
]
