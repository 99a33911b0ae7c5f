"""ee-tuul - nearest weather-station wind from EMHI observation feeds.

This package resolves the current wind near a coordinate from the Estonian
Environment Agency public API:

- Feed merging: inland and coastal station feeds, deduplicated and filtered
  to fresh, complete reports
- Nearest-station ranking with a 200 km service radius
- Hour fallback: walks back through hourly wind buckets when the newest one
  is incomplete

Usage:
    from ee_tuul import WindService
    result = await WindService().resolve_nearest_wind(59.437, 24.7536)
"""

__version__ = "0.1.0"

from .config import Settings, get_settings
from .schemas import CleanStation, Outcome, WindObservation
from .service import WindService

__all__ = [
    "CleanStation",
    "Outcome",
    "Settings",
    "WindObservation",
    "WindService",
    "get_settings",
]
