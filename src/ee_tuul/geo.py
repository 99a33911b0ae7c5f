"""Coordinate normalization, great-circle ranking and the service radius gate."""

import logging
import math
from collections.abc import Iterable

from .schemas import CleanStation, Outcome, RankedStation

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def to_float(value: str | float | int | None, decimal_comma: bool = False) -> float:
    """Parse an upstream numeric string, returning NaN instead of raising.

    Args:
        value: Upstream value, usually a string.
        decimal_comma: Accept "3,6" as 3.6 (locale-formatted values).
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    text = value.strip()
    if decimal_comma:
        text = text.replace(",", ".")
    try:
        return float(text)
    except ValueError:
        return math.nan


def dms_to_decimal(degrees: str | float | None, minutes: str | float | None, seconds: str | float | None) -> float:
    """Convert a degrees/minutes/seconds triple to decimal degrees.

    Returns NaN when any component is missing or non-numeric.
    """
    d = to_float(degrees, decimal_comma=True)
    m = to_float(minutes, decimal_comma=True)
    s = to_float(seconds, decimal_comma=True)
    return d + m / 60 + s / 3600


def parse_decimal(value: str | float | None) -> float:
    """Parse a decimal-degree coordinate, NaN when unparseable."""
    return to_float(value, decimal_comma=True)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance in km between two points."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    # Rounding can push a just above 1 for antipodal points
    a = min(1.0, a)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def rank_by_distance(
    lat: float, lon: float, stations: Iterable[CleanStation]
) -> list[RankedStation]:
    """Order stations by distance to (lat, lon), nearest first.

    The sort is stable, so equidistant stations keep their feed order.
    """
    ranked = [
        RankedStation(
            **station.model_dump(),
            distance_km=haversine_km(lat, lon, station.latitude, station.longitude),
        )
        for station in stations
    ]
    ranked.sort(key=lambda s: s.distance_km)
    return ranked


def within_service_radius(distance_km: float, max_radius_km: float) -> bool:
    """True unless the distance exceeds the service radius."""
    return not distance_km > max_radius_km


def apply_range_gate(
    station: RankedStation, max_radius_km: float
) -> RankedStation | Outcome:
    """Pass the nearest station through, or reject it as out of range."""
    if not within_service_radius(station.distance_km, max_radius_km):
        logger.info(
            "Nearest station %s is %.1f km away (limit %.0f km): out of range",
            station.name,
            station.distance_km,
            max_radius_km,
        )
        return Outcome.OUT_OF_RANGE
    return station
