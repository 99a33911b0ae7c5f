"""Build response payloads for wind lookups and the station directory."""

from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

from .schemas import CleanStation, DirectoryResult, Outcome, PortalStation, WindResolution


def format_observation_time(observed_at: datetime, tz: ZoneInfo) -> str:
    """Format an observation time as 24-hour local HH:MM."""
    return observed_at.astimezone(tz).strftime("%H:%M")


def wind_payload(
    result: WindResolution,
    tz: ZoneInfo,
    include_station_name: bool = False,
    include_observation_time: bool = False,
) -> dict[str, Any]:
    """Payload for a nearest-station wind request.

    Sentinel outcomes become ``{"error": <code>}``.
    """
    if isinstance(result, Outcome):
        return {"error": result.value}

    payload: dict[str, Any] = {
        "windSpeed": result.wind_speed,
        "windDir": result.wind_direction,
    }
    if include_station_name and result.station_name:
        payload["stationName"] = result.station_name
    if include_observation_time and result.observed_at is not None:
        payload["observationTime"] = format_observation_time(result.observed_at, tz)
    return payload


def to_portal_station(station: CleanStation, tz: ZoneInfo) -> PortalStation:
    return PortalStation(
        name=station.name,
        latitude=station.latitude,
        longitude=station.longitude,
        wind_speed=station.wind_speed,
        wind_direction=station.wind_direction,
        observation_time=format_observation_time(station.observed_at, tz),
    )


def directory_payload(
    stations: list[CleanStation],
    tz: ZoneInfo,
    envelope: bool = False,
    retrieved_at: datetime | None = None,
) -> list[dict[str, Any]] | dict[str, Any]:
    """Payload for the full station directory.

    Args:
        stations: Merged stations, in the order they should be listed.
        tz: Timezone used for ``observation_time``.
        envelope: Wrap the list in ``{retrieved_at, stations}``.
        retrieved_at: Envelope timestamp; defaults to now (UTC).
    """
    portal = [to_portal_station(station, tz) for station in stations]
    if not envelope:
        return [p.model_dump() for p in portal]

    result = DirectoryResult(
        retrieved_at=retrieved_at or datetime.now(timezone.utc),
        stations=portal,
    )
    return result.model_dump(mode="json")
