"""Hour-fallback search for a station's most recent complete wind reading."""

import logging
import math
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from .clients.emhi import EMHIClient
from .merger import parse_timestamp, parse_wind_direction, parse_wind_speed
from .schemas import NameMatch, Outcome, RawStationReport, WindObservation

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_HOURS = 4
DEFAULT_TIMEZONE = "Europe/Tallinn"


def hour_bucket(now: datetime, hour_offset: int, tz: ZoneInfo) -> tuple[str, str]:
    """Return the local (date, hour) bucket ``hour_offset`` hours before ``now``."""
    local = (now - timedelta(hours=hour_offset)).astimezone(tz)
    return local.strftime("%Y-%m-%d"), f"{local.hour:02d}"


def names_match(candidate: str | None, target: str, mode: NameMatch = NameMatch.EXACT) -> bool:
    if candidate is None:
        return False
    if mode == NameMatch.FIRST_TOKEN:
        return candidate.split(" ")[0] == target.split(" ")[0]
    return candidate == target


class HourFallbackResolver:
    """Walk back through hourly wind buckets until a station reports wind.

    The current hour's bucket is often incomplete right after the hour
    boundary, so buckets are tried newest first, one at a time, up to
    ``lookback_hours`` buckets. An HTTP failure on any bucket aborts the
    search (UpstreamError propagates); an empty bucket, a bucket without the
    station, or a match with null wind fields moves on to the previous hour.
    """

    def __init__(
        self,
        client: EMHIClient,
        lookback_hours: int = DEFAULT_LOOKBACK_HOURS,
        timezone_name: str = DEFAULT_TIMEZONE,
        name_match: NameMatch = NameMatch.EXACT,
    ) -> None:
        self.client = client
        self.lookback_hours = lookback_hours
        self.tz = ZoneInfo(timezone_name)
        self.name_match = name_match

    async def resolve(
        self, station_name: str, now: datetime | None = None
    ) -> WindObservation | Outcome:
        """Find the newest complete wind reading for ``station_name``.

        Returns:
            WindObservation from the first complete bucket, or
            ``Outcome.NO_DATA`` when every bucket in the window came up empty.

        Raises:
            UpstreamError: If a bucket request fails at the HTTP level.
        """
        now = now or datetime.now(timezone.utc)
        logger.info("Attempting to match station name: '%s'", station_name)

        for hour_offset in range(self.lookback_hours):
            date_str, hour_str = hour_bucket(now, hour_offset, self.tz)
            logger.info("Checking hour %s (offset %d)", hour_str, hour_offset)

            reports = await self.client.get_hourly_wind(date_str, hour_str)
            if not reports:
                logger.info("Hour %s data is empty, trying previous hour", hour_str)
                continue

            match = self._find(reports, station_name)
            if match is None:
                logger.info(
                    "No match for '%s' in hour %s; first stations: %s",
                    station_name,
                    hour_str,
                    [r.name for r in reports[:5]],
                )
                continue

            if not match.has_wind():
                logger.info(
                    "Match found for '%s' but wind data is null, trying previous hour",
                    station_name,
                )
                continue

            observation = self._to_observation(match, station_name)
            if observation is None:
                logger.info(
                    "Match found for '%s' but wind data is unparseable, trying previous hour",
                    station_name,
                )
                continue

            logger.info("Found valid data for '%s' at hour %s", station_name, hour_str)
            return observation

        logger.info(
            "No data found for '%s' in %d attempts", station_name, self.lookback_hours
        )
        return Outcome.NO_DATA

    def _find(self, reports: list[RawStationReport], station_name: str) -> RawStationReport | None:
        return next(
            (r for r in reports if names_match(r.name, station_name, self.name_match)),
            None,
        )

    def _to_observation(
        self, match: RawStationReport, station_name: str
    ) -> WindObservation | None:
        speed = parse_wind_speed(match.wind_speed)
        direction = parse_wind_direction(match.wind_direction)
        if not (math.isfinite(speed) and math.isfinite(direction)):
            return None
        if speed < 0 or not 0 <= direction <= 360:
            return None
        return WindObservation(
            wind_speed=speed,
            wind_direction=direction,
            station_name=match.name or station_name,
            observed_at=parse_timestamp(match.observed_at),
        )
