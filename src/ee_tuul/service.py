"""Nearest-station wind resolution and the full station directory."""

import logging
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from .clients.emhi import EMHIClient
from .config import Settings
from .errors import PayloadShapeError
from .geo import apply_range_gate, rank_by_distance, to_float, within_service_radius
from .merger import FeedMerger
from .resolver import HourFallbackResolver
from .schemas import CleanStation, Outcome, WindMode, WindObservation, WindResolution

logger = logging.getLogger(__name__)


class WindService:
    """Answer "what is the wind near (lat, lon) right now?".

    Two strategies are available (``policy.wind_mode``):

    - ``hourly``: EMHI picks the nearest station; its exact name is then
      looked up in the hourly wind buckets, walking back up to
      ``policy.lookback_hours`` hours.
    - ``directory``: the merged inland and coastal feeds are ranked by
      distance and the nearest fresh station's wind is returned.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: EMHIClient | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._client = client
        self.tz = ZoneInfo(self.settings.policy.timezone)

    @property
    def client(self) -> EMHIClient:
        """Lazy-initialize EMHI client."""
        if self._client is None:
            self._client = EMHIClient(self.settings.emhi)
        return self._client

    @property
    def merger(self) -> FeedMerger:
        return FeedMerger(
            self.client,
            self.settings.emhi.feeds,
            freshness=timedelta(hours=self.settings.policy.freshness_hours),
        )

    @property
    def resolver(self) -> HourFallbackResolver:
        policy = self.settings.policy
        return HourFallbackResolver(
            self.client,
            lookback_hours=policy.lookback_hours,
            timezone_name=policy.timezone,
            name_match=policy.name_match,
        )

    async def close(self) -> None:
        """Clean up resources."""
        if self._client is not None:
            await self._client.close()

    async def list_all_stations(self, now: datetime | None = None) -> list[CleanStation]:
        """Every fresh, deduplicated station from the configured feeds.

        Raises:
            FeedMergeError: If any feed failed at the HTTP level.
            PayloadShapeError: If the feeds returned no station entries at all.
        """
        logger.info("Listing all stations from %d feeds", len(self.settings.emhi.feeds))
        return await self.merger.merge(now)

    async def resolve_nearest_wind(
        self, lat: float, lon: float, now: datetime | None = None
    ) -> WindResolution:
        """Resolve the wind near a coordinate.

        Returns:
            WindObservation, or an Outcome sentinel (out of range, no data,
            no match, or upstream parse failure).

        Raises:
            UpstreamError: If an upstream request failed.
            FeedMergeError: If a feed failed in directory mode.
        """
        now = now or datetime.now(timezone.utc)
        logger.info("New wind request: lat=%s, lon=%s", lat, lon)

        if self.settings.policy.wind_mode == WindMode.DIRECTORY:
            return await self._resolve_from_directory(lat, lon, now)
        return await self._resolve_from_hourly(lat, lon, now)

    async def _resolve_from_directory(
        self, lat: float, lon: float, now: datetime
    ) -> WindResolution:
        try:
            stations = await self.merger.merge(now)
        except PayloadShapeError as e:
            logger.warning("Station list unparseable: %s", e)
            return Outcome.PARSE_FAILURE

        ranked = rank_by_distance(lat, lon, stations)
        if not ranked:
            logger.info("No stations survived filtering")
            return Outcome.NO_DATA

        nearest = apply_range_gate(ranked[0], self.settings.policy.max_radius_km)
        if isinstance(nearest, Outcome):
            return nearest

        logger.info("Nearest station '%s' at %.1f km", nearest.name, nearest.distance_km)
        return WindObservation(
            wind_speed=nearest.wind_speed,
            wind_direction=nearest.wind_direction,
            station_name=nearest.name,
            observed_at=nearest.observed_at,
            distance_km=nearest.distance_km,
        )

    async def _resolve_from_hourly(
        self, lat: float, lon: float, now: datetime
    ) -> WindResolution:
        try:
            candidates = await self.client.get_nearest_stations(lat, lon)
        except PayloadShapeError as e:
            logger.warning("Nearest station response unparseable: %s", e)
            return Outcome.PARSE_FAILURE

        if not candidates:
            logger.warning("Nearest station response had no entries")
            return Outcome.PARSE_FAILURE

        station = candidates[0]
        if station.name is None:
            logger.warning("Nearest station entry has no name")
            return Outcome.NO_MATCH

        distance = to_float(station.distance, decimal_comma=True)
        logger.info("Found nearest station '%s', distance %s km", station.name, station.distance)

        max_radius_km = self.settings.policy.max_radius_km
        if not within_service_radius(distance, max_radius_km):
            logger.info("Station '%s' out of range (>%.0f km)", station.name, max_radius_km)
            return Outcome.OUT_OF_RANGE

        result = await self.resolver.resolve(station.name, now)
        if isinstance(result, WindObservation) and distance >= 0:
            result = result.model_copy(update={"distance_km": distance})
        return result
