"""Merge upstream station feeds into one deduplicated, fresh station list."""

import asyncio
import logging
import math
from datetime import datetime, timedelta, timezone

from .clients.emhi import EMHIClient
from .config import FeedConfig
from .errors import FeedMergeError, PayloadShapeError, UpstreamError
from .geo import dms_to_decimal, parse_decimal, to_float
from .schemas import CleanStation, CoordinateFormat, RawStationReport

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS = timedelta(hours=2)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an upstream observation time into an aware UTC datetime.

    Accepts ISO 8601 (with or without offset, "Z" suffix allowed) and Unix
    epoch seconds or milliseconds. Naive times are taken as UTC.
    """
    if not value:
        return None
    text = value.strip()
    if text.isascii() and text.isdigit():
        epoch = int(text)
        if epoch > 10**11:
            epoch //= 1000
        try:
            return datetime.fromtimestamp(epoch, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            logger.debug("Epoch timestamp out of range: %s", value)
            return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Invalid timestamp format: %s", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_wind_speed(value: str | None) -> float:
    """Wind speed may use a comma decimal separator ("3,6")."""
    return to_float(value, decimal_comma=True)


def parse_wind_direction(value: str | None) -> float:
    return to_float(value)


class FeedMerger:
    """Fetch configured station feeds concurrently and merge them.

    Reports are deduplicated by station name in feed order: the first usable
    report for a name wins, so a station present in both the inland and the
    coastal feed keeps the inland values when inland is listed first.
    """

    def __init__(
        self,
        client: EMHIClient,
        feeds: list[FeedConfig],
        freshness: timedelta = DEFAULT_FRESHNESS,
    ) -> None:
        self.client = client
        self.feeds = feeds
        self.freshness = freshness

    async def fetch_all(self) -> list[tuple[FeedConfig, list[RawStationReport]]]:
        """Fetch every feed concurrently.

        Raises:
            FeedMergeError: If any feed failed at the HTTP level.
            PayloadShapeError: If a feed body could not be parsed.
        """
        results = await asyncio.gather(
            *(self.client.fetch_feed(feed) for feed in self.feeds),
            return_exceptions=True,
        )

        statuses: dict[str, int | str] = {}
        batches: list[tuple[FeedConfig, list[RawStationReport]]] = []
        shape_error: PayloadShapeError | None = None
        failed = False

        for feed, result in zip(self.feeds, results):
            if isinstance(result, UpstreamError):
                failed = True
                statuses[feed.name] = result.status_code or result.detail or "error"
            elif isinstance(result, PayloadShapeError):
                statuses[feed.name] = "unparseable"
                shape_error = shape_error or result
            elif isinstance(result, BaseException):
                raise result
            else:
                statuses[feed.name] = "ok"
                batches.append((feed, result))

        if failed:
            raise FeedMergeError(statuses)
        if shape_error is not None:
            raise shape_error

        logger.debug("Fetched feeds: %s", statuses)
        return batches

    async def merge(self, now: datetime | None = None) -> list[CleanStation]:
        """Fetch, deduplicate and filter all feeds.

        Args:
            now: Resolution time; defaults to the current UTC time.

        Returns:
            Clean stations in first-seen order. May be empty.

        Raises:
            PayloadShapeError: If no feed returned any station entry at all.
        """
        batches = await self.fetch_all()
        combined = [(feed, report) for feed, reports in batches for report in reports]

        if not combined:
            raise PayloadShapeError("No station entries in any feed")

        stations = self.clean(combined, now)
        logger.info(
            "Merged %d raw reports into %d clean, unique stations",
            len(combined),
            len(stations),
        )
        return stations

    def clean(
        self,
        combined: list[tuple[FeedConfig, RawStationReport]],
        now: datetime | None = None,
    ) -> list[CleanStation]:
        """Deduplicate by name and drop incomplete or stale reports."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - self.freshness
        stations: dict[str, CleanStation] = {}

        for feed, report in combined:
            if report.name is None or report.name in stations:
                continue
            station = self._to_clean_station(feed, report, cutoff)
            if station is not None:
                stations[station.name] = station

        return list(stations.values())

    def _to_clean_station(
        self, feed: FeedConfig, report: RawStationReport, cutoff: datetime
    ) -> CleanStation | None:
        dms = feed.coordinates == CoordinateFormat.DMS
        if not report.is_usable(dms=dms):
            logger.debug("Discarding incomplete report for %s", report.name)
            return None

        observed_at = parse_timestamp(report.observed_at)
        if observed_at is None or observed_at < cutoff:
            logger.debug("Discarding stale report for %s (%s)", report.name, report.observed_at)
            return None

        if dms:
            lat = dms_to_decimal(report.lat_deg, report.lat_min, report.lat_sec)
            lon = dms_to_decimal(report.lon_deg, report.lon_min, report.lon_sec)
        else:
            lat = parse_decimal(report.latitude)
            lon = parse_decimal(report.longitude)

        speed = parse_wind_speed(report.wind_speed)
        direction = parse_wind_direction(report.wind_direction)

        if not all(math.isfinite(v) for v in (lat, lon, speed, direction)):
            logger.debug("Discarding report for %s with unparseable values", report.name)
            return None
        if speed < 0 or not 0 <= direction <= 360:
            logger.debug("Discarding report for %s with out-of-range wind", report.name)
            return None

        return CleanStation(
            name=report.name,
            latitude=lat,
            longitude=lon,
            wind_speed=speed,
            wind_direction=direction,
            observed_at=observed_at,
            feed=feed.name,
        )
