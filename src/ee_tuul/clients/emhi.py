"""EMHI (Estonian Environment Agency) public weather API client."""

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any

import httpx

from ..config import EMHIConfig, FeedConfig, FieldMap
from ..errors import PayloadShapeError, UpstreamError
from ..schemas import PayloadFormat, PayloadShape, RawStationReport

logger = logging.getLogger(__name__)


def extract_entries(
    content: str, shape: PayloadShape, fmt: PayloadFormat = PayloadFormat.JSON
) -> list[dict[str, Any]]:
    """Pull the list of station entries out of an upstream payload.

    A payload without the expected list yields an empty list. A body that is
    not valid JSON/XML raises PayloadShapeError.
    """
    if fmt == PayloadFormat.XML:
        return _extract_xml_entries(content, shape)
    return _extract_json_entries(content, shape)


def _extract_json_entries(content: str, shape: PayloadShape) -> list[dict[str, Any]]:
    try:
        data = json.loads(content)
    except ValueError as e:
        raise PayloadShapeError(f"Invalid JSON payload: {e}", code="UPSTREAM_PARSE_FAIL") from e

    if shape == PayloadShape.NESTED:
        if not isinstance(data, dict):
            return []
        entries = data.get("entries") or {}
        if not isinstance(entries, dict):
            return []
        items = entries.get("entry")
        # Single-entry envelopes collapse the list into an object
        if isinstance(items, dict):
            items = [items]
    else:
        items = data

    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _extract_xml_entries(content: str, shape: PayloadShape) -> list[dict[str, Any]]:
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise PayloadShapeError(f"Invalid XML payload: {e}", code="UPSTREAM_PARSE_FAIL") from e

    if shape == PayloadShape.NESTED:
        container = root if root.tag == "entries" else root.find(".//entries")
        if container is None:
            return []
        elements = container.findall("entry")
    else:
        elements = list(root)

    def element_to_dict(elem: ET.Element) -> dict[str, Any]:
        return {child.tag: child.text for child in elem}

    return [element_to_dict(elem) for elem in elements]


class EMHIClient:
    """HTTP client for the EMHI public API.

    Every non-success response raises UpstreamError; callers decide whether
    that aborts the request.
    """

    def __init__(
        self,
        config: EMHIConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize EMHI client.

        Args:
            config: EMHI configuration settings.
            http_client: Optional custom HTTP client for testing.
        """
        self.config = config or EMHIConfig()
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-initialize HTTP client with the configured request headers."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                follow_redirects=True,
                headers=self.config.request_headers(),
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _get(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """GET a URL, raising UpstreamError on transport failure or non-2xx."""
        try:
            response = await self.http_client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise UpstreamError(url, detail=str(e) or e.__class__.__name__) from e

        if not response.is_success:
            logger.warning("Request to %s returned %d", url, response.status_code)
            raise UpstreamError(url, status_code=response.status_code)
        return response

    def _to_reports(
        self, entries: list[dict[str, Any]], field_map: FieldMap
    ) -> list[RawStationReport]:
        return [RawStationReport.from_entry(entry, field_map) for entry in entries]

    async def fetch_feed(self, feed: FeedConfig) -> list[RawStationReport]:
        """Fetch one configured station feed.

        Args:
            feed: Feed descriptor (URL, payload shape/format, field names).

        Returns:
            Station reports in upstream order; empty when the feed has none.
        """
        response = await self._get(feed.url, headers=feed.headers or None)
        entries = extract_entries(response.text, feed.shape, feed.format)
        logger.debug("Feed %s returned %d entries", feed.name, len(entries))
        return self._to_reports(entries, feed.field_map)

    async def get_nearest_stations(self, lat: float, lon: float) -> list[RawStationReport]:
        """Ask EMHI for the station nearest to a coordinate.

        Entries carry an upstream-computed distance in ``distance``.
        """
        url = f"{self.config.base_url}{self.config.nearest_path}"
        response = await self._get(url, params={"latitude": str(lat), "longitude": str(lon)})
        entries = extract_entries(
            response.text, self.config.nearest_shape, self.config.nearest_format
        )
        return self._to_reports(entries, self.config.nearest_fields)

    async def get_hourly_wind(self, date: str, hour: str) -> list[RawStationReport]:
        """Fetch the wind observations published for one hour bucket.

        Args:
            date: Local date, YYYY-MM-DD.
            hour: Local hour of day, zero-padded ("00".."23").
        """
        url = f"{self.config.base_url}{self.config.hourly_wind_path}"
        response = await self._get(url, params={"date": date, "hour": hour})
        entries = extract_entries(
            response.text, self.config.hourly_wind_shape, self.config.hourly_wind_format
        )
        return self._to_reports(entries, self.config.hourly_wind_fields)
