"""Unit tests for the wind service."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from ee_tuul.clients.emhi import EMHIClient
from ee_tuul.config import FieldMap, PolicyConfig, Settings
from ee_tuul.errors import FeedMergeError, PayloadShapeError, UpstreamError
from ee_tuul.schemas import Outcome, RawStationReport, WindMode, WindObservation
from ee_tuul.service import WindService


def nearest(name: str | None = "Pirita RJ", distance: str | None = "3,2") -> list[RawStationReport]:
    return [RawStationReport(name=name, distance=distance)]


def hourly(name: str = "Pirita RJ", speed: str | None = "3,6", direction: str | None = "69.0"):
    return [RawStationReport.from_entry({"Jaam": name, "ws10ma": speed, "wd10ma": direction}, FieldMap())]


def directory_settings(settings: Settings) -> Settings:
    return settings.model_copy(
        update={"policy": PolicyConfig(wind_mode=WindMode.DIRECTORY)}
    )


def feed_client(batches: dict[str, list[RawStationReport]]) -> MagicMock:
    client = MagicMock(spec=EMHIClient)
    client.fetch_feed = AsyncMock(side_effect=lambda feed: batches[feed.name])
    return client


class TestHourlyMode:
    @pytest.mark.asyncio
    async def test_resolves_nearest_station_wind(self, settings: Settings, now: datetime):
        client = MagicMock(spec=EMHIClient)
        client.get_nearest_stations = AsyncMock(return_value=nearest())
        client.get_hourly_wind = AsyncMock(side_effect=[hourly(speed=None), hourly()])
        service = WindService(settings, client=client)

        result = await service.resolve_nearest_wind(59.437, 24.7536, now)

        assert isinstance(result, WindObservation)
        assert result.wind_speed == pytest.approx(3.6)
        assert result.wind_direction == 69.0
        assert result.distance_km == pytest.approx(3.2)
        client.get_nearest_stations.assert_awaited_once_with(59.437, 24.7536)
        assert client.get_hourly_wind.await_count == 2

    @pytest.mark.asyncio
    async def test_out_of_range(self, settings: Settings, now: datetime):
        client = MagicMock(spec=EMHIClient)
        client.get_nearest_stations = AsyncMock(return_value=nearest(distance="200,1"))
        client.get_hourly_wind = AsyncMock()
        service = WindService(settings, client=client)

        result = await service.resolve_nearest_wind(57.0, 20.0, now)

        assert result == Outcome.OUT_OF_RANGE
        client.get_hourly_wind.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_just_inside_range(self, settings: Settings, now: datetime):
        client = MagicMock(spec=EMHIClient)
        client.get_nearest_stations = AsyncMock(return_value=nearest(distance="199.9"))
        client.get_hourly_wind = AsyncMock(return_value=hourly())
        service = WindService(settings, client=client)

        result = await service.resolve_nearest_wind(57.0, 22.0, now)

        assert isinstance(result, WindObservation)

    @pytest.mark.asyncio
    async def test_empty_nearest_response_is_parse_failure(self, settings: Settings, now: datetime):
        client = MagicMock(spec=EMHIClient)
        client.get_nearest_stations = AsyncMock(return_value=[])
        service = WindService(settings, client=client)

        assert await service.resolve_nearest_wind(59.4, 24.7, now) == Outcome.PARSE_FAILURE

    @pytest.mark.asyncio
    async def test_unparseable_nearest_response(self, settings: Settings, now: datetime):
        client = MagicMock(spec=EMHIClient)
        client.get_nearest_stations = AsyncMock(side_effect=PayloadShapeError("bad json"))
        service = WindService(settings, client=client)

        assert await service.resolve_nearest_wind(59.4, 24.7, now) == Outcome.PARSE_FAILURE

    @pytest.mark.asyncio
    async def test_nameless_station_is_no_match(self, settings: Settings, now: datetime):
        client = MagicMock(spec=EMHIClient)
        client.get_nearest_stations = AsyncMock(return_value=nearest(name=None))
        service = WindService(settings, client=client)

        assert await service.resolve_nearest_wind(59.4, 24.7, now) == Outcome.NO_MATCH

    @pytest.mark.asyncio
    async def test_no_data(self, settings: Settings, now: datetime):
        client = MagicMock(spec=EMHIClient)
        client.get_nearest_stations = AsyncMock(return_value=nearest())
        client.get_hourly_wind = AsyncMock(return_value=[])
        service = WindService(settings, client=client)

        assert await service.resolve_nearest_wind(59.4, 24.7, now) == Outcome.NO_DATA
        assert client.get_hourly_wind.await_count == 4

    @pytest.mark.asyncio
    async def test_upstream_error_propagates(self, settings: Settings, now: datetime):
        client = MagicMock(spec=EMHIClient)
        client.get_nearest_stations = AsyncMock(side_effect=UpstreamError("https://x", status_code=503))
        service = WindService(settings, client=client)

        with pytest.raises(UpstreamError):
            await service.resolve_nearest_wind(59.4, 24.7, now)


class TestDirectoryMode:
    @pytest.mark.asyncio
    async def test_nearest_fresh_station(self, settings: Settings, make_entry, now: datetime):
        client = feed_client(
            {
                "inland": [RawStationReport.from_entry(make_entry("Tartu", LaiusKraad="58", PikkusKraad="26"), FieldMap())],
                "coastal": [RawStationReport.from_entry(make_entry("Pirita RJ", ws10ma="3,6"), FieldMap())],
            }
        )
        service = WindService(directory_settings(settings), client=client)

        result = await service.resolve_nearest_wind(59.437, 24.7536, now)

        assert isinstance(result, WindObservation)
        assert result.station_name == "Pirita RJ"
        assert result.wind_speed == pytest.approx(3.6)
        assert result.distance_km is not None and result.distance_km < 20

    @pytest.mark.asyncio
    async def test_out_of_range(self, settings: Settings, make_entry, now: datetime):
        client = feed_client(
            {"inland": [RawStationReport.from_entry(make_entry(), FieldMap())], "coastal": []}
        )
        service = WindService(directory_settings(settings), client=client)

        # Riga is roughly 280 km from Tallinn
        result = await service.resolve_nearest_wind(56.95, 24.1, now)

        assert result == Outcome.OUT_OF_RANGE

    @pytest.mark.asyncio
    async def test_shape_failure(self, settings: Settings, now: datetime):
        client = feed_client({"inland": [], "coastal": []})
        service = WindService(directory_settings(settings), client=client)

        assert await service.resolve_nearest_wind(59.4, 24.7, now) == Outcome.PARSE_FAILURE

    @pytest.mark.asyncio
    async def test_end_to_end_null_wind(self, settings: Settings, make_entry, now: datetime):
        """Test a single null-wind station gives an empty directory and NO_DATA."""
        batches = {
            "inland": [
                RawStationReport.from_entry(
                    make_entry("Pirita RJ", Time=now.isoformat(), ws10ma=None), FieldMap()
                )
            ],
            "coastal": [],
        }
        service = WindService(directory_settings(settings), client=feed_client(batches))

        assert await service.list_all_stations(now) == []
        assert await service.resolve_nearest_wind(59.47, 24.83, now) == Outcome.NO_DATA


class TestListAllStations:
    @respx.mock
    @pytest.mark.asyncio
    async def test_lists_fixture_feeds(
        self, settings: Settings, inland_payload: dict, coastal_payload: dict, now: datetime
    ):
        inland, coastal = settings.emhi.feeds
        respx.get(inland.url).mock(return_value=httpx.Response(200, json=inland_payload))
        respx.get(coastal.url).mock(return_value=httpx.Response(200, json=coastal_payload))
        service = WindService(settings)

        stations = await service.list_all_stations(now)
        await service.close()

        assert [s.name for s in stations] == ["Tallinn-Harku", "Tartu-Tõravere", "Pirita RJ"]

    @pytest.mark.asyncio
    async def test_feed_failure_propagates(self, settings: Settings, now: datetime):
        client = MagicMock(spec=EMHIClient)
        client.fetch_feed = AsyncMock(side_effect=UpstreamError("https://x", status_code=500))
        service = WindService(settings, client=client)

        with pytest.raises(FeedMergeError):
            await service.list_all_stations(now)
