"""Unit test fixtures - configs, sample entries and fixture payloads."""

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from ee_tuul.config import EMHIConfig, FeedConfig, PolicyConfig, ServerConfig, Settings

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "emhi"

BASE_URL = "https://publicapi.envir.ee/v1"
INLAND_URL = f"{BASE_URL}/combinedWeatherData/frontPageWeatherToday"
COASTAL_URL = f"{BASE_URL}/combinedWeatherData/coastalSeaStationsWeatherToday"


@pytest.fixture
def emhi_config() -> EMHIConfig:
    """EMHI configuration with the two default feeds."""
    return EMHIConfig(
        base_url=BASE_URL,
        timeout_seconds=5.0,
        feeds=[
            FeedConfig(name="inland", url=INLAND_URL),
            FeedConfig(name="coastal", url=COASTAL_URL),
        ],
    )


@pytest.fixture
def settings(emhi_config: EMHIConfig) -> Settings:
    """Application settings for testing."""
    return Settings(
        emhi=emhi_config,
        policy=PolicyConfig(),
        server=ServerConfig(cors_origin="https://ee-tuul.vercel.app"),
    )


@pytest.fixture
def make_entry() -> Callable[..., dict[str, Any]]:
    """Factory for EMHI station entries with DMS coordinates near Tallinn."""

    def _make(name: str = "Tallinn-Harku", **overrides: Any) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "Jaam": name,
            "Time": "2024-05-14T09:30:00+00:00",
            "ws10ma": "4,2",
            "wd10ma": "230",
            "LaiusKraad": "59",
            "LaiusMinut": "23",
            "LaiusSekund": "53",
            "PikkusKraad": "24",
            "PikkusMinut": "36",
            "PikkusSekund": "9",
        }
        entry.update(overrides)
        return entry

    return _make


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def inland_payload() -> dict:
    return json.loads(load_fixture("inland_sample.json"))


@pytest.fixture
def coastal_payload() -> dict:
    return json.loads(load_fixture("coastal_sample.json"))


@pytest.fixture
def nearest_payload() -> dict:
    return json.loads(load_fixture("nearest_sample.json"))


@pytest.fixture
def observation_wind_payload() -> dict:
    return json.loads(load_fixture("observation_wind_sample.json"))


@pytest.fixture
def observation_wind_xml() -> str:
    return load_fixture("observation_wind_sample.xml")
