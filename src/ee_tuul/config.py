"""Configuration settings loaded from environment variables."""

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings

from .schemas.enums import CoordinateFormat, NameMatch, PayloadFormat, PayloadShape, WindMode

EMHI_BASE_URL = "https://publicapi.envir.ee/v1"


class FieldMap(BaseModel):
    """Upstream field names for one feed's station reports."""

    name: str = "Jaam"
    timestamp: str = "Time"
    wind_speed: str = "ws10ma"
    wind_direction: str = "wd10ma"
    lat_deg: str = "LaiusKraad"
    lat_min: str = "LaiusMinut"
    lat_sec: str = "LaiusSekund"
    lon_deg: str = "PikkusKraad"
    lon_min: str = "PikkusMinut"
    lon_sec: str = "PikkusSekund"
    latitude: str = "Laius"
    longitude: str = "Pikkus"
    distance: str = "kaugus"


class FeedConfig(BaseModel):
    """One upstream station feed: where it lives and how its payload looks."""

    name: str
    url: str
    shape: PayloadShape = PayloadShape.NESTED
    format: PayloadFormat = PayloadFormat.JSON
    coordinates: CoordinateFormat = CoordinateFormat.DMS
    field_map: FieldMap = FieldMap()
    headers: dict[str, str] = {}


def _default_feeds(base_url: str) -> list[FeedConfig]:
    return [
        FeedConfig(
            name="inland",
            url=f"{base_url}/combinedWeatherData/frontPageWeatherToday",
        ),
        FeedConfig(
            name="coastal",
            url=f"{base_url}/combinedWeatherData/coastalSeaStationsWeatherToday",
        ),
    ]


class EMHIConfig(BaseSettings):
    """EMHI public API configuration."""

    base_url: str = EMHI_BASE_URL
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.36"
    )
    accept: str = "application/json"
    timeout_seconds: float = 10.0
    # Inland and coastal feeds under base_url unless EMHI_FEEDS is set
    feeds: list[FeedConfig] = []

    # Nearest station lookup (reports a distance per entry)
    nearest_path: str = "/combinedWeatherData/nearestStationByCoordinates"
    nearest_shape: PayloadShape = PayloadShape.NESTED
    nearest_format: PayloadFormat = PayloadFormat.JSON
    nearest_fields: FieldMap = FieldMap(name="nimi")

    # Hourly wind observations, parameterized by date and hour
    hourly_wind_path: str = "/wind/observationWind"
    hourly_wind_shape: PayloadShape = PayloadShape.NESTED
    hourly_wind_format: PayloadFormat = PayloadFormat.JSON
    hourly_wind_fields: FieldMap = FieldMap()

    model_config = {"env_prefix": "EMHI_"}

    @model_validator(mode="after")
    def fill_default_feeds(self) -> "EMHIConfig":
        if "feeds" not in self.model_fields_set:
            self.feeds = _default_feeds(self.base_url.rstrip("/"))
        return self

    def request_headers(self) -> dict[str, str]:
        """Default headers sent with every upstream request."""
        return {"Accept": self.accept, "User-Agent": self.user_agent}


class PolicyConfig(BaseSettings):
    """Station selection policy."""

    freshness_hours: float = 2.0
    max_radius_km: float = 200.0
    lookback_hours: int = 4  # Current hour plus the previous three
    timezone: str = "Europe/Tallinn"
    wind_mode: WindMode = WindMode.HOURLY
    name_match: NameMatch = NameMatch.EXACT
    include_station_name: bool = False
    include_observation_time: bool = False
    directory_envelope: bool = False

    model_config = {"env_prefix": "POLICY_"}


class ServerConfig(BaseSettings):
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    cors_origin: str = "https://ee-tuul.vercel.app"
    wind_cache_control: str = "s-maxage=3600"
    stations_cache_control: str = "s-maxage=600, stale-while-revalidate=1200"

    model_config = {"env_prefix": "SERVER_"}


class Settings(BaseSettings):
    """Application settings combining all configs."""

    log_level: str = "INFO"
    emhi: EMHIConfig = EMHIConfig()
    policy: PolicyConfig = PolicyConfig()
    server: ServerConfig = ServerConfig()


def get_settings() -> Settings:
    """Load settings from environment."""
    return Settings()
