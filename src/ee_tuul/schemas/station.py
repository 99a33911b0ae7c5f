"""Station report schemas, from raw upstream entry to ranked candidate."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    from ..config import FieldMap


class RawStationReport(BaseModel):
    """One station entry as received from an upstream feed.

    Values are kept as upstream strings; numeric parsing happens later so a
    malformed value only disqualifies its own station.
    """

    name: str | None = None
    observed_at: str | None = None
    wind_speed: str | None = None
    wind_direction: str | None = None
    lat_deg: str | None = None
    lat_min: str | None = None
    lat_sec: str | None = None
    lon_deg: str | None = None
    lon_min: str | None = None
    lon_sec: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    distance: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> str | None:
        """Upstream mixes numbers and strings for the same field."""
        if v is None:
            return None
        if isinstance(v, str):
            v = v.strip()
            return v or None
        if isinstance(v, (int, float)):
            return str(v)
        return None

    @classmethod
    def from_entry(cls, entry: dict[str, Any], field_map: "FieldMap") -> "RawStationReport":
        """Build a report from an upstream entry using the feed's field names."""
        return cls(
            **{
                attr: entry.get(upstream_key)
                for attr, upstream_key in field_map.model_dump().items()
                if attr != "timestamp"
            },
            observed_at=entry.get(field_map.timestamp),
        )

    def has_dms_coordinates(self) -> bool:
        return self.lat_deg is not None and self.lon_deg is not None

    def has_decimal_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def has_wind(self) -> bool:
        return self.wind_speed is not None and self.wind_direction is not None

    def is_usable(self, dms: bool = True) -> bool:
        """Check that every field needed to build a CleanStation is present."""
        coords = self.has_dms_coordinates() if dms else self.has_decimal_coordinates()
        return (
            self.name is not None
            and self.observed_at is not None
            and self.has_wind()
            and coords
        )


class CleanStation(BaseModel):
    """A deduplicated, fresh, fully parsed station report."""

    name: Annotated[str, Field(min_length=1)]
    latitude: float
    longitude: float
    wind_speed: Annotated[float, Field(ge=0.0)]
    wind_direction: float
    observed_at: datetime
    feed: str | None = None

    @field_validator("observed_at")
    @classmethod
    def validate_utc_timezone(cls, v: datetime) -> datetime:
        """Ensure observed_at is timezone-aware, normalized to UTC."""
        if v.tzinfo is None:
            raise ValueError("observed_at must be timezone-aware")
        return v.astimezone(timezone.utc)


class RankedStation(CleanStation):
    """A CleanStation with its great-circle distance to the query point."""

    distance_km: Annotated[float, Field(ge=0.0)]


class PortalStation(BaseModel):
    """Station as published to the web map portal."""

    name: str
    latitude: float
    longitude: float
    wind_speed: float
    wind_direction: float
    observation_time: str  # HH:MM, 24-hour, local time


class DirectoryResult(BaseModel):
    """Envelope for the full station directory."""

    retrieved_at: datetime
    stations: list[PortalStation]
