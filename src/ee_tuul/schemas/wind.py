"""Resolved wind observation schema."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field

from .enums import Outcome


class WindObservation(BaseModel):
    """The answer to a nearest-station wind request."""

    wind_speed: Annotated[float, Field(ge=0.0)]
    wind_direction: Annotated[float, Field(ge=0.0, le=360.0)]
    station_name: str | None = None
    observed_at: datetime | None = None
    distance_km: Annotated[float | None, Field(ge=0.0)] = None


WindResolution = WindObservation | Outcome
