"""HTTP API for the Garmin wind field and the web map portal."""

import logging
import math
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .assembler import directory_payload, wind_payload
from .config import Settings, get_settings
from .errors import EETuulError, PayloadShapeError
from .geo import to_float
from .schemas import Outcome
from .service import WindService

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    service: WindService | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Application settings; loaded from the environment if omitted.
        service: Optional pre-built service (tests inject one with a mocked client).
    """
    settings = settings or get_settings()
    service = service or WindService(settings)
    policy = settings.policy

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await service.close()

    app = FastAPI(title="ee-tuul", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.server.cors_origin],
        allow_methods=["GET"],
    )

    @app.get("/api/wind")
    async def api_wind(
        lat: str | None = Query(None),
        lon: str | None = Query(None),
    ) -> JSONResponse:
        lat_value = to_float(lat)
        lon_value = to_float(lon)
        if not (math.isfinite(lat_value) and math.isfinite(lon_value)):
            return JSONResponse({"error": "Missing lat/lon parameters"}, status_code=400)

        try:
            result = await service.resolve_nearest_wind(lat_value, lon_value)
        except EETuulError as e:
            logger.error("Wind request failed: %s", e)
            return JSONResponse({"error": str(e)}, status_code=500)

        payload = wind_payload(
            result,
            service.tz,
            include_station_name=policy.include_station_name,
            include_observation_time=policy.include_observation_time,
        )
        if isinstance(result, Outcome):
            status_code = 500 if result.is_failure else 200
            return JSONResponse(payload, status_code=status_code)

        return JSONResponse(
            payload,
            headers={"Cache-Control": settings.server.wind_cache_control},
        )

    @app.get("/api/all-stations")
    async def api_all_stations() -> JSONResponse:
        logger.info("New portal request: /api/all-stations")
        try:
            stations = await service.list_all_stations()
        except PayloadShapeError as e:
            logger.error("Station list request failed: %s", e)
            return JSONResponse({"error": e.code}, status_code=500)
        except EETuulError as e:
            logger.error("Station list request failed: %s", e)
            return JSONResponse({"error": str(e)}, status_code=500)

        payload = directory_payload(stations, service.tz, envelope=policy.directory_envelope)
        logger.info("Sending %d stations to the portal", len(stations))
        return JSONResponse(
            payload,
            headers={"Cache-Control": settings.server.stations_cache_control},
        )

    return app
