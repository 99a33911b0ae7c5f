"""Main entry point: one-shot lookups and the HTTP server."""

import argparse
import asyncio
import json
import logging
import sys
from typing import NoReturn

from .assembler import directory_payload, wind_payload
from .config import Settings, get_settings
from .errors import EETuulError
from .schemas import Outcome
from .service import WindService

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Reduce noise from httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def run_wind(settings: Settings, lat: float, lon: float) -> int:
    """Resolve the wind near a coordinate and print it as JSON.

    Returns:
        Process exit code.
    """
    service = WindService(settings)
    try:
        result = await service.resolve_nearest_wind(lat, lon)
    except EETuulError as e:
        logger.error("Wind lookup failed: %s", e)
        print(json.dumps({"error": str(e)}))
        return 1
    finally:
        await service.close()

    payload = wind_payload(
        result,
        service.tz,
        include_station_name=settings.policy.include_station_name,
        include_observation_time=settings.policy.include_observation_time,
    )
    print(json.dumps(payload, ensure_ascii=False))
    if isinstance(result, Outcome) and result.is_failure:
        return 1
    return 0


async def run_stations(settings: Settings) -> int:
    """Print the full station directory as JSON."""
    service = WindService(settings)
    try:
        stations = await service.list_all_stations()
    except EETuulError as e:
        logger.error("Station listing failed: %s", e)
        print(json.dumps({"error": str(e)}))
        return 1
    finally:
        await service.close()

    payload = directory_payload(
        stations, service.tz, envelope=settings.policy.directory_envelope
    )
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def run_server(settings: Settings, host: str | None, port: int | None) -> int:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from .api import create_app

    app = create_app(settings)
    uvicorn.run(
        app,
        host=host or settings.server.host,
        port=port or settings.server.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="ee-tuul - nearest-station wind from EMHI observations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Wind near Tallinn
  ee-tuul wind --lat 59.437 --lon 24.7536

  # All fresh stations for the map portal
  ee-tuul stations

  # Serve /api/wind and /api/all-stations
  ee-tuul serve --port 8000

Environment Variables:
  EMHI_BASE_URL            EMHI public API base URL (default feeds included)
  EMHI_FEEDS               JSON list of station feeds (name, url, shape, ...)
  EMHI_TIMEOUT_SECONDS     Per-request timeout (default: 10)
  POLICY_WIND_MODE         hourly or directory (default: hourly)
  POLICY_MAX_RADIUS_KM     Service radius (default: 200)
  POLICY_LOOKBACK_HOURS    Hour buckets to try (default: 4)
  SERVER_CORS_ORIGIN       Allowed portal origin
        """,
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    wind = subparsers.add_parser("wind", help="Resolve wind near a coordinate")
    wind.add_argument("--lat", type=float, required=True, help="Latitude (decimal degrees)")
    wind.add_argument("--lon", type=float, required=True, help="Longitude (decimal degrees)")

    subparsers.add_parser("stations", help="List all fresh stations")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Bind address (default: SERVER_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: SERVER_PORT)")

    return parser.parse_args(argv)


def main() -> NoReturn:
    """Main entry point."""
    args = parse_args()

    # Load settings
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level)

    if args.command == "wind":
        code = asyncio.run(run_wind(settings, args.lat, args.lon))
    elif args.command == "stations":
        code = asyncio.run(run_stations(settings))
    else:
        code = run_server(settings, args.host, args.port)

    sys.exit(code)


if __name__ == "__main__":
    main()
