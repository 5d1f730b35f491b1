"""Command-line interface for calendar map."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from calendar_map.config import get_settings
from calendar_map.geocoding.errors import MisconfiguredError
from calendar_map.geocoding.service import GeocodingService
from calendar_map.logging_config import setup_logging


async def _geocode(service: GeocodingService, addresses: list[str]) -> list[dict]:
    try:
        locations = await service.geocode_many(addresses)
    finally:
        await service.aclose()

    return [
        {
            "address": address,
            "location": location.to_response() if location else None,
        }
        for address, location in zip(addresses, locations)
    ]


def geocode_command(args: argparse.Namespace) -> int:
    """Resolve addresses exactly as the web app would and print JSON."""
    settings = get_settings()

    try:
        service = GeocodingService.from_settings(settings)
    except MisconfiguredError as e:
        print(f"error: {e} (set GOOGLE_MAPS_API_KEY)", file=sys.stderr)
        return 2

    results = asyncio.run(_geocode(service, args.addresses))
    print(json.dumps(results, indent=2, ensure_ascii=False))

    return 0 if all(r["location"] for r in results) else 1


def serve_command(args: argparse.Namespace) -> int:
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "calendar_map.api.app:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Calendar Map - Today's calendar events on a map"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL (e.g. DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    geocode_parser = subparsers.add_parser(
        "geocode", help="Resolve one or more addresses to coordinates"
    )
    geocode_parser.add_argument(
        "addresses",
        nargs="+",
        help="Addresses as they appear in calendar events",
    )
    geocode_parser.set_defaults(func=geocode_command)

    serve_parser = subparsers.add_parser("serve", help="Run the web API")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.add_argument("--reload", action="store_true")
    serve_parser.set_defaults(func=serve_command)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    setup_logging(args.log_level or get_settings().log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
