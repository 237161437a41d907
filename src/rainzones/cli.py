#!/usr/bin/env python3
"""
Command-line interface for rainzones

Extracts rain polygons for a bounding box, checks a single point, dumps
the whole frame timeline, or downloads a raw radar tile. Results go to
stdout as JSON; logs go to stderr.
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from .core.base import BoundingBox, TimeMode
from .core.errors import NetworkError, RainZoneError
from .core.logging import configure_from_env, get_logger, setup_logging
from .core.retry import retry_with_backoff

logger = get_logger(__name__)

MODE_CHOICES = [mode.value for mode in TimeMode]


def _add_bbox_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--north', type=float, required=True, help='Northern latitude')
    parser.add_argument('--south', type=float, required=True, help='Southern latitude')
    parser.add_argument('--east', type=float, required=True, help='Eastern longitude')
    parser.add_argument('--west', type=float, required=True, help='Western longitude')


def _add_mode_arguments(parser: argparse.ArgumentParser, default: TimeMode) -> None:
    parser.add_argument(
        '--mode',
        choices=MODE_CHOICES,
        default=default.value,
        help=f'Frame selection policy (default: {default.value})'
    )
    parser.add_argument('--index', type=int, help='Frame index for past_index / future_index')
    when = parser.add_mutually_exclusive_group()
    when.add_argument('--timestamp', type=int, help='Target UNIX time for closest_to_timestamp')
    when.add_argument('--at', type=str, help='Target UTC time for closest_to_timestamp (YYYY-MM-DD HH:MM)')


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser"""
    parser = argparse.ArgumentParser(
        description="Rain polygons from RainViewer radar tiles",
        prog="rainzones"
    )
    parser.add_argument('--log-level', help='Log level (default: RAINZONES_LOG_LEVEL or INFO)')
    parser.add_argument('--log-json', action='store_true', help='Emit JSON log lines')
    parser.add_argument(
        '--retries',
        type=int,
        default=0,
        help='Retry catalog network failures this many times'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    extract_parser = subparsers.add_parser('extract', help='Rain polygons for one frame')
    _add_bbox_arguments(extract_parser)
    _add_mode_arguments(extract_parser, TimeMode.LATEST_PAST)
    extract_parser.add_argument('--no-simplify', action='store_true', help='Skip Douglas-Peucker simplification')
    extract_parser.add_argument('--deadline', type=float, help='Abort after this many seconds')
    extract_parser.add_argument('--latlon', action='store_true', help='Output (lat, lon) pairs instead of (lon, lat)')

    timeline_parser = subparsers.add_parser('timeline', help='Rain polygons for every past and nowcast frame')
    _add_bbox_arguments(timeline_parser)
    timeline_parser.add_argument('--deadline', type=float, help='Abort after this many seconds')
    timeline_parser.add_argument('--latlon', action='store_true', help='Output (lat, lon) pairs')

    check_parser = subparsers.add_parser('check', help='Is it raining at a point')
    check_parser.add_argument('--lat', type=float, required=True)
    check_parser.add_argument('--lon', type=float, required=True)
    _add_mode_arguments(check_parser, TimeMode.OLDEST_PAST)

    tile_parser = subparsers.add_parser('tile', help='Download a raw radar tile')
    tile_parser.add_argument('z', type=int)
    tile_parser.add_argument('x', type=int)
    tile_parser.add_argument('y', type=int)
    tile_parser.add_argument('--output', type=Path, help='Output file (default: {z}_{x}_{y}.png)')
    tile_parser.add_argument('--tile-size', type=int)
    tile_parser.add_argument('--color-scheme', type=int)
    tile_parser.add_argument('--smooth', type=int)
    tile_parser.add_argument('--snow', type=int)

    route_parser = subparsers.add_parser('route', help='Rain polygons around a trip')
    route_parser.add_argument('--start-lat', type=float, required=True)
    route_parser.add_argument('--start-lon', type=float, required=True)
    route_parser.add_argument('--end-lat', type=float, required=True)
    route_parser.add_argument('--end-lon', type=float, required=True)
    route_parser.add_argument('--margin-km', type=float, default=30.0, help='Margin around the trip (default: 30)')
    _add_mode_arguments(route_parser, TimeMode.OLDEST_PAST)

    return parser


def parse_target_time(at: str | None, timestamp: int | None) -> int | None:
    """UNIX seconds from --timestamp or a UTC --at string"""
    import pytz

    if timestamp is not None:
        return timestamp
    if not at:
        return None
    moment = pytz.UTC.localize(datetime.strptime(at, "%Y-%m-%d %H:%M"))
    return int(moment.timestamp())


def bbox_from_args(args) -> BoundingBox:
    """Bounding box from --north/--south/--east/--west, corners in any order"""
    return BoundingBox.from_corners(args.north, args.west, args.south, args.east)


def _with_retries(func, retries: int):
    if retries <= 0:
        return func
    return retry_with_backoff(
        max_retries=retries,
        exceptions=(NetworkError,),
        on_retry=lambda attempt, delay, e: logger.warning(
            f"Catalog retry {attempt}/{retries} after {delay:.1f}s: {e}"
        ),
    )(func)


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2))


def _result_payload(result, latlon: bool) -> dict:
    from .utils.geo import swap_axes

    payload = result.to_dict()
    if latlon:
        payload["polygons"] = swap_axes(payload["polygons"])
    return payload


def extract_command(args, extractor) -> int:
    """Handle extract command"""
    extract = _with_retries(extractor.extract, args.retries)
    result = extract(
        bbox_from_args(args),
        TimeMode(args.mode),
        index=args.index,
        target_timestamp=parse_target_time(args.at, args.timestamp),
        simplify=not args.no_simplify,
        deadline_seconds=args.deadline,
    )
    _print_json(_result_payload(result, args.latlon))
    return 0


def timeline_command(args, extractor) -> int:
    """Handle timeline command"""
    extract_all = _with_retries(extractor.extract_all, args.retries)
    results = extract_all(bbox_from_args(args), deadline_seconds=args.deadline)
    _print_json([_result_payload(result, args.latlon) for result in results])
    return 0


def check_command(args, extractor) -> int:
    """Handle check command"""
    is_raining_at = _with_retries(extractor.is_raining_at, args.retries)
    raining = is_raining_at(
        args.lat,
        args.lon,
        TimeMode(args.mode),
        index=args.index,
        target_timestamp=parse_target_time(args.at, args.timestamp),
    )
    _print_json({"latitude": args.lat, "longitude": args.lon, "isRaining": raining})
    return 0


def tile_command(args, extractor) -> int:
    """Handle tile command"""
    fetch_tile_bytes = _with_retries(extractor.fetch_tile_bytes, args.retries)
    data = fetch_tile_bytes(
        args.z,
        args.x,
        args.y,
        tile_size=args.tile_size,
        color_scheme=args.color_scheme,
        smooth=args.smooth,
        snow=args.snow,
    )
    if data is None:
        logger.error(f"Tile {args.z}/{args.x}/{args.y} not found")
        return 1

    output = args.output or Path(f"{args.z}_{args.x}_{args.y}.png")
    output.write_bytes(data)
    logger.info(f"Saved tile to {output} ({len(data)} bytes)")
    return 0


def route_command(args, extractor) -> int:
    """Handle route command"""
    from .utils.geo import expanded_area

    bbox = expanded_area(args.start_lat, args.start_lon, args.end_lat, args.end_lon, args.margin_km)
    extract = _with_retries(extractor.extract, args.retries)
    result = extract(
        bbox,
        TimeMode(args.mode),
        index=args.index,
        target_timestamp=parse_target_time(args.at, args.timestamp),
    )
    payload = _result_payload(result, latlon=True)
    payload["boundingBox"] = {
        "latMin": bbox.south,
        "latMax": bbox.north,
        "lonMin": bbox.west,
        "lonMax": bbox.east,
    }
    _print_json(payload)
    return 0


COMMANDS = {
    'extract': extract_command,
    'timeline': timeline_command,
    'check': check_command,
    'tile': tile_command,
    'route': route_command,
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.log_level or args.log_json:
        setup_logging(level=args.log_level or "INFO", structured=args.log_json)
    else:
        configure_from_env()

    from .config.settings import load_settings
    from .processing.extractor import RainPolygonExtractor

    try:
        extractor = RainPolygonExtractor(load_settings())
        return COMMANDS[args.command](args, extractor)
    except RainZoneError as e:
        logger.error(e.message, extra={"stage": e.stage})
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Operation cancelled by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
