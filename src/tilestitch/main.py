"""Command line entry point: stitch slippy-map tiles into one image."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from tilestitch.errors import TileStitchError
from tilestitch.service import prepare_plan, stitch
from tilestitch.settings import StitchConfig, StitchSettings, load_config, save_config
from tilestitch.shared.constants import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_USAGE,
    LOG_FORMAT,
)

logger = logging.getLogger(__name__)


def setup_logging(*, verbose: bool = False, log_file: Path | None = None) -> None:
    """Progress and diagnostics go to stdout; optionally mirrored to a file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(log_file), encoding='utf-8'))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='tilestitch',
        description='Stitch slippy-map tiles covering a bounding box into one image.',
        epilog='Example: tilestitch -o out.png 40.70 -74.02 40.72 -74.00 15 '
        "'http://tile.example.org/{z}/{x}/{y}.png'",
    )
    parser.add_argument('minlat', type=float)
    parser.add_argument('minlon', type=float)
    parser.add_argument('maxlat', type=float)
    parser.add_argument('maxlon', type=float)
    parser.add_argument('zoom', type=int)
    parser.add_argument('url', help='tile URL template with {z}, {x} and {y}')
    parser.add_argument('-o', '--output', required=True, type=Path, help='output file')
    parser.add_argument('-t', '--tilesize', type=int, default=None, help='tile size (default 256)')
    parser.add_argument('-c', '--config', type=Path, default=None, help='TOML config file')
    parser.add_argument('--concurrency', type=int, default=None, help='parallel fetches (default 25)')
    parser.add_argument(
        '--timeout', type=float, default=None, help='per-request timeout in seconds, 0 disables'
    )
    parser.add_argument('--user-agent', default=None)
    parser.add_argument('--log-file', type=Path, default=None)
    parser.add_argument(
        '--save-config',
        type=Path,
        default=None,
        metavar='PATH',
        help='write the effective defaults to PATH as TOML',
    )
    parser.add_argument(
        '--plan-only', action='store_true', help='print the tile plan without fetching'
    )
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def resolve_settings(args: argparse.Namespace) -> StitchSettings:
    """Merge config file defaults with command line values (command line wins)."""
    config = load_config(args.config) if args.config else StitchConfig()
    overrides = {
        'tile_size': args.tilesize,
        'concurrency': args.concurrency,
        'timeout': args.timeout,
        'user_agent': args.user_agent,
    }
    data = config.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    data.update(
        min_lat=args.minlat,
        min_lon=args.minlon,
        max_lat=args.maxlat,
        max_lon=args.maxlon,
        zoom=args.zoom,
        url=args.url,
        output=args.output,
    )
    return StitchSettings.model_validate(data)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        setup_logging(verbose=args.verbose, log_file=args.log_file)
    except OSError as e:
        print(f'Cannot open log file {args.log_file}: {e}', file=sys.stderr)
        return EXIT_USAGE

    try:
        settings = resolve_settings(args)
    except (ValidationError, ValueError, FileNotFoundError) as e:
        logger.error('Invalid arguments: %s', e)
        return EXIT_USAGE

    if args.save_config is not None:
        try:
            save_config(args.save_config, StitchConfig.model_validate(settings.model_dump()))
        except OSError as e:
            logger.error('Cannot write config %s: %s', args.save_config, e)
            return EXIT_USAGE
        logger.info('Config written to %s', args.save_config)

    try:
        if args.plan_only:
            plan = prepare_plan(settings)
            logger.info('Plan only: %d tiles would be fetched', plan.tile_count)
            return EXIT_OK
        result = asyncio.run(stitch(settings))
    except TileStitchError as e:
        logger.error('Stitch failed: %s', e)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning('Interrupted')
        return EXIT_INTERRUPTED

    logger.info('Fetched %d tiles, %d missing', result.fetched, result.failed)
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
