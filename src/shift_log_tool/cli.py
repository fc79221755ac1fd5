#!/usr/bin/env python3
"""
Main CLI entry point for the shift log tool.

    shift-log save --closer Sam --notes Alpha "check belt" --photo Beta beta.jpg
    shift-log summary --closer Sam --notes Alpha "check belt"
    shift-log history [--all]
"""
import sys
import argparse
import asyncio
import logging
from dataclasses import replace
from typing import Dict, List, Optional

from rich.console import Console

from .api import LogServiceClient, LogServiceError
from .core.config import AppConfig, OversizePolicy, load_config
from .core.errors import ShiftLogError
from .core.models import PRIORITIES, BasicInfo, CompressedPhoto, RawPhotoInput, StationInput, StationEntry
from .core.workers import StationPayloadBuilder, build_submission
from .ui import build_copy_summary, render_history
from .utils.log_utils import get_logger, configure_logging

logger = get_logger(__name__)
console = Console()


def _add_log_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--closer', default='', help='Name of the person closing the shift')
    parser.add_argument('--date', default='', help='Log date as YYYY-MM-DD (default: today)')
    parser.add_argument('--priority',
                        default='Medium',
                        choices=PRIORITIES,
                        help='Priority of the handoff (default: Medium)')
    parser.add_argument('--units', type=int, default=0, help='Units left on the bench (default: 0)')
    parser.add_argument('--handoff', default='', help='Handoff notes for the next shift')
    parser.add_argument('--notes',
                        nargs=2,
                        action='append',
                        default=[],
                        metavar=('STATION', 'TEXT'),
                        help='Notes for a workstation (repeatable)')
    parser.add_argument('--photo',
                        nargs=2,
                        action='append',
                        default=[],
                        metavar=('STATION', 'PATH'),
                        help='Photo for a workstation (repeatable)')
    parser.add_argument('--reject-oversize',
                        action='store_true',
                        help='Fail instead of recompressing photos larger than the size limit')


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description='Record end-of-shift closing logs')
    parser.add_argument('--api-url', help='Log service URL (default: $SHIFT_LOG_API_URL)')
    parser.add_argument('--log-level',
                        choices=['debug', 'info', 'warning', 'error', 'critical', 'none'],
                        default='warning',
                        help="Set logging level (default: warning; 'none' disables logging)")
    parser.add_argument('--debug',
                        action='store_true',
                        help='Enable debug mode')

    sub = parser.add_subparsers(dest='command', required=True)
    save = sub.add_parser('save', help='Compress photos and upload a closing log')
    _add_log_arguments(save)
    summary = sub.add_parser('summary', help='Print a plain-text summary without uploading')
    _add_log_arguments(summary)
    history = sub.add_parser('history', help='Show stored logs')
    history.add_argument('--all',
                         action='store_true',
                         help='Show all logs instead of only the latest ones')
    return parser.parse_args(argv)


def collect_station_inputs(notes: List[List[str]], photos: List[List[str]]) -> Dict[str, StationInput]:
    """Group --notes/--photo pairs by station. Later values for a station win."""
    station_notes: Dict[str, str] = {}
    station_photos: Dict[str, RawPhotoInput] = {}
    for station, text in notes:
        station_notes[station] = text
    for station, path in photos:
        station_photos[station] = RawPhotoInput.from_path(path)

    inputs = {}
    for station in list(station_notes) + [s for s in station_photos if s not in station_notes]:
        inputs[station] = StationInput(notes=station_notes.get(station, ""), photo=station_photos.get(station))
    return inputs


def _show_originals(inputs: Dict[str, StationInput]) -> None:
    for station, entry in inputs.items():
        if entry.photo is not None:
            console.print(f"  {station}: {entry.photo.hint()}")


def _show_hint(station: str, photo: CompressedPhoto) -> None:
    console.print(f"  {station}: {photo.hint()}")


async def build_log(args, config: AppConfig):
    """Collect form fields and station entries from parsed arguments."""
    basic = BasicInfo(
        closer=args.closer,
        date=args.date,
        priority=args.priority,
        units_on_bench=args.units,
        handoff_notes=args.handoff,
    )
    if not basic.closer:
        raise ValueError("Enter closer name.")

    compression = config.compression
    if args.reject_oversize:
        compression = replace(compression, oversize_policy=OversizePolicy.REJECT)

    builder = StationPayloadBuilder(config=compression, on_compressed=_show_hint)
    inputs = collect_station_inputs(args.notes, args.photo)
    _show_originals(inputs)
    entries: List[StationEntry] = await builder.build(inputs)
    return basic, entries


async def save_log(args, config: AppConfig) -> None:
    client = LogServiceClient.from_config(config)
    console.print("Saving... compressing photos if needed.")
    basic, entries = await build_log(args, config)

    console.print("Uploading...")
    await client.save_log(build_submission(basic, entries))

    console.print("Saved. Refreshing history...")
    await show_history(config, show_all=False)
    console.print("[bold green]Saved![/bold green]")


async def show_history(config: AppConfig, show_all: bool) -> None:
    client = LogServiceClient.from_config(config)
    limit = None if show_all else config.history_limit
    logs = await client.fetch_history(limit)
    render_history(logs, console)


async def print_summary(args, config: AppConfig) -> None:
    basic, entries = await build_log(args, config)
    print(build_copy_summary(basic, entries))


async def run(args, config: AppConfig) -> None:
    logger.debug("Running %s with %d stations configured", args.command, len(config.compression.stations))
    if args.command == 'save':
        await save_log(args, config)
    elif args.command == 'summary':
        await print_summary(args, config)
    else:
        await show_history(config, show_all=args.all)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.debug:
        configure_logging(logging.DEBUG)
    elif args.log_level.lower() != 'none':
        configure_logging(getattr(logging, args.log_level.upper()))

    try:
        config = load_config(api_url=args.api_url)
        asyncio.run(run(args, config))
    except LogServiceError as err:
        action = 'Failed to load history' if args.command == 'history' else 'Save failed'
        print(f"{action}: {err}", file=sys.stderr)
        return 1
    except (ShiftLogError, ValueError, OSError) as err:
        print(f"{args.command.capitalize()} failed: {err}", file=sys.stderr)
        return 1
    except ExceptionGroup as group:
        # a station task failed with something other than a photo error
        logger.debug("Station build failed", exc_info=group)
        print(f"{args.command.capitalize()} failed: {group.exceptions[0]}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
