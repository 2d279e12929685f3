"""sms-tracker CLI entry point."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from smstracker.aggregate import TrackerSummary
from smstracker.autotrack import AutoTracker, file_source
from smstracker.config import Config, load_config
from smstracker.persistence import InvalidSaveError, load_snapshot, save_snapshot
from smstracker.report import export_report, format_completion, format_report
from smstracker.stores import ShineStatus
from smstracker.tracker import Tracker
from smstracker.validator import validate_world
from smstracker.world import CoinKey, RoutingKey, WorldDataError, load_world


def _parse_assignment(raw: str) -> tuple[RoutingKey, str]:
    key, sep, zone_id = raw.partition("=")
    if not sep or not key:
        raise ValueError(f"Expected KEY=ZONE, got '{raw}'")
    return RoutingKey.decode(key), zone_id


def _print_summary(summary: TrackerSummary) -> None:
    state = "open" if summary.gate_open else "closed"
    print(f"World: {format_completion(summary.world)}  (boss gate {state})")


def main() -> int:
    """Main entry point for the sms-tracker command."""
    parser = argparse.ArgumentParser(
        description="sms-tracker - Track progress through a randomized Sunshine world",
    )
    parser.add_argument(
        "config",
        type=Path,
        nargs="?",
        default=None,
        help="Path to config.toml (optional, uses defaults if not provided)",
    )
    parser.add_argument(
        "--world",
        type=Path,
        help="World data file, JSON or YAML (overrides config)",
    )
    parser.add_argument(
        "--load",
        type=Path,
        help="Save file to restore before applying edits",
    )
    parser.add_argument(
        "--assign",
        action="append",
        default=[],
        metavar="KEY=ZONE",
        help="Assign an entrance or group::exit key to a zone (repeatable)",
    )
    parser.add_argument(
        "--collect",
        action="append",
        default=[],
        metavar="SHINE",
        help="Mark a shine collected (repeatable)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="SHINE",
        help="Mark a shine excluded from completion (repeatable)",
    )
    parser.add_argument(
        "--coin",
        action="append",
        default=[],
        metavar="GROUP::COIN",
        help="Toggle a blue coin (repeatable)",
    )
    parser.add_argument(
        "--memory",
        type=Path,
        help="Memory-state JSON to merge once (overrides config)",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep polling the memory file until interrupted",
    )
    parser.add_argument(
        "--save",
        type=Path,
        help="Write a save file (a directory gets a timestamped name)",
    )
    parser.add_argument(
        "--report",
        type=Path,
        help="Write the progress report to a file instead of stdout",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate world data and assignments",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Load or create config
    if args.config:
        try:
            config = load_config(args.config)
            if args.verbose:
                print(f"Loaded config from {args.config}")
        except FileNotFoundError:
            print(f"Error: Config file not found: {args.config}", file=sys.stderr)
            return 1
        except ValueError as e:
            print(f"Error: Invalid config: {e}", file=sys.stderr)
            return 1
    else:
        config = Config()
        if args.verbose:
            print("Using default configuration")

    world_path = args.world or Path(config.paths.world_file)
    try:
        world = load_world(world_path)
    except FileNotFoundError:
        print(f"Error: World file not found: {world_path}", file=sys.stderr)
        return 1
    except WorldDataError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        print(
            f"Loaded {len(world.zones)} zones, {len(world.entrances)} entrances, "
            f"{len(world.unlocks)} unlocks, {len(world.blue_coins)} blue coins"
        )

    tracker = Tracker.from_world(world, auto_track=config.tracker.auto_track_default)

    if args.load:
        try:
            tracker.load_snapshot(load_snapshot(args.load))
        except FileNotFoundError:
            print(f"Error: Save file not found: {args.load}", file=sys.stderr)
            return 1
        except InvalidSaveError as e:
            print(f"Error loading save file: {e}", file=sys.stderr)
            return 1

    # Apply edits in order: topology first, then progress
    try:
        for raw in args.assign:
            key, zone_id = _parse_assignment(raw)
            tracker.assign(key, zone_id)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for shine_id in args.collect:
        tracker.set_shine_status(shine_id, ShineStatus.COLLECTED)
    for shine_id in args.exclude:
        tracker.set_shine_status(shine_id, ShineStatus.EXCLUDED)
    for raw in args.coin:
        tracker.toggle_coin(CoinKey.decode(raw))

    memory_path = args.memory or (
        Path(config.paths.memory_file) if config.paths.memory_file else None
    )
    if memory_path:
        auto = AutoTracker(
            tracker, file_source(memory_path), interval=config.tracker.interval_seconds
        )
        auto.poll()
        if args.verbose and auto.last_state:
            print(
                f"Game hooked: {auto.connected} "
                f"({auto.last_state.current_level or '---'})"
            )
        if args.watch:
            tracker.subscribe(_print_summary)
            auto.start()
            print(f"Watching {memory_path} every {auto.interval:.1f}s (Ctrl+C to stop)")
            try:
                while True:
                    time.sleep(1)
            except KeyboardInterrupt:
                print()
            finally:
                auto.stop()

    if args.validate:
        result = validate_world(world, tracker.assignments)
        for warning in result.warnings:
            print(f"WARNING: {warning}", file=sys.stderr)
        for error in result.errors:
            print(f"ERROR: {error}", file=sys.stderr)
        if not result.is_valid:
            print(f"{len(result.errors)} errors, {len(result.warnings)} warnings")
            return 1

    if args.report:
        export_report(tracker, args.report)
        print(f"Written: {args.report}")
    else:
        print(format_report(tracker))

    if args.save:
        path = save_snapshot(args.save, tracker.snapshot())
        print(f"Written: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
