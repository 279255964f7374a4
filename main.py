"""
ROOMVIEW - Main Entry Point
===========================
Run generator -> Decode -> Store -> Render

Runs an external map generator once and reports the room it produced, or
opens the interactive viewer.

Usage:
    # Headless: run once and print a summary
    python main.py --python python3 --generator gen.py --script rooms.lua

    # Also print the terrain grid
    python main.py --python python3 --generator gen.py --script rooms.lua --ascii

    # Launch the viewer with the paths pre-filled
    python main.py --generator gen.py --script rooms.lua --gui

Exit codes: 0 success, 1 generation error, 2 bad arguments.
"""

import argparse
import json
import sys
import logging

from roomview.config import ViewerConfig, configure_logging
from roomview.core.definitions import GeneratorPaths, SYMBOL_NAMES
from roomview.pipeline import AppContext, GenerationPipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='roomview - run a map generator and inspect the room it prints'
    )
    parser.add_argument(
        '--python', '--interpreter', dest='interpreter', type=str,
        help='Interpreter used to launch the generator (e.g. python3)'
    )
    parser.add_argument(
        '--generator', '-g', type=str,
        help='Generator program'
    )
    parser.add_argument(
        '--script', '-s', type=str,
        help='Script passed to the generator after -p'
    )
    parser.add_argument(
        '--gui', action='store_true',
        help='Launch the interactive viewer'
    )
    parser.add_argument(
        '--strict-keys', action='store_true',
        help='Reject documents with more than one top-level room'
    )
    parser.add_argument(
        '--timeout', '-t', type=float,
        help='Kill the generator after this many seconds'
    )
    parser.add_argument(
        '--ascii', action='store_true',
        help='Print the terrain grid'
    )
    parser.add_argument(
        '--json', action='store_true',
        help='Print the decoded room as JSON'
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true',
        help='Debug logging'
    )
    return parser


def make_config(args) -> ViewerConfig:
    overrides = {}
    if args.strict_keys:
        overrides['key_policy'] = 'strict'
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ValueError("--timeout must be positive")
        overrides['run_timeout'] = args.timeout
    return ViewerConfig.from_env(**overrides)


def print_summary(name: str, room) -> None:
    # User-facing output - keep print() for CLI summary
    print(f"\n{'='*60}")
    print(f"ROOM: {name}")
    print(f"{'='*60}")
    print(f"  Size: {room.width} x {room.height} ({room.cell_count} cells)")
    for symbol, count in sorted(room.symbols().items(), key=lambda kv: -kv[1]):
        label = SYMBOL_NAMES.get(symbol, 'unknown')
        print(f"  {symbol!r:>5} {label:<10} {count}")


def run_headless(args, config: ViewerConfig) -> int:
    """Run the generator once and print the result. Returns the exit code."""
    paths = GeneratorPaths(args.interpreter, args.generator, args.script)
    context = AppContext(config=config, paths=paths)
    pipeline = GenerationPipeline(context)

    if not pipeline.run_sync():
        logger.error('Generation failed: %s', context.last_error)
        print(f"\nGeneration failed: {context.last_error}", file=sys.stderr)
        return 1

    # Render pass: proves the room lays out and returns the state machine to IDLE
    pipeline.tick()

    name, room = pipeline.render_target()
    if args.json:
        print(json.dumps({name: room.to_dict()}, indent=2))
    else:
        print_summary(name, room)
        print(f"  Tiles: {len(context.tiles)}")

    if args.ascii:
        print("\n" + "="*60)
        print("ASCII VISUALIZATION")
        print("="*60)
        print(room.to_ascii())
    return 0


def run_gui(args, config: ViewerConfig) -> int:
    from gui_runner import RoomViewerGUI

    paths = GeneratorPaths(args.interpreter, args.generator, args.script)
    gui = RoomViewerGUI(config, paths=paths)
    gui.run()
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = make_config(args)
    except ValueError as e:
        parser.error(str(e))

    if args.gui:
        return run_gui(args, config)
    return run_headless(args, config)


if __name__ == "__main__":
    sys.exit(main())
