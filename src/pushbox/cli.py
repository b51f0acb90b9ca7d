from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

from pushbox.engine.game import Engine
from pushbox.engine.serialize import parse_directions, state_to_dict
from pushbox.paths import Paths, get_paths
from pushbox.services.levels import ContentError, LevelService
from pushbox.services.telemetry import TelemetryRecorder, TelemetryService

EXIT_WON = 0
EXIT_ERROR = 1
EXIT_NOT_WON = 2


def _build_parser(paths: Paths) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pushbox")
    parser.add_argument("--levels", type=Path, default=None, help="level pack JSON file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("validate", help="validate a level pack")

    play = sub.add_parser("play", help="replay a move string on one level")
    play.add_argument("level_id")
    play.add_argument("moves", help='moves as U/D/L/R characters, e.g. "RRDL"')
    play.add_argument(
        "--telemetry",
        type=Path,
        nargs="?",
        default=None,
        const=paths.userdata_dir / "telemetry.jsonl",
        help="append events as JSON Lines (default file: userdata/telemetry.jsonl)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    paths = get_paths()
    args = _build_parser(paths).parse_args(argv)
    levels = LevelService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)

    try:
        pack = levels.load_pack(args.levels)
    except ContentError as e:
        print(str(e), file=sys.stderr)
        return EXIT_ERROR

    if args.command == "validate":
        print(f"OK: {len(pack)} levels")
        return 0

    try:
        level = pack.get(args.level_id)
    except KeyError:
        print(f"Unknown level id: {args.level_id}", file=sys.stderr)
        return EXIT_ERROR
    try:
        directions = parse_directions(args.moves)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return EXIT_ERROR

    engine = Engine()
    if args.telemetry is not None:
        TelemetryRecorder(TelemetryService(args.telemetry), engine).attach()

    result = engine.load(level)
    if not result.ok:
        print(f"Cannot load {level.id}: {result.error}", file=sys.stderr)
        return EXIT_ERROR

    for d in directions:
        if engine.status == "won":
            break
        engine.move(d)

    print(json.dumps(state_to_dict(engine), indent=2))
    return EXIT_WON if engine.status == "won" else EXIT_NOT_WON


if __name__ == "__main__":
    raise SystemExit(main())
