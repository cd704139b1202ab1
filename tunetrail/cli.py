"""Command line front end for playing, validating and reporting."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Optional, Sequence

from .attempts import aggregate, for_kid, format_report, record_from_outcome
from .config import Directories, load_catalog, open_attempt_log, resolve_directories
from .game import execute, parse_program
from .levels import LevelCatalog, NotFoundError, SolutionValidator


def bootstrap_directories() -> Directories:
    """Return resolved directories and print a short bootstrap message."""

    directories = resolve_directories()
    level_root = directories.level_root or "built-in catalog"
    message = (
        "TuneTrail bootstrap\n"
        f"  data: {directories.data_root}\n"
        f"  levels: {level_root}\n"
        f"  solutions: {directories.solutions_root}\n"
        "Set the environment variables to point to custom directories if needed."
    )
    print(message)
    return directories


def _list_levels(catalog: LevelCatalog) -> None:
    print("Available levels")
    for (level, game), config in catalog.items():
        print(
            f"  level {level} game {game}: start {config.start} -> goal {config.goal}, "
            f"{len(config.notes)} notes, {config.max_moves} moves"
        )


def _play(args: argparse.Namespace, directories: Directories, catalog: LevelCatalog) -> int:
    if args.record and args.kid is None:
        print("--record needs --kid to attribute the attempt", file=sys.stderr)
        return 2
    try:
        commands = parse_program(args.commands)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    config = catalog.lookup(args.level, args.game)
    started = time.perf_counter()
    outcome = execute(config, commands)
    elapsed_ms = int((time.perf_counter() - started) * 1000)

    print(f"=== Level {args.level} - Game {args.game} ===")
    print(f"Program: {' '.join(command.name for command in commands) or '(empty)'}")
    print(f"Final position: {outcome.position}")
    print(f"Moves: {outcome.moves_executed} / {config.max_moves}")
    print(f"Notes: {len(outcome.notes_collected)} / {len(config.notes)}")
    if outcome.success:
        print("Great job! You reached the goal and collected all notes.")
    else:
        print(f"Not yet ({outcome.failure.value}).")

    if args.record:
        log = open_attempt_log(directories)
        log.append(
            record_from_outcome(
                outcome,
                kid_id=args.kid,
                level=args.level,
                game=args.game,
                elapsed_ms=elapsed_ms,
            )
        )
        print(f"Attempt saved to {log.path}")
    return 0 if outcome.success else 1


def _report(args: argparse.Namespace, directories: Directories) -> int:
    records = open_attempt_log(directories).records()
    kid_id = None if args.all_kids else args.kid
    if kid_id is not None:
        records = list(for_kid(records, kid_id))
    print(format_report(aggregate(records), kid_id), end="")
    return 0


def _describe(exc: Exception) -> str:
    if isinstance(exc, KeyError):
        return f"missing field {exc.args[0]!r}"
    if isinstance(exc, FileNotFoundError):
        return f"no solution file {exc.args[0]}" if exc.args else "no solution file"
    return str(exc)


def _validate(args: argparse.Namespace, directories: Directories, catalog: LevelCatalog) -> int:
    validator = SolutionValidator(catalog, directories.solutions_root)
    names = args.names or validator.names()
    failures = 0
    for name in names:
        try:
            ok = validator.validate(name)
        except (OSError, LookupError, TypeError, ValueError) as exc:
            failures += 1
            print(f"  {name}: FAILED ({_describe(exc)})")
            continue
        failures += 0 if ok else 1
        print(f"  {name}: {'ok' if ok else 'FAILED'}")
    print(f"{len(names) - failures}/{len(names)} solutions valid")
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tunetrail", description="TuneTrail maze runner")
    parser.add_argument("--list-levels", action="store_true", help="List the available mazes and exit.")
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print resolved directories and exit.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command")

    play = subparsers.add_parser("play", help="Run a program against a maze.")
    play.add_argument("level", type=int)
    play.add_argument("game", type=int)
    play.add_argument("commands", nargs="*", help="STEP, LEFT, UP or DOWN")
    play.add_argument("--record", action="store_true", help="Append the attempt to the log.")
    play.add_argument("--kid", type=int, help="Kid id stored with the attempt; required with --record.")

    report = subparsers.add_parser("report", help="Show success rates per level.")
    scope = report.add_mutually_exclusive_group(required=True)
    scope.add_argument("--kid", type=int, help="Kid whose attempts are counted.")
    scope.add_argument("--all", dest="all_kids", action="store_true", help="Count every kid's attempts.")

    validate = subparsers.add_parser("validate", help="Check stored solution programs.")
    validate.add_argument("names", nargs="*")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.info:
        bootstrap_directories()
        return 0

    directories = resolve_directories()
    catalog = load_catalog(directories)

    if args.list_levels:
        _list_levels(catalog)
        return 0

    try:
        if args.command == "play":
            return _play(args, directories, catalog)
        if args.command == "report":
            return _report(args, directories)
        if args.command == "validate":
            return _validate(args, directories, catalog)
    except NotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    parser.print_help()
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    run()
