"""Command line interface for recording and summarizing match history."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Tuple

from .aggregations import average_rating, match_history, peak_rating, valley_rating
from .config import ConfigError, load_tracker_config, resolve_data_dir
from .db import (
    ConstraintError,
    MatchStore,
    SchemaMismatchError,
    StorageError,
    StoreMissingError,
    store_exists,
)
from .export import EXPORT_FORMATS, export_matches
from .models import OUTCOMES, ErrorKind, MatchRecord, TrackerError
from .reference import VALID_ROLES
from .validation import validate, validate_player_name, validate_role


LOGGER_NAME = "ow_tracker"
LOG_FORMAT_DEFAULT = "%(message)s"
LOG_FORMAT_VERBOSE = "%(asctime)s %(name)s: %(message)s"

logger = logging.getLogger(LOGGER_NAME)
logger.setLevel(logging.INFO)

default_log_formatter = logging.Formatter(LOG_FORMAT_DEFAULT)
default_log_handler = logging.StreamHandler()
default_log_handler.setLevel(logging.WARNING)
default_log_handler.setFormatter(default_log_formatter)

logger.addHandler(default_log_handler)

DEFAULT_EXPORT_FORMAT = "parquet"


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Record match results per player and role, and query them.",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding the per-player databases (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="TOML configuration file providing a [tracker] table",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    match_parser = subparsers.add_parser("match", help="Record one match")
    match_parser.add_argument("player", help="Player name; selects the database file")
    match_parser.add_argument("role", help=f"One of: {', '.join(sorted(VALID_ROLES))}")
    match_parser.add_argument("rating", type=int, help="Skill rating after the match")
    match_parser.add_argument("map", help="Map name or shorthand (e.g. 'kr', 'r66')")
    match_parser.add_argument("comment", nargs="?", default=None, help="Optional comment")
    match_parser.add_argument(
        "-n",
        "--new",
        action="store_true",
        help="Create the player's database if it does not exist yet",
    )

    def add_player_role_args(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument("player", help="Player name")
        subparser.add_argument("role", help=f"One of: {', '.join(sorted(VALID_ROLES))}")

    def add_outcome_arg(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "outcome",
            nargs="?",
            choices=OUTCOMES,
            default=None,
            help="Only include wins or losses (rating rose or fell)",
        )

    average_parser = subparsers.add_parser(
        "average", help="Average rating for a role"
    )
    add_player_role_args(average_parser)
    add_outcome_arg(average_parser)
    average_parser.add_argument(
        "-c",
        "--count",
        action="store_true",
        help="Also report how many matches were averaged",
    )

    display_parser = subparsers.add_parser(
        "display", help="Show stored matches for a role"
    )
    add_player_role_args(display_parser)
    add_outcome_arg(display_parser)

    peak_parser = subparsers.add_parser("peak", help="Highest rating for a role")
    add_player_role_args(peak_parser)

    valley_parser = subparsers.add_parser("valley", help="Lowest rating for a role")
    add_player_role_args(valley_parser)

    export_parser = subparsers.add_parser(
        "export", help="Export stored matches to a file"
    )
    export_parser.add_argument("player", help="Player name")
    export_parser.add_argument(
        "--role",
        dest="roles",
        type=str.lower,
        choices=sorted(VALID_ROLES),
        action="append",
        help="Role to export. Repeatable; omit to export every role.",
    )
    export_parser.add_argument(
        "--format",
        choices=EXPORT_FORMATS,
        default=None,
        help=f"Output format (default: {DEFAULT_EXPORT_FORMAT})",
    )
    export_parser.add_argument(
        "--out", type=Path, required=True, help="Destination file path"
    )

    return parser


def _configure_verbosity(verbose: bool) -> None:
    if verbose:
        logger.setLevel(logging.DEBUG)
        default_log_handler.setLevel(logging.DEBUG)
        default_log_handler.setFormatter(logging.Formatter(LOG_FORMAT_VERBOSE))
    else:
        logger.setLevel(logging.INFO)
        default_log_handler.setLevel(logging.WARNING)
        default_log_handler.setFormatter(default_log_formatter)


def _load_config(
    args: argparse.Namespace,
) -> Tuple[Optional[Mapping[str, Any]], Optional[int]]:
    if args.config is None:
        return None, None
    try:
        config = load_tracker_config(args.config)
        logger.debug("Load config from '%s'", args.config)
        return config, None
    except ConfigError as exc:
        print(exc)
        logger.debug("Config error", exc_info=True)
        return None, 2


def _storage_error(exc: StorageError) -> TrackerError:
    if isinstance(exc, StoreMissingError):
        return TrackerError(
            ErrorKind.STORE_STATE,
            f"{exc} Use 'match ... -n' to create it.",
        )
    if isinstance(exc, (SchemaMismatchError, ConstraintError)):
        return TrackerError(
            ErrorKind.STORAGE,
            f"{exc} The database is likely corrupt or outdated.",
        )
    return TrackerError(ErrorKind.STORAGE, str(exc))


def _ensure_schema(store: MatchStore, role: str) -> Optional[TrackerError]:
    try:
        store.ensure_role_table(role)
    except StorageError as exc:
        return _storage_error(exc)
    return None


def _persist(store: MatchStore, record: MatchRecord) -> Optional[TrackerError]:
    try:
        store.insert_match(record.role, record.rating, record.map, record.comment)
    except StorageError as exc:
        return _storage_error(exc)
    return None


def _run_match(args: argparse.Namespace, data_dir: Path) -> Optional[TrackerError]:
    error = validate_player_name(args.player)
    if error is not None:
        return error

    record = MatchRecord.from_args(args)
    error = validate(record, store_exists(data_dir, record.player_name))
    if error is not None:
        return error

    try:
        store = MatchStore.open(data_dir, record.player_name, create=record.new_player)
    except StorageError as exc:
        return _storage_error(exc)
    with store:
        error = _ensure_schema(store, record.role)
        if error is not None:
            return error
        error = _persist(store, record)
        if error is not None:
            return error

    print(
        f"Recorded {record.role} match for '{record.player_name}': "
        f"{record.rating} on {record.map}."
    )
    return None


def _run_query(args: argparse.Namespace, data_dir: Path) -> Optional[TrackerError]:
    error = validate_player_name(args.player)
    if error is not None:
        return error
    role = args.role.lower()
    error = validate_role(role)
    if error is not None:
        return error

    try:
        store = MatchStore.open(data_dir, args.player)
    except StorageError as exc:
        return _storage_error(exc)
    with store:
        try:
            if args.command == "average":
                result: Any = average_rating(
                    store, role, outcome=args.outcome, include_count=args.count
                )
            elif args.command == "display":
                result = match_history(store, role, outcome=args.outcome)
            elif args.command == "peak":
                result = peak_rating(store, role)
            elif args.command == "valley":
                result = valley_rating(store, role)
            else:  # pragma: no cover - argparse enforces available commands
                raise ValueError(f"Unsupported command: {args.command}")
        except StorageError as exc:
            return _storage_error(exc)

    json.dump(result, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return None


def _run_export(
    args: argparse.Namespace, data_dir: Path, config: Optional[Mapping[str, Any]]
) -> Optional[TrackerError]:
    error = validate_player_name(args.player)
    if error is not None:
        return error

    fmt = args.format
    if fmt is None and config is not None:
        fmt = config.get("export_format")
    if fmt is None:
        fmt = DEFAULT_EXPORT_FORMAT

    try:
        store = MatchStore.open(data_dir, args.player)
    except StorageError as exc:
        return _storage_error(exc)
    with store:
        try:
            count = export_matches(store, args.out, fmt=fmt, roles=args.roles)
        except StorageError as exc:
            return _storage_error(exc)
        except OSError as exc:
            return TrackerError(
                ErrorKind.STORAGE, f"Failed to write export to '{args.out}': {exc}"
            )

    print(f"Exported {count} matches for '{args.player}' to {args.out}.")
    return None


def _dispatch(
    args: argparse.Namespace, data_dir: Path, config: Optional[Mapping[str, Any]]
) -> Optional[TrackerError]:
    if args.command == "match":
        return _run_match(args, data_dir)
    if args.command in ("average", "display", "peak", "valley"):
        return _run_query(args, data_dir)
    if args.command == "export":
        return _run_export(args, data_dir, config)
    raise ValueError(f"Unsupported command: {args.command}")


def run(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    _configure_verbosity(args.verbose)

    config, config_error = _load_config(args)
    if config_error is not None:
        return config_error

    data_dir = resolve_data_dir(args.data_dir, config)
    logger.debug("Using data directory '%s'", data_dir)

    try:
        error = _dispatch(args, data_dir, config)
    except Exception as exc:
        logger.debug("Unhandled error", exc_info=True)
        error = TrackerError(ErrorKind.UNEXPECTED, f"Unexpected error: {exc}")

    if error is not None:
        print(error.message)
        logger.debug("Command failed (%s)", error.kind.value)
        return error.exit_code
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
