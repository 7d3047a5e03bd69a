from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


def _valid_backups(value: str) -> int:
    """Validate backup count is an integer in range 1-100."""
    count = int(value)
    if count < 1 or count > 100:
        raise argparse.ArgumentTypeError(f"backups must be 1-100, got {count}")
    return count


def _valid_level(value: str):
    from diaglog.severity import Severity
    try:
        return Severity.from_name(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="diaglog",
        description="diaglog -- diagnostic log file tooling",
    )
    subparsers = parser.add_subparsers(dest="command")

    rotate_parser = subparsers.add_parser("rotate", help="Rotate <app>.log into numbered backups")
    rotate_parser.add_argument("dir", type=Path, help="Directory holding the log files")
    rotate_parser.add_argument("--app", default="app", help="Application name (default: app)")
    rotate_parser.add_argument(
        "--backups", type=_valid_backups, default=10, help="Backups to keep (default: 10)"
    )

    emit_parser = subparsers.add_parser("emit", help="Write one message through the logging core")
    emit_parser.add_argument("message", help="Message text")
    emit_parser.add_argument("--level", type=_valid_level, default=None, help="Message severity (default: warning)")
    emit_parser.add_argument("--dir", type=Path, default=None, help="Log directory (default: from settings)")
    emit_parser.add_argument("--app", default=None, help="Application name (default: from settings)")
    emit_parser.add_argument("--category", default="", help="Category (logger name)")
    emit_parser.add_argument("--config", type=Path, default=None, help="JSON settings file")

    config_parser = subparsers.add_parser("config", help="Print the effective settings")
    config_parser.add_argument("--file", type=Path, default=None, help="JSON settings file")

    args = parser.parse_args(argv)

    if args.command == "rotate":
        _rotate(args.dir, args.app, args.backups)
    elif args.command == "emit":
        _emit(args)
    elif args.command == "config":
        _show_config(args.file)
    else:
        parser.print_help()
        sys.exit(1)


def _rotate(directory: Path, app: str, backups: int) -> None:
    from diaglog.rotation import rotate_logs

    if not directory.is_dir():
        print(f"  Not a directory: {directory}", file=sys.stderr)
        sys.exit(1)
    active = rotate_logs(directory, f"{app}.log", backups)
    print(f"  Rotated logs in {directory} ({backups} backups kept), {active.name} is free.")


def _emit(args: argparse.Namespace) -> None:
    from diaglog import LogContext, LogSettings, load_settings
    from diaglog.severity import Severity
    from pydantic import ValidationError

    overrides = {}
    if args.dir is not None:
        overrides["log_dir"] = args.dir
    if args.app is not None:
        overrides["app_name"] = args.app
    try:
        settings = load_settings(args.config)
        if overrides:
            # Rebuild so the field validators run on the overrides too.
            settings = LogSettings(**{**settings.model_dump(), **overrides})
    except ValidationError as exc:
        print(f"Invalid settings: {exc}", file=sys.stderr)
        sys.exit(1)

    level = args.level if args.level is not None else Severity.WARNING
    context = LogContext.get()
    context.initialize_from_settings(settings)
    try:
        logging.getLogger(args.category or None).log(level.to_python_level(), "%s", args.message)
    finally:
        context.shutdown()
    if context.log_path is not None:
        print(f"  Written to {context.log_path}")


def _show_config(path: Path | None) -> None:
    from diaglog.config.loader import load_settings
    from pydantic import ValidationError

    try:
        settings = load_settings(path)
    except ValidationError as exc:
        print(f"Invalid settings: {exc}", file=sys.stderr)
        sys.exit(1)
    data = settings.model_dump(mode="json")
    data["level"] = settings.level.name.lower()
    data["flush_level"] = settings.flush_level.name.lower()
    data["log_dir"] = str(settings.resolved_log_dir())
    print(json.dumps(data, indent=2))


if __name__ == "__main__":
    main()
