#!/usr/bin/env python3
"""Yellowcake core - command-line entry point"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from link_errors import (
    AlreadyExistsError,
    InvalidArgumentError,
    LinkError,
    TargetNotFoundError,
)

LOGGER_NAME = "yellowcake"
TIMEOUT_ENV = "YELLOWCAKE_LINK_TIMEOUT"

# caller mistakes exit with 2, platform and tool failures with 1
_USAGE_ERRORS = (InvalidArgumentError, TargetNotFoundError, AlreadyExistsError)

_installed_handlers: list[logging.Handler] = []


def setup_logging(verbose: bool = False, log_dir: Path | None = None) -> tuple[logging.Logger, Path]:
    if log_dir is None:
        log_dir = Path(os.environ.get("APPDATA", "~")).expanduser() / "Yellowcake"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "yellowcake.log"

    handler = RotatingFileHandler(
        log_file,
        maxBytes=1 * 1024 * 1024,  # 1 MB
        backupCount=2,
        encoding="utf-8",
    )
    formatter = logging.Formatter("%(asctime)s  %(levelname)-8s  %(message)s")
    handler.setFormatter(formatter)

    # modules log under their own names, so attach to the root as well
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for old in _installed_handlers:
        root.removeHandler(old)
        old.close()
    _installed_handlers.clear()
    root.addHandler(handler)
    _installed_handlers.append(handler)

    if verbose:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(logging.DEBUG)
        console.setFormatter(formatter)
        root.addHandler(console)
        _installed_handlers.append(console)
    return logger, log_dir


def link_timeout_from_env() -> float | None:
    raw = os.environ.get(TIMEOUT_ENV, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logging.getLogger(LOGGER_NAME).warning("Ignoring invalid %s=%r", TIMEOUT_ENV, raw)
        return None
    return value if value > 0 else None


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Yellowcake mod link and manifest tools")
    parser.add_argument("--verbose", action="store_true", help="Also log to stderr")
    parser.add_argument("--log-dir", type=Path)
    subparsers = parser.add_subparsers(dest="command", required=True)

    link_parser = subparsers.add_parser("link", help="Manage directory links")
    link_sub = link_parser.add_subparsers(dest="action", required=True)
    create_parser = link_sub.add_parser("create", help="Link a mod directory into the game tree")
    create_parser.add_argument("link")
    create_parser.add_argument("target")
    create_parser.add_argument("--overwrite", action="store_true", help="Replace whatever is at LINK")
    remove_parser = link_sub.add_parser("remove", help="Remove a link (or plain directory)")
    remove_parser.add_argument("link")
    inspect_parser = link_sub.add_parser("inspect", help="Show what a path currently is")
    inspect_parser.add_argument("path")

    mods_parser = subparsers.add_parser("mods", help="Catalog tools")
    mods_sub = mods_parser.add_subparsers(dest="action", required=True)
    status_parser = mods_sub.add_parser("status", help="Classify and update-check a catalog file")
    status_parser.add_argument("manifest", type=Path)

    version_parser = subparsers.add_parser("version", help="Version helpers")
    version_sub = version_parser.add_subparsers(dest="action", required=True)
    compare_parser = version_sub.add_parser("compare", help="Compare two version strings")
    compare_parser.add_argument("a")
    compare_parser.add_argument("b")
    return parser.parse_args(argv)


def _flags(record) -> str:
    labels = [
        label
        for label, on in (
            ("voice", record.is_voice_pack),
            ("livery", record.is_livery),
            ("mission", record.is_mission),
            ("addon", record.is_addon),
        )
        if on
    ]
    return ",".join(labels) or "-"


def run_link(args: argparse.Namespace) -> int:
    from link_manager import LinkManager

    manager = LinkManager(timeout=link_timeout_from_env())
    if args.action == "create":
        manager.create(args.link, args.target, overwrite=args.overwrite)
        print(f"Linked {args.link} -> {args.target}")
    elif args.action == "remove":
        manager.remove(args.link)
        print(f"Removed {args.link}")
    else:
        point = manager.inspect(args.path)
        target = f" -> {point.target_path}" if point.target_path else ""
        print(f"{point.path}: {point.kind.value}{target}")
    return 0


def run_mods(args: argparse.Namespace) -> int:
    from mod_record import load_manifest_records

    records = load_manifest_records(args.manifest.read_bytes())
    for rec in records:
        update = "update available" if rec.has_update else "up to date"
        print(f"{rec.id}\t{rec.version}\t{rec.latest_version}\t{_flags(rec)}\t{update}")
    return 0


def run_version(args: argparse.Namespace) -> int:
    import version_resolver

    order = version_resolver.compare(args.a, args.b)
    print(f"{version_resolver.clean(args.a)} {order.name} {version_resolver.clean(args.b)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logger, _ = setup_logging(verbose=args.verbose, log_dir=args.log_dir)
    logger.debug("Running command: %s", args.command)

    handlers = {"link": run_link, "mods": run_mods, "version": run_version}
    try:
        return handlers[args.command](args)
    except _USAGE_ERRORS as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except LinkError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
