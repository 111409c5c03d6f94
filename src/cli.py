"""Command-line interface for the annotation engine."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from engine.run import resolve_visibility, suppression_report
from pipeline import analyze_repository
from report.render import (
    dumps,
    render_changes,
    render_diagnostics,
    render_suppressions,
    render_symbols,
    suppressions_payload,
)
from rules.config import ConfigError, load_config


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Repository root (default: .)",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Units processed in parallel (default: config workers)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="annotate")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check", help="Resolve visibility directives and report suppressions"
    )
    _add_common_options(check_parser)
    check_parser.add_argument(
        "--suppressions",
        action="store_true",
        default=None,
        help="Build the suppression report (default: config suppressions.enabled)",
    )
    check_parser.add_argument(
        "--changes",
        action="store_true",
        help="Report every visibility change applied",
    )
    check_parser.add_argument(
        "--exit-zero",
        action="store_true",
        help="Exit 0 even when directives failed",
    )

    symbols_parser = subparsers.add_parser(
        "symbols", help="List declared symbols with resolved visibility"
    )
    _add_common_options(symbols_parser)

    return parser


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.workers is not None:
        overrides["workers"] = args.workers
    if getattr(args, "suppressions", None):
        overrides["suppressions"] = {"enabled": True}
    if getattr(args, "changes", False):
        overrides["visibility"] = {"track_changes": True}
    return overrides


def _write_lines(lines: list[str]) -> None:
    for line in lines:
        sys.stdout.write(f"{line}\n")


def _handle_check(root: Path, args: argparse.Namespace) -> int:
    config = load_config(root, _overrides(args))
    run = analyze_repository(root=root, config=config)
    failures = resolve_visibility(run)
    report = suppression_report(run)
    changes = run.changes()

    if args.format == "json":
        payload: dict[str, Any] = {
            "diagnostics": [failure.to_dict() for failure in failures],
            "suppressions": suppressions_payload(report),
        }
        if args.changes:
            payload["changes"] = [change.to_dict() for change in changes]
        sys.stdout.write(dumps(payload).decode("utf-8") + "\n")
    else:
        for line in render_diagnostics(failures):
            sys.stderr.write(f"{line}\n")
        _write_lines(render_suppressions(report))
        if args.changes:
            _write_lines(render_changes(changes))

    if failures and not args.exit_zero:
        return 1
    return 0


def _handle_symbols(root: Path, args: argparse.Namespace) -> int:
    config = load_config(root, _overrides(args))
    run = analyze_repository(root=root, config=config)
    symbols = run.symbols()

    if args.format == "json":
        payload = [symbol.to_dict() for symbol in symbols]
        sys.stdout.write(dumps(payload).decode("utf-8") + "\n")
    else:
        _write_lines(render_symbols(symbols))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    root = Path(args.root).expanduser().resolve()
    if not root.is_dir():
        sys.stderr.write(f"error: not a directory: {root}\n")
        return 2

    try:
        if args.command == "check":
            return _handle_check(root, args)
        if args.command == "symbols":
            return _handle_symbols(root, args)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
