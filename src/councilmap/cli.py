"""CLI entrypoint for the council status map pipeline."""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from .config import AppConfig, load_config
from .models import DataValidationError, FilterCriteria
from .report import format_match_lines, run_match_report
from .util import ensure_directories, setup_logging
from .validate import Validator, format_report_lines

LOGGER = logging.getLogger("councilmap.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="councilmap",
        description="Join council boundaries to curated status records and style them.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="config.yaml", help="Path to YAML config.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    validate_p = subparsers.add_parser("validate", help="Validate config and input files.")
    add_common(validate_p)

    report_p = subparsers.add_parser(
        "match-report",
        help="Resolve every boundary feature and write the match audit JSON.",
    )
    add_common(report_p)

    style_p = subparsers.add_parser(
        "style",
        help="Write per-feature styles for the given filter criteria.",
    )
    add_common(style_p)
    style_p.add_argument(
        "--status",
        action="append",
        default=[],
        help="Status filter (Yes/No/Unknown or Using/Free/Unknown). Can be repeated.",
    )
    style_p.add_argument(
        "--region",
        action="append",
        default=[],
        help="Region filter. Can be repeated.",
    )
    style_p.add_argument("--search", default="", help="Case-insensitive search text.")

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    log_path = cfg.paths.logs_dir / "councilmap.log"
    setup_logging(log_path, verbose=args.verbose)
    ensure_directories(cfg.paths.build_directories)
    return cfg


def _run_validate(cfg: AppConfig) -> int:
    report = Validator(cfg).run()
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_match_report(cfg: AppConfig, *, criteria: FilterCriteria) -> int:
    report = run_match_report(cfg, criteria=criteria)
    for line in format_match_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    if command == "validate":
        return _run_validate(cfg)
    if command == "match-report":
        return _run_match_report(cfg, criteria=FilterCriteria())
    if command == "style":
        try:
            criteria = FilterCriteria.build(
                statuses=[str(item) for item in args.status],
                regions=[str(item) for item in args.region],
                search=str(args.search),
            )
        except DataValidationError as exc:
            LOGGER.error("Invalid filter criteria: %s", exc)
            return 1
        return _run_match_report(cfg, criteria=criteria)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
