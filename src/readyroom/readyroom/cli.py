from __future__ import annotations

import argparse
import importlib
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from config import get_settings_module

from .common.logging_utils import configure_logging
from .container import Container, build_container
from .core.enums import ReportErrorKind
from .reports.settings import ReportSettings
from .roster.model import RosterFilters

logger = logging.getLogger(__name__)

EXIT_CODES = {
    ReportErrorKind.NOT_FOUND: 2,
    ReportErrorKind.EMPTY_INPUT: 3,
    ReportErrorKind.TIMEOUT: 4,
    ReportErrorKind.CANCELLED: 4,
    ReportErrorKind.UNEXPECTED: 5,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="readyroom-report",
        description="Generate cycle attendance reports.",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: from settings, else INFO).")
    sub = parser.add_subparsers(dest="command", required=True)

    attendance = sub.add_parser("attendance", help="Write the attendance workbook for a cycle.")
    attendance.add_argument("cycle_id", help="Cycle identifier.")
    attendance.add_argument("--out", type=Path, default=Path("."), help="Output directory (default: cwd).")
    attendance.add_argument("--summary", action="store_true", help="Also write the per-event summary CSV.")
    attendance.add_argument("--squadron", action="append", default=[], help="Only pilots of this squadron id.")
    attendance.add_argument("--pilot", action="append", default=[], help="Only this pilot id.")

    cycles = sub.add_parser("cycles", help="List cycles.")
    cycles.add_argument("--default", action="store_true", help="Show only the current/most recent cycle.")
    return parser


def _container_from_settings(settings) -> Container:
    return build_container(db_config=settings.DB_CONFIG, report_settings=ReportSettings.from_settings(settings))


def _run_attendance(container: Container, args: argparse.Namespace) -> int:
    filters = RosterFilters(squadron_ids=frozenset(args.squadron), pilot_ids=frozenset(args.pilot))
    service = container.report_service

    results = [service.generate(args.cycle_id, filters=filters)]
    if args.summary:
        results.append(service.generate_summary_csv(args.cycle_id, filters=filters))

    args.out.mkdir(parents=True, exist_ok=True)
    for result in results:
        if not result.ok:
            print(f"error: {result.error.kind.value}: {result.error.reason}", file=sys.stderr)
            return EXIT_CODES.get(result.error.kind, 1)
        path = args.out / result.artifact.filename
        path.write_bytes(result.artifact.content)
        print(path)
    return 0


def _run_cycles(container: Container, args: argparse.Namespace) -> int:
    try:
        if args.default:
            cycle = container.cycle_service.get_default_cycle()
            cycles = [cycle] if cycle else []
        else:
            cycles = container.cycle_service.list_cycles()
    except Exception:
        logger.exception("Failed to load cycles")
        return EXIT_CODES[ReportErrorKind.UNEXPECTED]

    if not cycles:
        print("No cycles found", file=sys.stderr)
        return EXIT_CODES[ReportErrorKind.NOT_FOUND]
    for c in cycles:
        print(f"{c.cycle_id}\t{c.name}\t{c.start_date:%Y-%m-%d}\t{c.end_date:%Y-%m-%d}\t{c.cycle_type}")
    return 0


def main(argv: Optional[List[str]] = None, *, container: Optional[Container] = None) -> int:
    args = _build_parser().parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(args.log_level or getattr(settings, "LOG_LEVEL", "INFO"))

    container = container or _container_from_settings(settings)
    if args.command == "attendance":
        return _run_attendance(container, args)
    return _run_cycles(container, args)


def run(argv: Optional[List[str]] = None, *, container: Optional[Container] = None) -> None:
    """Console entry point.

    After a timeout or cancellation the abandoned queries may still occupy
    pool threads, and interpreter shutdown joins those. Exit without waiting.
    """

    code = main(argv, container=container)
    if code == EXIT_CODES[ReportErrorKind.TIMEOUT]:
        sys.stdout.flush()
        sys.stderr.flush()
        logging.shutdown()
        os._exit(code)
    sys.exit(code)


if __name__ == "__main__":
    run()
