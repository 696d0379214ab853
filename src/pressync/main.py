#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from pressync.app import sync_csv_file
from pressync.config import ConfigurationError, configure_logging
from pressync.domain.errors import SyncError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from pressync.domain.types import BatchSummary, ReconciliationResult

log = logging.getLogger(__name__)

DEFAULT_CSV_PATH = "posts.csv"
INTERRUPTED_EXIT_CODE = 130


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Upload CSV rows to a WordPress site")
    parser.add_argument(
        "csv_path",
        nargs="?",
        help=f"CSV file to upload (default: $CSV_PATH or {DEFAULT_CSV_PATH})",
    )
    parser.add_argument(
        "--client",
        type=str,
        help="Client key from the client registry (default: $CLIENT or 'default')",
    )
    parser.add_argument(
        "--collection",
        type=str,
        help="Target collection endpoint, e.g. posts or pages (defaults to config)",
    )
    parser.add_argument(
        "--log-path",
        type=Path,
        help="Where to write the JSON run log (default: ./import_log.json)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(list(argv))


def _resolve_csv_path(value: str | None) -> Path:
    raw = value or os.getenv("CSV_PATH") or DEFAULT_CSV_PATH
    return Path(raw).expanduser()


def _report_progress(result: ReconciliationResult) -> None:
    if result.error is None:
        log.debug("[%s] ok: %s", result.row_number, result.title)
    else:
        log.debug("[%s] error: %s", result.row_number, result.error)


def _log_summary(summary: BatchSummary) -> None:
    log.info("=" * 50)
    log.info("Summary")
    log.info("=" * 50)
    log.info("Success: %s", summary.succeeded)
    log.info("Failed: %s", summary.failed)
    log.info("Total time: %.2fs", summary.duration_seconds)
    log.info("Detailed log: %s", summary.log_path or "not written")
    log.info("=" * 50)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args = _parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    csv_path = _resolve_csv_path(parsed_args.csv_path)
    log.info("CSV: %s", csv_path)

    try:
        summary = sync_csv_file(
            csv_path,
            client_key=parsed_args.client,
            collection=parsed_args.collection,
            log_path=parsed_args.log_path,
            observer=_report_progress,
        )
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except SyncError as exc:
        log.error("Fatal error: %s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)

    _log_summary(summary)
    sys.exit(summary.exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(INTERRUPTED_EXIT_CODE)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
