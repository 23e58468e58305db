from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, SyncConfig, load_config
from ..host.workbook import WorkbookError, WorkbookGridHost
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.run_outcome import RunStats
from ..services.orchestrator import SyncEngine
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load .env (python-dotenv), then config (YAML, optional at the default path)
- read the desired payload (file or "-" for stdin)
- load the grid workbook as host, run the engine, save the workbook back
  (skipped for dry runs and failed runs)
- log the outcome message and one SUMMARY line; failed runs also go to the
  JSON Lines error log
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_RUN_FAILED = 2

CONFIG_ENV_VAR = "TIMECARD_SYNC_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv (values already in the environment win by default)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="timecard-sync",
        description="Synchronize a desired timesheet payload into a timecard grid workbook",
    )
    p.add_argument("payload", help="Desired payload JSON file, or - for stdin")
    p.add_argument("--grid", required=True, type=Path, help="Workbook (.xlsx) holding the timecard grid")
    p.add_argument("--sheet", default=None, help="Grid sheet name (default from config: Timecard)")
    p.add_argument("--output", type=Path, default=None, help="Write the updated workbook here instead")
    p.add_argument("--config", type=Path, default=None, help=f"Config YAML (default {DEFAULT_CONFIG_PATH})")
    p.add_argument("--dry-run", action="store_true", default=None, help="Plan only, no mutation")
    p.add_argument("--no-add-rows", action="store_true", default=None, help="Fail instead of adding rows")
    p.add_argument(
        "--keep-existing-hours",
        action="store_true",
        default=None,
        help="Only write non-zero desired hours (do not overwrite with blanks)",
    )
    p.add_argument("--clear-untouched", action="store_true", default=None, help="Blank hours of unmatched rows")
    p.add_argument("--no-recalculate", action="store_true", default=None, help="Do not press recalculate")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> SyncConfig:
    explicit = args.config or (Path(os.environ[CONFIG_ENV_VAR]) if os.getenv(CONFIG_ENV_VAR) else None)
    if explicit is not None:
        return load_config(explicit)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return SyncConfig()


def _read_payload(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"payload file not found: {path}")
    return path.read_text(encoding="utf-8-sig")


def _flag(value: bool | None, *, invert: bool = False) -> bool | None:
    if not value:
        return None
    return not invert


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # NOTE: [] を渡された場合に sys.argv[1:] が混入しないよう None のときのみ読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    options = cfg.options.merged(
        dry_run=_flag(args.dry_run),
        allow_add_rows=_flag(args.no_add_rows, invert=True),
        overwrite_row_hours=_flag(args.keep_existing_hours, invert=True),
        clear_untouched_rows=_flag(args.clear_untouched),
        trigger_recalculation=_flag(args.no_recalculate, invert=True),
    )

    try:
        payload = _read_payload(args.payload)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"payload: {e}")
        return EXIT_FATAL

    sheet = args.sheet or cfg.workbook.sheet
    try:
        host = WorkbookGridHost.load(args.grid, sheet, max_rows=cfg.workbook.max_rows)
    except WorkbookError as e:
        logger.error(f"workbook: {e}")
        return EXIT_FATAL

    logger.info(f"Synchronizing {args.payload} into {args.grid} (sheet={sheet})")
    engine = SyncEngine(host, timing=cfg.timing)
    outcome = asyncio.run(engine.run(payload, options))

    if outcome.ok:
        for line in (outcome.message or "").splitlines():
            logger.info(line)
        if not options.dry_run:
            saved = host.save(args.output)
            logger.info(f"workbook saved: {saved}")
    else:
        logger.error(outcome.error)
        error_log = ErrorLogBuffer()
        error_log.append(ErrorRecord.from_outcome_error(args.payload, outcome.error or ""))
        try:
            path = error_log.flush()
            logger.info(f"error log: {path}")
        except OSError as e:
            logger.warning(f"error log flush failed: {e}")

    stats = outcome.stats or RunStats(dry_run=options.dry_run)
    # render_summary_line は "SUMMARY " 付きなので log_summary 用に外す
    log_summary(render_summary_line(stats)[len("SUMMARY "):])

    return EXIT_SUCCESS if outcome.ok else EXIT_RUN_FAILED
