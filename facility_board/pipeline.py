#!/usr/bin/env python3
"""
Facility Board Pipeline Orchestrator

Turns the daily facility-schedule export into the events.json feed read
by the lobby display board.

Usage:
    facility-board                                  # defaults from config
    python -m facility_board.pipeline --csv data/inbox/latest.csv
    python -m facility_board.pipeline --now 2026-10-17T18:30:00-05:00

Pipeline Stages:
    Stage 1 (Clean):     read export -> filter rows, parse times
    Stage 2 (Transform): detect Mode -> classify facilities -> group bookings
    Stage 3 (Prepare):   display text -> dedupe -> validate -> events.json

Exit status is 0 on success (including the empty scaffold written for an
export with missing columns) and 1 when the export cannot be read.
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

from .config import (
    DEFAULT_CONFIG,
    DEFAULT_CSV_PATH,
    DEFAULT_JSON_OUT,
    MODE_PRECEDENCE_COURT,
    MODE_PRECEDENCE_TURF,
    PipelineConfig,
)
from .config.room_catalog import Mode
from .stage1_clean.filter_rows import (
    REJECT_MALFORMED,
    RejectionStats,
    filter_rows,
    local_minute_of_day,
)
from .stage1_clean.read_export import ExportData, ExportReadError, read_export
from .stage1_clean.time_ranges import format_minutes
from .stage2_transform.classify_facilities import classify_rows
from .stage2_transform.detect_mode import detect_mode
from .stage2_transform.group_bookings import dedupe_slots, explode_slots, group_bookings
from .stage3_prepare.assemble_output import build_board, build_scaffold, save_board
from .stage3_prepare.display_text import apply_display_text

TOTAL_STEPS = 6


def _step(n: int, message: str) -> None:
    print(f"\n[{n}/{TOTAL_STEPS}] {message}")


def build_events(
    export: ExportData,
    now_minute: int,
    config: PipelineConfig = DEFAULT_CONFIG,
) -> Tuple[dict, RejectionStats]:
    """
    Run stages 1-3 over an already-read export.

    ``now_minute`` is minutes since local midnight, used only for the
    staleness filter. Returns the events.json document and the
    per-category rejection counts.
    """
    stats = RejectionStats()
    stats[REJECT_MALFORMED] += export.malformed_rows
    rows = export.rows

    _step(2, "Detecting fieldhouse mode...")
    if "facility" in export.missing_fields or "purpose" in export.missing_fields:
        mode = Mode.COURT
        print(f"  Fieldhouse mode: {mode.value} (no facility/purpose columns)")
    else:
        mode = detect_mode(rows, config.mode_precedence)

    if not export.is_complete:
        print(f"  Missing columns {export.missing_fields}; writing empty board")
        return build_scaffold(mode, config), stats

    _step(3, "Filtering rows...")
    kept = filter_rows(rows, now_minute, config, stats)

    _step(4, "Classifying facilities...")
    classified = classify_rows(kept, mode, stats)

    _step(5, "Grouping bookings and deriving display text...")
    groups = group_bookings(classified, mode, stats)
    slots = apply_display_text(explode_slots(groups), config.organization_keywords)
    slots = dedupe_slots(slots)

    _step(6, "Validating board...")
    board = build_board(slots, mode, config)
    if board["slots"]:
        first = min(s["startMinute"] for s in board["slots"])
        last = max(s["endMinute"] for s in board["slots"])
        print(f"  {len(board['slots']):,} slots from {format_minutes(first)} to {format_minutes(last)}")
    else:
        print("  No slots to show")
    return board, stats


def run_pipeline(
    csv_path: Union[str, Path] = DEFAULT_CSV_PATH,
    out_path: Union[str, Path] = DEFAULT_JSON_OUT,
    now: Optional[datetime] = None,
    config: PipelineConfig = DEFAULT_CONFIG,
) -> bool:
    """Read the export, build the board, and write events.json."""
    start_time = datetime.now()
    if now is None:
        now = datetime.now(ZoneInfo(config.timezone))
    now_minute = local_minute_of_day(now, config.timezone)

    print("=" * 60)
    print(" FACILITY BOARD PIPELINE")
    print(" Started at:", start_time.strftime("%Y-%m-%d %H:%M:%S"))
    print(f" Now ({config.timezone}): {format_minutes(now_minute)}")
    print("=" * 60)

    _step(1, "Loading export...")
    try:
        export = read_export(csv_path)
    except ExportReadError as exc:
        print(f"\nERROR: {exc}")
        return False

    board, stats = build_events(export, now_minute, config)
    save_board(board, out_path)

    duration = datetime.now() - start_time
    print("\n" + "=" * 60)
    print(" PIPELINE COMPLETE")
    print(f" Mode: {board['mode']} | Slots: {len(board['slots']):,}")
    print(f" Rejected: {stats.report()}")
    print(f" Duration: {duration.total_seconds():.1f} seconds")
    print("=" * 60)
    return True


def _parse_now(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO datetime: {value!r}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Build the facility board feed from the daily export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    facility-board --csv data/inbox/latest.csv --out events.json
    facility-board --now 2026-10-17T18:30 --grace-minutes 30
    facility-board --mode-precedence court
        """,
    )

    parser.add_argument("--csv", type=Path, default=DEFAULT_CSV_PATH,
                        help=f"Daily export (default: {DEFAULT_CSV_PATH})")
    parser.add_argument("--out", type=Path, default=DEFAULT_JSON_OUT,
                        help=f"Board feed to write (default: {DEFAULT_JSON_OUT})")
    parser.add_argument("--now", type=_parse_now, default=None,
                        help="Treat this ISO datetime as the current time")
    parser.add_argument("--grace-minutes", type=int, default=None,
                        help="Keep bookings that ended less than this many minutes ago")
    parser.add_argument("--mode-precedence", choices=[MODE_PRECEDENCE_TURF, MODE_PRECEDENCE_COURT],
                        default=None, help="Mode to use when both sentinels appear")
    parser.add_argument("--org-keyword", action="append", default=None, dest="org_keywords",
                        help="Organization keyword (repeatable; replaces the default list)")
    parser.add_argument("--timezone", default=None,
                        help="IANA time zone for 'now' (default: America/Chicago)")

    args = parser.parse_args(argv)

    try:
        config = DEFAULT_CONFIG.with_overrides(
            grace_minutes=args.grace_minutes,
            mode_precedence=args.mode_precedence,
            organization_keywords=tuple(args.org_keywords) if args.org_keywords else None,
            timezone=args.timezone,
        )
    except ValueError as exc:
        parser.error(str(exc))

    success = run_pipeline(csv_path=args.csv, out_path=args.out, now=args.now, config=config)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
