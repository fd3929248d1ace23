"""
Centralized configuration for the facility board pipeline.

This module contains all paths, run-level constants, and the
PipelineConfig object passed through every stage. Rule tables and
column synonyms live in column_mappings.py; the room catalog lives in
room_catalog.py.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .column_mappings import ORGANIZATION_KEYWORDS

# =============================================================================
# BASE PATHS
# =============================================================================

# Project root (parent of facility_board/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DATA_DIR = PROJECT_ROOT / "data"
INBOX_DIR = DATA_DIR / "inbox"

# Latest daily export dropped by the inbox fetcher
DEFAULT_CSV_PATH = INBOX_DIR / "latest.csv"

# Board feed read by the display
DEFAULT_JSON_OUT = PROJECT_ROOT / "events.json"

# =============================================================================
# RUN CONSTANTS
# =============================================================================

TIMEZONE = "America/Chicago"

# Board day window (minutes since midnight)
DAY_START_MINUTE = 6 * 60   # 06:00
DAY_END_MINUTE = 23 * 60    # 23:00

# Bookings that ended less than this many minutes ago stay on the board
STALE_GRACE_MINUTES = 15

# Which Mode wins when both sentinel rows appear in one export
MODE_PRECEDENCE_TURF = "turf"
MODE_PRECEDENCE_COURT = "court"
DEFAULT_MODE_PRECEDENCE = MODE_PRECEDENCE_TURF


@dataclass(frozen=True)
class PipelineConfig:
    """Tunable policy for a single run."""

    grace_minutes: int = STALE_GRACE_MINUTES
    mode_precedence: str = DEFAULT_MODE_PRECEDENCE
    organization_keywords: Tuple[str, ...] = field(default=ORGANIZATION_KEYWORDS)
    timezone: str = TIMEZONE
    day_start_minute: int = DAY_START_MINUTE
    day_end_minute: int = DAY_END_MINUTE

    def __post_init__(self):
        if self.mode_precedence not in (MODE_PRECEDENCE_TURF, MODE_PRECEDENCE_COURT):
            raise ValueError(
                f"mode_precedence must be '{MODE_PRECEDENCE_TURF}' or "
                f"'{MODE_PRECEDENCE_COURT}', got {self.mode_precedence!r}"
            )
        if self.grace_minutes < 0:
            raise ValueError("grace_minutes cannot be negative")
        if self.day_end_minute <= self.day_start_minute:
            raise ValueError("day_end_minute must be after day_start_minute")
        try:
            ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"unknown time zone {self.timezone!r}") from exc

    def with_overrides(self, **changes) -> "PipelineConfig":
        """Return a copy with the non-None values in ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


DEFAULT_CONFIG = PipelineConfig()


def print_config(config: PipelineConfig = DEFAULT_CONFIG) -> None:
    """Print current configuration for debugging."""
    print("=" * 60)
    print("FACILITY BOARD CONFIGURATION")
    print("=" * 60)
    print(f"Project Root:     {PROJECT_ROOT}")
    print(f"Input CSV:        {DEFAULT_CSV_PATH}")
    print(f"Output JSON:      {DEFAULT_JSON_OUT}")
    print(f"Time zone:        {config.timezone}")
    print(f"Grace window:     {config.grace_minutes} min")
    print(f"Mode precedence:  {config.mode_precedence}")
    print(f"Org keywords:     {', '.join(config.organization_keywords)}")
    print("=" * 60)


if __name__ == "__main__":
    print_config()
