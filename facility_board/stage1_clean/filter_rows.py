"""
Stage 1: Filter Rows

Applies the row filter in order, never raising:
(a) keep only rows for the target building,
(b) drop rows whose reserved time is unparseable,
(c) drop rows that ended more than the grace window before "now",
(d) drop internal administrative bookings and the Mode sentinel rows.

Every rejection is tallied in a RejectionStats counter under a named
category so the run summary can report what was dropped and why.
"""

import re
from collections import Counter
from datetime import datetime
from zoneinfo import ZoneInfo

import pandas as pd

from ..config import PipelineConfig
from ..config.column_mappings import (
    ADMINISTRATIVE_MARKERS,
    TARGET_FACILITY_PREFIX_PATTERN,
    TARGET_LOCATION_NAMES,
    TARGET_LOCATION_PATTERN,
)
from ..stage2_transform.detect_mode import sentinel_signal
from .time_ranges import parse_time_range

REJECT_MALFORMED = "malformed_row"
REJECT_NON_TARGET = "non_target_location"
REJECT_UNPARSEABLE_TIME = "unparseable_time"
REJECT_STALE = "stale"
REJECT_ADMINISTRATIVE = "administrative"
REJECT_NO_MAPPING = "no_mapping"
REJECT_INACTIVE_CONFIGURATION = "inactive_configuration"

REJECTION_CATEGORIES = [
    REJECT_MALFORMED,
    REJECT_NON_TARGET,
    REJECT_UNPARSEABLE_TIME,
    REJECT_STALE,
    REJECT_ADMINISTRATIVE,
    REJECT_NO_MAPPING,
    REJECT_INACTIVE_CONFIGURATION,
]

_LOCATION_RE = re.compile(TARGET_LOCATION_PATTERN, re.IGNORECASE)
_FACILITY_PREFIX_RE = re.compile(TARGET_FACILITY_PREFIX_PATTERN, re.IGNORECASE)
_ADMIN_PHRASES = tuple(ADMINISTRATIVE_MARKERS)


class RejectionStats(Counter):
    """Per-category count of rows dropped during a run."""

    def report(self) -> str:
        return " ".join(f"{name}={self.get(name, 0)}" for name in REJECTION_CATEGORIES)


def is_target_location(location: str, facility: str = "") -> bool:
    """True for the Athletic & Event Center (or a blank location on an AC facility)."""
    loc = (location or "").strip().lower()
    if not loc:
        return bool(_FACILITY_PREFIX_RE.search((facility or "").strip()))
    if loc in TARGET_LOCATION_NAMES:
        return True
    return bool(_LOCATION_RE.search(loc))


def is_administrative(reservee: str, purpose: str) -> bool:
    """True when reservee or purpose carries an internal-only marker."""
    text = f"{reservee or ''} {purpose or ''}".lower()
    return any(phrase in text for phrase in _ADMIN_PHRASES)


def is_internal_booking(facility: str, reservee: str, purpose: str) -> bool:
    """Administrative bookings plus the fieldhouse Mode sentinel rows."""
    return is_administrative(reservee, purpose) or sentinel_signal(facility, purpose) is not None


def local_minute_of_day(now: datetime, timezone: str) -> int:
    """Minutes since local midnight for ``now`` in ``timezone``."""
    if now.tzinfo is not None:
        now = now.astimezone(ZoneInfo(timezone))
    return now.hour * 60 + now.minute


def is_stale(end_minute: int, now_minute: int, grace_minutes: int) -> bool:
    """A booking is stale once it ended more than the grace window ago."""
    return end_minute < now_minute - grace_minutes


def _row_mask(df: pd.DataFrame, predicate, *columns: str) -> pd.Series:
    """Evaluate ``predicate`` over ``columns`` row by row as a boolean Series."""
    values = [bool(predicate(*vals)) for vals in zip(*(df[c] for c in columns))]
    return pd.Series(values, index=df.index, dtype=bool)


def _drop(df: pd.DataFrame, mask: pd.Series, stats: RejectionStats, category: str) -> pd.DataFrame:
    removed = int(mask.sum())
    stats[category] += removed
    print(f"  Removed {removed:,} rows ({category})")
    return df[~mask].copy()


def filter_rows(
    rows: pd.DataFrame,
    now_minute: int,
    config: PipelineConfig,
    stats: RejectionStats,
) -> pd.DataFrame:
    """
    Run the row filter and attach parsed start/end minutes.

    Returns a new DataFrame with ``start_minute`` and ``end_minute``
    columns; ``rows`` is not modified.
    """
    df = rows.copy()
    initial_count = len(df)

    # (a) target building
    on_site = _row_mask(df, is_target_location, "location", "facility")
    df = _drop(df, ~on_site, stats, REJECT_NON_TARGET)

    # (b) reserved time
    ranges = df["reserved_time"].map(parse_time_range)
    df = _drop(df, ranges.isna(), stats, REJECT_UNPARSEABLE_TIME)
    ranges = ranges[df.index]
    df["start_minute"] = [r.start_minute for r in ranges]
    df["end_minute"] = [r.end_minute for r in ranges]
    df = df.astype({"start_minute": "int64", "end_minute": "int64"})

    # (c) staleness
    stale = _row_mask(
        df, lambda end: is_stale(end, now_minute, config.grace_minutes), "end_minute"
    )
    df = _drop(df, stale, stats, REJECT_STALE)

    # (d) administrative bookings
    admin = _row_mask(df, is_internal_booking, "facility", "reservee", "purpose")
    df = _drop(df, admin, stats, REJECT_ADMINISTRATIVE)

    print(f"  Kept {len(df):,} of {initial_count:,} rows")
    return df
