"""
Stage 2: Detect Fieldhouse Mode

The fieldhouse is either laid out as six numbered courts or as four
turf quarters, and nothing on an ordinary row says which. The day's
configuration is read from the fieldhouse-wide season booking: its
purpose text names the surface that is installed.

Runs once over every row before classification. The result is passed
explicitly to every later stage.
"""

import re

import pandas as pd

from ..config import MODE_PRECEDENCE_TURF
from ..config.column_mappings import (
    COURT_SENTINEL_PHRASES,
    MODE_SENTINEL_FACILITY_PATTERN,
    TURF_SENTINEL_PHRASES,
)
from ..config.room_catalog import Mode

_SENTINEL_FACILITY_RE = re.compile(MODE_SENTINEL_FACILITY_PATTERN, re.IGNORECASE)


def sentinel_signal(facility: str, purpose: str):
    """Return the Mode a single row signals, or None for ordinary rows."""
    if not _SENTINEL_FACILITY_RE.match((facility or "").strip()):
        return None
    text = (purpose or "").lower()
    if any(phrase in text for phrase in TURF_SENTINEL_PHRASES):
        return Mode.TURF
    if any(phrase in text for phrase in COURT_SENTINEL_PHRASES):
        return Mode.COURT
    return None


def resolve_mode(saw_turf: bool, saw_court: bool, precedence: str = MODE_PRECEDENCE_TURF) -> Mode:
    """
    Combine the two sentinel signals.

    Only turf -> TURF; only court -> COURT; neither -> COURT.
    Both -> whichever ``precedence`` names.
    """
    if saw_turf and saw_court:
        return Mode.TURF if precedence == MODE_PRECEDENCE_TURF else Mode.COURT
    if saw_turf:
        return Mode.TURF
    return Mode.COURT


def detect_mode(rows: pd.DataFrame, precedence: str = MODE_PRECEDENCE_TURF) -> Mode:
    """Scan every row once and return the day's fieldhouse Mode."""
    signals = {
        sentinel_signal(facility, purpose)
        for facility, purpose in zip(rows["facility"], rows["purpose"])
    }
    mode = resolve_mode(Mode.TURF in signals, Mode.COURT in signals, precedence)

    if Mode.TURF in signals and Mode.COURT in signals:
        print(f"  Both sentinels present; {precedence} precedence applies")
    print(f"  Fieldhouse mode: {mode.value}")
    return mode
