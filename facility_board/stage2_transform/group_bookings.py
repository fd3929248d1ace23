"""
Stage 2: Group Bookings and Deduplicate Slots

The export frequently splits one reservation across several facility
rows (one row per half court, for instance). Rows are grouped by booking
identity:

    (reservee, purpose without confirmation numbers, start, end)

compared case-insensitively. Each group's token sets are unioned before
room resolution so that a half-court row and a full-court row for the
same booking are resolved together.

After display text is derived, dedupe_slots() removes slots whose
(room, start, end, title, subtitle) match, which catches purpose
variants that still normalize to the same display text.
"""

import re

import pandas as pd

from ..config.column_mappings import SLOT_IDENTITY_COLUMNS, VOLATILE_PURPOSE_PATTERNS
from ..config.room_catalog import Mode
from ..stage1_clean.filter_rows import REJECT_NO_MAPPING, RejectionStats
from .resolve_rooms import resolve_rooms

_VOLATILE_RES = [re.compile(p, re.IGNORECASE) for p in VOLATILE_PURPOSE_PATTERNS]
_WS = re.compile(r"\s+")
_EDGE_SEPARATORS = re.compile(r"^[\s,;:/|-]+|[\s,;:/|-]+$")

GROUP_COLUMNS = [
    "reservee",
    "purpose",
    "start_minute",
    "end_minute",
    "tokens",
    "rooms",
    "row_count",
]

BOOKING_SLOT_COLUMNS = [
    "roomId",
    "startMinute",
    "endMinute",
    "reservee",
    "purpose",
]


def strip_volatile(purpose: str) -> str:
    """Remove confirmation/receipt numbers and tidy what is left."""
    text = purpose or ""
    for pattern in _VOLATILE_RES:
        text = pattern.sub(" ", text)
    text = _WS.sub(" ", text).strip()
    return _EDGE_SEPARATORS.sub("", text)


def identity_key(reservee: str, purpose: str, start_minute: int, end_minute: int) -> tuple:
    """Booking identity used to merge rows of one reservation."""
    return (
        _WS.sub(" ", reservee or "").strip().casefold(),
        strip_volatile(purpose).casefold(),
        int(start_minute),
        int(end_minute),
    )


def group_bookings(rows: pd.DataFrame, mode: Mode, stats: RejectionStats) -> pd.DataFrame:
    """
    Merge rows that share a booking identity and resolve their rooms.

    Bookings whose tokens resolve to no board room are dropped and their
    rows tallied as no_mapping.
    """
    df = rows.copy()
    keys = [
        identity_key(r, p, s, e)
        for r, p, s, e in zip(df["reservee"], df["purpose"], df["start_minute"], df["end_minute"])
    ]
    df["_reservee_key"] = [k[0] for k in keys]
    df["_purpose_key"] = [k[1] for k in keys]

    records = []
    key_columns = ["_reservee_key", "_purpose_key", "start_minute", "end_minute"]
    for _, group in df.groupby(key_columns, sort=True):
        first = group.iloc[0]
        tokens = frozenset().union(*group["tokens"])
        records.append({
            "reservee": first["reservee"],
            "purpose": strip_volatile(first["purpose"]),
            "start_minute": int(first["start_minute"]),
            "end_minute": int(first["end_minute"]),
            "tokens": tokens,
            "rooms": resolve_rooms(tokens, mode),
            "row_count": len(group),
        })

    groups = pd.DataFrame(records, columns=GROUP_COLUMNS)
    roomless = groups["rooms"].map(len) == 0
    if roomless.any():
        stats[REJECT_NO_MAPPING] += int(groups.loc[roomless, "row_count"].sum())
        print(f"  Removed {int(roomless.sum()):,} bookings with no board room (no_mapping)")
        groups = groups[~roomless].reset_index(drop=True)

    merged = int((groups["row_count"] > 1).sum())
    print(f"  {len(df):,} rows -> {len(groups):,} bookings ({merged:,} merged from multiple rows)")
    return groups


def explode_slots(groups: pd.DataFrame) -> pd.DataFrame:
    """One record per (room, booking)."""
    records = [
        {
            "roomId": room,
            "startMinute": booking.start_minute,
            "endMinute": booking.end_minute,
            "reservee": booking.reservee,
            "purpose": booking.purpose,
        }
        for booking in groups.itertuples(index=False)
        for room in booking.rooms
    ]
    return pd.DataFrame(records, columns=BOOKING_SLOT_COLUMNS)


def dedupe_slots(slots: pd.DataFrame) -> pd.DataFrame:
    """Drop slots with identical (room, start, end, title, subtitle)."""
    initial_count = len(slots)
    key = slots[SLOT_IDENTITY_COLUMNS].copy()
    for col in ("title", "subtitle"):
        key[col] = key[col].astype(str).str.strip().str.casefold()
    unique = slots[~key.duplicated(keep="first")].reset_index(drop=True)

    removed = initial_count - len(unique)
    if removed:
        print(f"  Removed {removed:,} duplicate slots")
    return unique
