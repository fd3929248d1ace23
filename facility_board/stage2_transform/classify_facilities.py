"""
Stage 2: Classify Facility Labels

Turns a raw facility label into zero or more FacilityTokens under the
active Mode. Labels are matched against ordered (pattern, handler)
tables; the first matching rule wins.

Token kinds:
- half:  one explicit half court        ("AC Gym - Half Court 1A")
- pair:  both halves of one gym court   ("AC Gym - Court 1-AB")
- court: a numbered fieldhouse court    ("AC Fieldhouse - Court 4")
- turf:  a fieldhouse turf quarter      ("AC Fieldhouse - Quarter Turf NA")

Whole-gym labels classify to the pair tokens of every court they cover.
"""

import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Pattern, Tuple

import pandas as pd

from ..config.room_catalog import (
    FIELDHOUSE_COURTS,
    NORTH_COURTS,
    SOUTH_COURTS,
    SPLITTABLE_COURTS,
    TURF_QUARTERS,
    Mode,
)
from ..stage1_clean.filter_rows import (
    REJECT_INACTIVE_CONFIGURATION,
    REJECT_NO_MAPPING,
    RejectionStats,
)

TOKEN_HALF = "half"
TOKEN_PAIR = "pair"
TOKEN_COURT = "court"
TOKEN_TURF = "turf"


@dataclass(frozen=True, order=True)
class FacilityToken:
    kind: str
    cluster: str
    unit: str = ""


@dataclass(frozen=True)
class Classification:
    """Tokens for one label, plus why there are none when empty."""

    tokens: FrozenSet[FacilityToken]
    reason: Optional[str] = None


# Marks a label that belongs to the other fieldhouse Mode
INACTIVE = object()

Rule = Tuple[Pattern, Callable[[re.Match], object]]


def _rule(pattern: str, handler) -> Rule:
    return re.compile(pattern, re.IGNORECASE), handler


def half(court: str, side: str) -> FacilityToken:
    return FacilityToken(TOKEN_HALF, court, f"{court}{side.upper()}")


def pair(court: str) -> FacilityToken:
    return FacilityToken(TOKEN_PAIR, court)


def court(number: str) -> FacilityToken:
    return FacilityToken(TOKEN_COURT, number)


def turf(quarter: str) -> FacilityToken:
    return FacilityToken(TOKEN_TURF, quarter.upper())


def _half_court(m):
    if m["court"] not in SPLITTABLE_COURTS:
        return []
    return [half(m["court"], m["side"])]


def _court_pair(m):
    if m["court"] not in SPLITTABLE_COURTS:
        return []
    return [pair(m["court"])]


# =============================================================================
# RULE TABLES
# =============================================================================

GYM_RULES: List[Rule] = [
    _rule(r"^AC\s*Gym\s*-\s*Half\s*Court\s*(?P<court>\d{1,2})\s*(?P<side>[AB])$", _half_court),
    _rule(r"^AC\s*Gym\s*-\s*Court\s*(?P<court>\d{1,2})\s*-?\s*AB$", _court_pair),
    _rule(r"^AC\s*Gym\s*-\s*Championship\s*Court$", lambda m: [pair(c) for c in SOUTH_COURTS]),
    _rule(
        r"^AC\s*Gym\s*-\s*Full\s*Gym\s*1\s*-?\s*AB\s*(?:&|and)\s*2\s*-?\s*AB$",
        lambda m: [pair(c) for c in SOUTH_COURTS],
    ),
    _rule(
        r"^AC\s*Gym\s*-\s*Full\s*Gym\s*9\s*(?:-?\s*AB)?\s*(?:&|and)\s*10\s*(?:-?\s*AB)?$",
        lambda m: [pair(c) for c in NORTH_COURTS],
    ),
]

COURT_MODE_RULES: List[Rule] = [
    _rule(r"^AC\s*Fieldhouse\s*-?\s*Court\s*3\s*-\s*8$", lambda m: [court(c) for c in FIELDHOUSE_COURTS]),
    _rule(r"^AC\s*Fieldhouse\s*-\s*Court\s*(?P<court>[3-8])$", lambda m: [court(m["court"])]),
    _rule(r"^AC\s*Fieldhouse\b.*\bturf\b", lambda m: INACTIVE),
]

TURF_MODE_RULES: List[Rule] = [
    _rule(r"^AC\s*Fieldhouse\s*-\s*Full\s*Turf$", lambda m: [turf(q) for q in TURF_QUARTERS]),
    _rule(r"^AC\s*Fieldhouse\s*-\s*Half\s*Turf\s*North$", lambda m: [turf("NA"), turf("NB")]),
    _rule(r"^AC\s*Fieldhouse\s*-\s*Half\s*Turf\s*South$", lambda m: [turf("SA"), turf("SB")]),
    _rule(r"^AC\s*Fieldhouse\s*-\s*Quarter\s*Turf\s*(?P<quarter>[NS][AB])$", lambda m: [turf(m["quarter"])]),
    _rule(r"^AC\s*Fieldhouse\b.*\bcourts?\b", lambda m: INACTIVE),
]

RULES_BY_MODE = {
    Mode.COURT: GYM_RULES + COURT_MODE_RULES,
    Mode.TURF: GYM_RULES + TURF_MODE_RULES,
}


def classify_facility(label: str, mode: Mode) -> Classification:
    """Classify one facility label under ``mode``."""
    text = (label or "").strip()
    for pattern, handler in RULES_BY_MODE[mode]:
        match = pattern.search(text)
        if not match:
            continue
        result = handler(match)
        if result is INACTIVE:
            return Classification(frozenset(), REJECT_INACTIVE_CONFIGURATION)
        tokens = frozenset(result)
        if not tokens:
            return Classification(tokens, REJECT_NO_MAPPING)
        return Classification(tokens)
    return Classification(frozenset(), REJECT_NO_MAPPING)


def classify_rows(rows: pd.DataFrame, mode: Mode, stats: RejectionStats) -> pd.DataFrame:
    """Attach a ``tokens`` column and drop rows whose label yields none."""
    df = rows.copy()
    results = [classify_facility(label, mode) for label in df["facility"]]
    df["tokens"] = pd.Series([r.tokens for r in results], index=df.index, dtype=object)
    reasons = pd.Series([r.reason for r in results], index=df.index, dtype=object)

    for reason in (REJECT_NO_MAPPING, REJECT_INACTIVE_CONFIGURATION):
        count = int((reasons == reason).sum())
        stats[reason] += count
        print(f"  Removed {count:,} rows ({reason})")

    unmapped = sorted(set(df.loc[reasons == REJECT_NO_MAPPING, "facility"]))
    if unmapped:
        print(f"  Unmapped facilities: {' || '.join(unmapped[:8])}")

    df = df[reasons.isna()].copy()
    print(f"  Classified {len(df):,} rows")
    return df
