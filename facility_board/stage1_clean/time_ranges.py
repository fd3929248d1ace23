"""
Reserved-time parsing.

The export writes each booking's time as free text. Accepted shapes:

    6:00 PM - 8:00 PM
    4:30pm-6pm
    10/17/2026 6:00 PM - 8:00 PM
    10/17/2026 11:00 PM - 10/18/2026 1:00 AM

Separators may be a hyphen, en dash, em dash, minus sign, or the word
"to". Anything else is unparseable and returns None.
"""

import re
from dataclasses import dataclass
from typing import Optional

MINUTES_PER_DAY = 24 * 60

_DASHES = re.compile(r"\s*(?:[-‐‑‒–—−]|\bto\b)\s*", re.IGNORECASE)
_WS = re.compile(r"\s+")

_CLOCK = r"(?P<{p}h>\d{{1,2}})(?::(?P<{p}m>\d{{2}}))?\s*(?P<{p}ap>[ap])\.?\s*m\.?"
_DATE = r"\d{1,2}/\d{1,2}/\d{2,4}"

# Enumerated grammar, tried in order
_PATTERNS = (
    # h:mm am - h:mm pm
    re.compile(
        rf"^{_CLOCK.format(p='s')}\s*-\s*{_CLOCK.format(p='e')}$",
        re.IGNORECASE,
    ),
    # M/D/YYYY h:mm am - h:mm pm
    re.compile(
        rf"^{_DATE}\s+{_CLOCK.format(p='s')}\s*-\s*{_CLOCK.format(p='e')}$",
        re.IGNORECASE,
    ),
    # M/D/YYYY h:mm am - M/D/YYYY h:mm pm
    re.compile(
        rf"^{_DATE}\s+{_CLOCK.format(p='s')}\s*-\s*{_DATE}\s+{_CLOCK.format(p='e')}$",
        re.IGNORECASE,
    ),
)


@dataclass(frozen=True)
class TimeRange:
    """Minutes since local midnight; end may pass 1440 for overnight bookings."""

    start_minute: int
    end_minute: int


def _to_minutes(hour: str, minute: Optional[str], meridiem: str) -> Optional[int]:
    h = int(hour)
    m = int(minute) if minute else 0
    if not 1 <= h <= 12 or not 0 <= m <= 59:
        return None
    h %= 12
    if meridiem.lower() == "p":
        h += 12
    return h * 60 + m


def normalize_separators(text: str) -> str:
    """Rewrite every dash variant and "to" as a single hyphen."""
    text = _WS.sub(" ", str(text).replace("\u00a0", " ")).strip()
    return _DASHES.sub(" - ", text)


def parse_time_range(text) -> Optional[TimeRange]:
    """
    Parse reserved-time text into a TimeRange.

    When the end is not after the start the booking runs past midnight
    and 1440 minutes are added to the end. Returns None for anything
    outside the accepted grammar.
    """
    if text is None:
        return None
    normalized = normalize_separators(text)
    if not normalized:
        return None

    for pattern in _PATTERNS:
        match = pattern.match(normalized)
        if not match:
            continue
        start = _to_minutes(match.group("sh"), match.group("sm"), match.group("sap"))
        end = _to_minutes(match.group("eh"), match.group("em"), match.group("eap"))
        if start is None or end is None:
            return None
        if end <= start:
            end += MINUTES_PER_DAY
        return TimeRange(start_minute=start, end_minute=end)

    return None


def format_minutes(minute: int) -> str:
    """Render minutes since midnight as a 12-hour clock ("6:00pm")."""
    h24, m = divmod(minute % MINUTES_PER_DAY, 60)
    meridiem = "pm" if h24 >= 12 else "am"
    h12 = h24 % 12 or 12
    return f"{h12}:{m:02d}{meridiem}"
