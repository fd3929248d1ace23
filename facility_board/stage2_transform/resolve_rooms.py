"""
Stage 2: Resolve Tokens to Rooms

Turns a booking's unioned token set into the board rooms it occupies.

Precedence: for each splittable gym court, explicit half tokens win over
any pair token in the same booking. A booking split across
"Half Court 1A" and "Court 1-AB" rows occupies 1A only. A pair token
expands to both halves only when no half token names that court.

Fieldhouse tokens map one-to-one onto the active Mode's rooms; tokens
for the other Mode are ignored.
"""

from typing import Iterable, List

from ..config.room_catalog import SPLITTABLE_COURTS, Mode, room_order
from .classify_facilities import (
    TOKEN_COURT,
    TOKEN_HALF,
    TOKEN_PAIR,
    TOKEN_TURF,
    FacilityToken,
)

_FIELDHOUSE_KIND = {
    Mode.COURT: TOKEN_COURT,
    Mode.TURF: TOKEN_TURF,
}


def _gym_rooms(tokens: Iterable[FacilityToken]) -> set:
    rooms = set()
    for court in SPLITTABLE_COURTS:
        halves = {t.unit for t in tokens if t.kind == TOKEN_HALF and t.cluster == court}
        if halves:
            rooms |= halves
        elif any(t.kind == TOKEN_PAIR and t.cluster == court for t in tokens):
            rooms |= {f"{court}A", f"{court}B"}
    return rooms


def resolve_rooms(tokens: Iterable[FacilityToken], mode: Mode) -> List[str]:
    """Return the distinct room ids for ``tokens`` in board order."""
    tokens = list(tokens)
    rooms = _gym_rooms(tokens)
    fieldhouse_kind = _FIELDHOUSE_KIND[mode]
    rooms |= {t.cluster for t in tokens if t.kind == fieldhouse_kind}

    order = room_order(mode)
    return sorted((r for r in rooms if r in order), key=order.__getitem__)
