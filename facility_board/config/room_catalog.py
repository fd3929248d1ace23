"""
Room Catalog

The fixed set of board cells per fieldhouse Mode. Order here is the
board's display order: south gym, fieldhouse, north gym.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple


class Mode(Enum):
    """Physical configuration of the fieldhouse for the day."""

    COURT = "court"
    TURF = "turf"


@dataclass(frozen=True)
class CanonicalRoom:
    id: str
    label: str
    group: str


GROUP_SOUTH = "south"
GROUP_FIELDHOUSE = "fieldhouse"
GROUP_NORTH = "north"

# Gym courts that split into A/B halves, by cluster
SOUTH_COURTS = ("1", "2")
NORTH_COURTS = ("9", "10")
SPLITTABLE_COURTS = SOUTH_COURTS + NORTH_COURTS

FIELDHOUSE_COURTS = ("3", "4", "5", "6", "7", "8")
TURF_QUARTERS = ("SA", "SB", "NA", "NB")


def _halves(courts: Tuple[str, ...], group: str) -> List[CanonicalRoom]:
    return [
        CanonicalRoom(id=f"{court}{half}", label=f"{court}{half}", group=group)
        for court in courts
        for half in ("A", "B")
    ]


SOUTH_ROOMS = _halves(SOUTH_COURTS, GROUP_SOUTH)
NORTH_ROOMS = _halves(NORTH_COURTS, GROUP_NORTH)

FIELDHOUSE_ROOMS = {
    Mode.COURT: [
        CanonicalRoom(id=court, label=f"Court {court}", group=GROUP_FIELDHOUSE)
        for court in FIELDHOUSE_COURTS
    ],
    Mode.TURF: [
        CanonicalRoom(id=quarter, label=f"Turf {quarter}", group=GROUP_FIELDHOUSE)
        for quarter in TURF_QUARTERS
    ],
}


def rooms_for_mode(mode: Mode) -> List[CanonicalRoom]:
    """Return the board's rooms for ``mode`` in display order."""
    return SOUTH_ROOMS + FIELDHOUSE_ROOMS[mode] + NORTH_ROOMS


def room_order(mode: Mode) -> Dict[str, int]:
    """Map room id -> display position for ``mode``."""
    return {room.id: idx for idx, room in enumerate(rooms_for_mode(mode))}
