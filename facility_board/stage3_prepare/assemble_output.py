"""
Stage 3: Assemble Board Output

Sorts slots into board order, validates rooms and slots against the
output contracts, and serializes the events.json document.

Output: events.json
    {
      "dayStartMinute": 360,
      "dayEndMinute": 1380,
      "mode": "court" | "turf",
      "rooms": [{"id", "label", "group"}, ...],
      "slots": [{"roomId", "startMinute", "endMinute",
                 "title", "subtitle", "org", "contact"}, ...]
    }

The same slots and Mode always produce byte-identical JSON.
"""

import json
from pathlib import Path
from typing import Union

import pandas as pd

from ..config import PipelineConfig
from ..config.column_mappings import ROOM_COLUMNS, SLOT_COLUMNS
from ..config.room_catalog import Mode, room_order, rooms_for_mode
from ..contracts import RoomsSchema, slots_schema_for

_SORT_COLUMNS = ["_room_rank", "startMinute", "endMinute", "title", "subtitle"]


def rooms_frame(mode: Mode) -> pd.DataFrame:
    """Canonical rooms for ``mode`` in display order."""
    return pd.DataFrame(
        [{"id": r.id, "label": r.label, "group": r.group} for r in rooms_for_mode(mode)],
        columns=ROOM_COLUMNS,
    )


def sort_slots(slots: pd.DataFrame, mode: Mode) -> pd.DataFrame:
    """Order slots by (room order, start, end, title, subtitle)."""
    df = slots[SLOT_COLUMNS].copy()
    df["_room_rank"] = df["roomId"].map(room_order(mode))
    df = df.sort_values(_SORT_COLUMNS, kind="mergesort")
    return df.drop(columns=["_room_rank"]).reset_index(drop=True)


def validate_board(rooms: pd.DataFrame, slots: pd.DataFrame) -> pd.DataFrame:
    """
    Check both output tables against their contracts.

    Raises pandera.errors.SchemaError on any violation. Returns the
    coerced slots.
    """
    RoomsSchema.validate(rooms)
    return slots_schema_for(rooms["id"]).validate(slots)


def build_board(slots: pd.DataFrame, mode: Mode, config: PipelineConfig) -> dict:
    """Build the events.json document from finished slots."""
    rooms = rooms_frame(mode)
    ordered = validate_board(rooms, sort_slots(slots, mode))

    return {
        "dayStartMinute": int(config.day_start_minute),
        "dayEndMinute": int(config.day_end_minute),
        "mode": mode.value,
        "rooms": [
            {"id": str(r.id), "label": str(r.label), "group": str(r.group)}
            for r in rooms.itertuples(index=False)
        ],
        "slots": [
            {
                "roomId": str(s.roomId),
                "startMinute": int(s.startMinute),
                "endMinute": int(s.endMinute),
                "title": str(s.title),
                "subtitle": str(s.subtitle),
                "org": str(s.org),
                "contact": str(s.contact),
            }
            for s in ordered.itertuples(index=False)
        ],
    }


def build_scaffold(mode: Mode, config: PipelineConfig) -> dict:
    """An empty board for ``mode``; used when the export lacks columns."""
    return build_board(pd.DataFrame(columns=SLOT_COLUMNS), mode, config)


def render_board(board: dict) -> str:
    return json.dumps(board, indent=2, ensure_ascii=False) + "\n"


def save_board(board: dict, filepath: Union[str, Path]) -> None:
    """Write events.json, replacing any previous snapshot."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(render_board(board), encoding="utf-8")
    print(f"  Saved to: {filepath}")
    print(f"  Rooms: {len(board['rooms'])} | Slots: {len(board['slots']):,}")
