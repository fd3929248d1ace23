"""
Business Rule Contract Tests

These tests encode board rules that must ALWAYS be true of events.json.
They run against a board generated from the golden fixture and catch
logic errors the Pandera schemas alone would not.

Run: pytest tests/contracts/test_business_rules.py -v
"""

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pandas as pd
import pandera as pa
import pytest

from facility_board.config import DEFAULT_CONFIG
from facility_board.config.room_catalog import Mode, room_order, rooms_for_mode
from facility_board.contracts import RoomsSchema, SlotsSchema, slots_schema_for
from facility_board.pipeline import build_events
from facility_board.stage1_clean.read_export import parse_export_text
from facility_board.stage3_prepare.assemble_output import build_scaffold, rooms_frame

GOLDEN_INPUT = Path(__file__).parent.parent / "golden_set" / "input" / "daily_export.csv"
NOW = datetime(2026, 10, 17, 12, 0, tzinfo=ZoneInfo("America/Chicago"))


@pytest.fixture(scope="module")
def board():
    export = parse_export_text(GOLDEN_INPUT.read_text(encoding="utf-8"))
    result, _ = build_events(export, NOW.hour * 60 + NOW.minute, DEFAULT_CONFIG)
    return result


@pytest.fixture
def slots(board):
    return pd.DataFrame(board["slots"])


# =============================================================================
# Room list rules
# =============================================================================

class TestRoomRules:
    """The room list is the fixed catalog for the day's Mode."""

    def test_rooms_match_catalog(self, board):
        """
        Rooms are exactly the catalog for the reported Mode, in order.

        Business Rule: south gym, fieldhouse (courts or turf), north gym
        """
        mode = Mode(board["mode"])
        expected = [r.id for r in rooms_for_mode(mode)]
        actual = [r["id"] for r in board["rooms"]]
        assert actual == expected, f"room list drifted from the {mode.value} catalog"

    def test_rooms_contract(self, board):
        RoomsSchema.validate(pd.DataFrame(board["rooms"]))

    @pytest.mark.parametrize("mode, count", [(Mode.COURT, 14), (Mode.TURF, 12)])
    def test_catalog_size(self, mode, count):
        assert len(rooms_for_mode(mode)) == count


# =============================================================================
# Slot rules
# =============================================================================

class TestSlotRules:
    """Every slot sits in a board room and appears once, in board order."""

    def test_slots_reference_board_rooms(self, board, slots):
        room_ids = {r["id"] for r in board["rooms"]}
        stray = slots[~slots["roomId"].isin(room_ids)]
        assert len(stray) == 0, f"slots outside the board: {stray['roomId'].unique().tolist()}"

    def test_slots_unique(self, slots):
        """
        No two slots share (room, start, end, title, subtitle).

        Compared case-insensitively, matching the dedupe rule.
        """
        key = slots[["roomId", "startMinute", "endMinute", "title", "subtitle"]].copy()
        key["title"] = key["title"].str.casefold()
        key["subtitle"] = key["subtitle"].str.casefold()
        dupes = key[key.duplicated(keep=False)]
        assert len(dupes) == 0, f"duplicate slots: {dupes.to_dict('records')}"

    def test_slots_sorted(self, board, slots):
        order = room_order(Mode(board["mode"]))
        keys = [
            (order[s.roomId], s.startMinute, s.endMinute, s.title, s.subtitle)
            for s in slots.itertuples(index=False)
        ]
        assert keys == sorted(keys), "slots must be in (room, start, end, title, subtitle) order"

    def test_positive_length(self, slots):
        bad = slots[slots["endMinute"] <= slots["startMinute"]]
        assert len(bad) == 0, f"zero or negative length slots: {bad.to_dict('records')}"

    def test_start_within_day(self, slots):
        assert slots["startMinute"].between(0, 1439).all()

    def test_no_stale_slots(self, slots):
        cutoff = NOW.hour * 60 + NOW.minute - DEFAULT_CONFIG.grace_minutes
        assert (slots["endMinute"] >= cutoff).all(), "stale bookings leaked onto the board"

    def test_titles_never_blank(self, slots):
        assert (slots["title"].str.strip() != "").all()

    def test_slots_contract(self, board, slots):
        slots_schema_for([r["id"] for r in board["rooms"]]).validate(slots)


# =============================================================================
# Contract enforcement
# =============================================================================

class TestContractViolations:
    """The schemas reject boards that break the rules above."""

    def _slot(self, **changes):
        slot = {
            "roomId": "9A", "startMinute": 1080, "endMinute": 1140,
            "title": "Flight Academy", "subtitle": "Practice", "org": "", "contact": "",
        }
        slot.update(changes)
        return slot

    def test_end_before_start_rejected(self):
        df = pd.DataFrame([self._slot(startMinute=1140, endMinute=1080)])
        with pytest.raises(pa.errors.SchemaError):
            SlotsSchema.validate(df)

    def test_duplicate_slot_rejected(self):
        df = pd.DataFrame([self._slot(), self._slot()])
        with pytest.raises(pa.errors.SchemaError):
            SlotsSchema.validate(df)

    def test_room_off_board_rejected(self):
        df = pd.DataFrame([self._slot(roomId="SA")])
        with pytest.raises(pa.errors.SchemaError):
            slots_schema_for(rooms_frame(Mode.COURT)["id"]).validate(df)

    def test_unknown_group_rejected(self):
        df = pd.DataFrame([{"id": "1A", "label": "1A", "group": "annex"}])
        with pytest.raises(pa.errors.SchemaError):
            RoomsSchema.validate(df)

    def test_scaffold_is_valid(self):
        scaffold = build_scaffold(Mode.TURF, DEFAULT_CONFIG)
        assert scaffold["slots"] == []
        assert scaffold["mode"] == "turf"
