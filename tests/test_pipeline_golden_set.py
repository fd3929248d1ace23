"""
Golden Set Tests: Runtime truth for pipeline behavior.

The fixture export in golden_set/input/ covers every rejection category,
both split-booking merges, and each display rule. The expected board is
in golden_set/expected_output/events.json.

Usage:
    pytest tests/test_pipeline_golden_set.py -v
"""

import json
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from freezegun import freeze_time

from facility_board.config import DEFAULT_CONFIG
from facility_board.config.room_catalog import Mode, rooms_for_mode
from facility_board.pipeline import build_events, main, run_pipeline
from facility_board.stage1_clean.filter_rows import REJECTION_CATEGORIES
from facility_board.stage1_clean.read_export import parse_export_text

GOLDEN_SET = Path(__file__).parent / "golden_set"
GOLDEN_INPUT = GOLDEN_SET / "input" / "daily_export.csv"
GOLDEN_EXPECTED = GOLDEN_SET / "expected_output" / "events.json"

# Noon in Chicago on the fixture's day
NOW = datetime(2026, 10, 17, 12, 0, tzinfo=ZoneInfo("America/Chicago"))
FROZEN_UTC = "2026-10-17 17:00:00"


class TestGoldenSetExists:
    """Tests to verify golden set is properly configured."""

    def test_golden_input_exists(self):
        assert GOLDEN_INPUT.exists(), f"missing fixture: {GOLDEN_INPUT}"

    def test_golden_expected_exists(self):
        assert GOLDEN_EXPECTED.exists(), f"missing expected output: {GOLDEN_EXPECTED}"


class TestPipelineGoldenSet:
    """Verify pipeline produces expected outputs from golden inputs."""

    def test_output_matches_expected(self, tmp_path):
        out = tmp_path / "events.json"
        assert run_pipeline(GOLDEN_INPUT, out, now=NOW)

        actual = json.loads(out.read_text(encoding="utf-8"))
        expected = json.loads(GOLDEN_EXPECTED.read_text(encoding="utf-8"))
        assert actual == expected

    def test_rejection_counts(self):
        export = parse_export_text(GOLDEN_INPUT.read_text(encoding="utf-8"))
        _, stats = build_events(export, 12 * 60, DEFAULT_CONFIG)

        assert dict(stats) == {
            "malformed_row": 0,
            "non_target_location": 1,
            "unparseable_time": 1,
            "stale": 1,
            "administrative": 2,
            "no_mapping": 1,
            "inactive_configuration": 1,
        }
        assert set(stats) <= set(REJECTION_CATEGORIES)

    def test_output_format(self, tmp_path):
        """Two-space indent, fixed key order, trailing newline."""
        out = tmp_path / "events.json"
        run_pipeline(GOLDEN_INPUT, out, now=NOW)
        text = out.read_text(encoding="utf-8")

        assert text.endswith("}\n")
        assert text.startswith('{\n  "dayStartMinute": 360,\n  "dayEndMinute": 1380,\n  "mode": "turf",')
        assert list(json.loads(text)) == ["dayStartMinute", "dayEndMinute", "mode", "rooms", "slots"]


class TestEndToEnd:
    """Small exports run through every stage."""

    HEADER = "Location,Facility,Reserved Time,Reservee,Reservation Purpose\n"

    def _board(self, body: str, config=DEFAULT_CONFIG) -> dict:
        board, _ = build_events(parse_export_text(self.HEADER + body), 12 * 60, config)
        return board

    def test_org_booking_on_full_court(self):
        board = self._board(
            'Athletic & Event Center,AC Gym - Court 9-AB,6:00 PM - 7:00 PM,"Flight Academy, J. Doe",Practice\n'
        )
        assert board["mode"] == "court"
        assert [s["roomId"] for s in board["slots"]] == ["9A", "9B"]
        for slot in board["slots"]:
            assert slot == {
                "roomId": slot["roomId"],
                "startMinute": 1080,
                "endMinute": 1140,
                "title": "Flight Academy",
                "subtitle": "Practice",
                "org": "Flight Academy",
                "contact": "J. Doe",
            }

    def test_duplicate_rows_give_one_slot(self):
        row = 'Athletic & Event Center,AC Gym - Half Court 2B,6:00 PM - 7:00 PM,"Doe, Jane",Lessons\n'
        board = self._board(row * 3)
        assert len(board["slots"]) == 1
        assert board["slots"][0]["title"] == "Jane Doe"

    def test_court_mode_fieldhouse(self):
        board = self._board(
            "Athletic & Event Center,AC Fieldhouse - Court 3-8,6:00 AM - 11:00 PM,RAEC,Court Season\n"
            "Athletic & Event Center,AC Fieldhouse - Court 5,1:00 PM - 2:00 PM,Hoops Club,Clinic\n"
        )
        assert board["mode"] == "court"
        assert [r["id"] for r in board["rooms"]][4:10] == ["3", "4", "5", "6", "7", "8"]
        assert [s["roomId"] for s in board["slots"]] == ["5"]

    def test_both_sentinels_respect_precedence(self):
        body = (
            "Athletic & Event Center,AC Fieldhouse - Court 3-8,6:00 AM - 11:00 PM,RAEC,Court Season\n"
            "Athletic & Event Center,AC Fieldhouse - Court 3-8,6:00 AM - 11:00 PM,RAEC,Turf Season\n"
        )
        assert self._board(body)["mode"] == "turf"
        court_first = DEFAULT_CONFIG.with_overrides(mode_precedence="court")
        assert self._board(body, court_first)["mode"] == "court"

    def test_unquoted_comma_row_skipped(self):
        """One malformed line costs that line only."""
        good_9 = "Athletic & Event Center,AC Gym - Court 9-AB,6:00 PM - 7:00 PM,Flight Academy,Practice\n"
        good_10 = "Athletic & Event Center,AC Gym - Court 10-AB,7:00 PM - 8:00 PM,Hoops Club,Clinic\n"
        bad = "Athletic & Event Center,AC Gym - Half Court 2B,6:00 PM - 7:00 PM,Doe, Jane,Lessons\n"

        for body in (good_9 + bad + good_10, bad + good_9 + good_10):
            board, stats = build_events(parse_export_text(self.HEADER + body), 12 * 60, DEFAULT_CONFIG)
            assert [s["roomId"] for s in board["slots"]] == ["9A", "9B", "10A", "10B"]
            assert stats["malformed_row"] == 1
            assert stats["non_target_location"] == 0

    def test_season_named_booking_kept(self):
        board = self._board(
            'Athletic & Event Center,AC Gym - Court 9-AB,6:00 PM - 7:00 PM,"Flight Academy, J. Doe",Court Season Tryouts\n'
        )
        assert [s["roomId"] for s in board["slots"]] == ["9A", "9B"]
        assert board["slots"][0]["subtitle"] == "Court Season Tryouts"

    def test_missing_columns_write_scaffold(self, tmp_path):
        csv_path = tmp_path / "export.csv"
        csv_path.write_text("Location,Facility\nAthletic & Event Center,AC Gym - Court 9-AB\n", encoding="utf-8")
        out = tmp_path / "events.json"

        assert run_pipeline(csv_path, out, now=NOW)

        board = json.loads(out.read_text(encoding="utf-8"))
        assert board["slots"] == []
        assert board["mode"] == "court"
        assert [r["id"] for r in board["rooms"]] == [r.id for r in rooms_for_mode(Mode.COURT)]

    def test_headerless_export_fails(self, tmp_path):
        csv_path = tmp_path / "export.csv"
        csv_path.write_text(
            "Athletic & Event Center,AC Gym - Court 9-AB,6:00 PM - 7:00 PM,Flight Academy,Practice\n",
            encoding="utf-8",
        )
        out = tmp_path / "events.json"
        assert run_pipeline(csv_path, out, now=NOW) is False
        assert not out.exists()

    def test_missing_file_fails(self, tmp_path, capsys):
        out = tmp_path / "events.json"
        assert run_pipeline(tmp_path / "absent.csv", out, now=NOW) is False
        assert not out.exists()
        assert "ERROR:" in capsys.readouterr().out


class TestIdempotency:
    """Verify pipeline produces identical output when run multiple times."""

    @freeze_time(FROZEN_UTC)
    def test_pipeline_is_idempotent(self, tmp_path):
        """Same export and same clock give byte-identical JSON."""
        first = tmp_path / "first.json"
        second = tmp_path / "second.json"

        assert run_pipeline(GOLDEN_INPUT, first)
        assert run_pipeline(GOLDEN_INPUT, second)

        assert first.read_bytes() == second.read_bytes()

    @freeze_time(FROZEN_UTC)
    def test_frozen_clock_matches_explicit_now(self, tmp_path):
        implicit = tmp_path / "implicit.json"
        explicit = tmp_path / "explicit.json"
        run_pipeline(GOLDEN_INPUT, implicit)
        run_pipeline(GOLDEN_INPUT, explicit, now=NOW)
        assert implicit.read_bytes() == explicit.read_bytes()


class TestCommandLine:
    def test_exit_codes(self, tmp_path):
        out = tmp_path / "events.json"
        with pytest.raises(SystemExit) as ok:
            main(["--csv", str(GOLDEN_INPUT), "--out", str(out), "--now", NOW.isoformat()])
        assert ok.value.code == 0
        assert out.exists()

        with pytest.raises(SystemExit) as failed:
            main(["--csv", str(tmp_path / "absent.csv"), "--out", str(out)])
        assert failed.value.code == 1

    def test_org_keyword_replaces_defaults(self, tmp_path):
        out = tmp_path / "events.json"
        with pytest.raises(SystemExit):
            main([
                "--csv", str(GOLDEN_INPUT), "--out", str(out),
                "--now", NOW.isoformat(), "--org-keyword", "soccer",
            ])
        slots = json.loads(out.read_text(encoding="utf-8"))["slots"]
        night_owls = next(s for s in slots if s["roomId"] == "10B")
        assert night_owls["org"] == "", "basketball/league are no longer organization keywords"
