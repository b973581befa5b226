"""
tests/test_schedule.py

Covers:
  - Building snapshots from store rows
  - Tolerant lookups
  - Optimistic merge: copy semantics, round trip, idempotence
  - Holiday prefill
  - Copy-last-week, vacation week and the text export
"""

from datetime import date, datetime

import pytest

from calc import Location
from schedule import (
    ScheduleSnapshot,
    copy_week_entries,
    prefill_holidays,
    team_week_text,
    vacation_week_entries,
)


class TestFromRows:

    def test_every_user_present(self, team):
        snapshot = ScheduleSnapshot.from_rows([], team)
        assert snapshot.user_ids() == ["u-anna", "u-bram"]
        assert dict(snapshot.for_user("u-anna")) == {}

    def test_rows_are_parsed(self, team):
        snapshot = ScheduleSnapshot.from_rows(
            [
                {"user_id": "u-anna", "date": "2024-01-08", "location": "delft"},
                {"user_id": "u-bram", "date": "2024-01-08T00:00:00", "location": "home"},
            ],
            team,
        )
        assert snapshot.get("u-anna", date(2024, 1, 8)) is Location.DELFT
        assert snapshot.get("u-bram", "2024-01-08") is Location.HOME

    def test_datetime_date_value(self, team):
        snapshot = ScheduleSnapshot.from_rows(
            [{"user_id": "u-anna", "date": datetime(2024, 1, 8, 0, 0), "location": "utrecht"}], team
        )
        assert snapshot.get("u-anna", date(2024, 1, 8)) is Location.UTRECHT
        assert list(snapshot.for_user("u-anna")) == ["2024-01-08"]

    def test_invalid_location_row(self, team):
        with pytest.raises(ValueError, match="Invalid location"):
            ScheduleSnapshot.from_rows([{"user_id": "u-anna", "date": "2024-01-08", "location": "moon"}], team)

    def test_from_mapping(self):
        snapshot = ScheduleSnapshot.from_mapping({"u-1": {"2024-01-08": "off"}, "u-2": None})
        assert snapshot.get("u-1", "2024-01-08") is Location.OFF
        assert dict(snapshot.for_user("u-2")) == {}


class TestLookups:

    def test_missing_user_and_date(self, empty_snapshot):
        assert empty_snapshot.get("nobody", date(2024, 1, 8)) is None
        assert empty_snapshot.get("u-anna", "2024-01-08") is None
        assert len(empty_snapshot.for_user("nobody")) == 0

    def test_snapshot_is_read_only(self, empty_snapshot):
        with pytest.raises(TypeError):
            empty_snapshot.data["u-anna"]["2024-01-08"] = Location.HOME


class TestWithEntry:

    def test_round_trip(self, empty_snapshot):
        updated = empty_snapshot.with_entry("u-anna", "2024-01-08", "gent")
        assert updated.get("u-anna", "2024-01-08") is Location.GENT

    def test_original_untouched(self, empty_snapshot):
        updated = empty_snapshot.with_entry("u-anna", date(2024, 1, 8), Location.GENT)
        assert empty_snapshot.get("u-anna", "2024-01-08") is None
        assert updated is not empty_snapshot
        assert updated.version == empty_snapshot.version + 1

    def test_datetime_stored_under_date_key(self, empty_snapshot):
        updated = empty_snapshot.with_entry("u-anna", datetime(2024, 1, 8, 9, 0), "delft")
        assert updated.get("u-anna", date(2024, 1, 8)) is Location.DELFT
        assert updated.get("u-anna", datetime(2024, 1, 8, 17, 45)) is Location.DELFT
        assert dict(updated.for_user("u-anna")) == {"2024-01-08": Location.DELFT}

    def test_idempotent(self, empty_snapshot):
        once = empty_snapshot.with_entry("u-anna", "2024-01-08", "home")
        twice = once.with_entry("u-anna", "2024-01-08", "home")
        assert once.as_dict() == twice.as_dict()

    def test_overwrites_existing(self, empty_snapshot):
        snapshot = empty_snapshot.with_entry("u-anna", "2024-01-08", "home")
        snapshot = snapshot.with_entry("u-anna", "2024-01-08", "off")
        assert snapshot.get("u-anna", "2024-01-08") is Location.OFF

    def test_other_users_shared_unchanged(self, empty_snapshot):
        base = empty_snapshot.with_entry("u-bram", "2024-01-08", "zwolle")
        updated = base.with_entry("u-anna", "2024-01-08", "home")
        assert updated.get("u-bram", "2024-01-08") is Location.ZWOLLE

    def test_new_user(self, empty_snapshot):
        updated = empty_snapshot.with_entry("u-new", "2024-01-08", "other")
        assert updated.get("u-new", "2024-01-08") is Location.OTHER

    @pytest.mark.parametrize("day", ["2024-1-8", "08-01-2024", "2024-02-30"])
    def test_rejects_bad_date(self, empty_snapshot, day):
        with pytest.raises(ValueError):
            empty_snapshot.with_entry("u-anna", day, "home")

    def test_rejects_bad_location(self, empty_snapshot):
        with pytest.raises(ValueError):
            empty_snapshot.with_entry("u-anna", "2024-01-08", "beach")

    def test_with_entries(self, empty_snapshot):
        snapshot = empty_snapshot.with_entries("u-anna", vacation_week_entries(date(2024, 1, 10)))
        assert snapshot.version == empty_snapshot.version + 5
        assert all(snapshot.get("u-anna", d) is Location.OFF for d in
                   ["2024-01-08", "2024-01-09", "2024-01-10", "2024-01-11", "2024-01-12"])

    def test_snapshots_compare_by_identity(self, empty_snapshot):
        copy = ScheduleSnapshot.from_mapping(empty_snapshot.as_dict())
        assert copy != empty_snapshot
        assert len({copy, empty_snapshot}) == 2


class TestPrefillHolidays:

    def test_weekday_holidays_marked(self, empty_snapshot, team):
        snapshot = prefill_holidays(empty_snapshot, team, [2024])
        # Easter Monday 2024 is a Monday
        assert snapshot.get("u-anna", "2024-04-01") is Location.HOLIDAY
        assert snapshot.get("u-bram", "2024-12-25") is Location.HOLIDAY

    def test_weekend_holidays_skipped(self, empty_snapshot, team):
        # King's Day 2024 falls on a Saturday
        snapshot = prefill_holidays(empty_snapshot, team, [2024])
        assert snapshot.get("u-anna", "2024-04-27") is None

    def test_existing_entries_kept(self, empty_snapshot, team):
        base = empty_snapshot.with_entry("u-anna", "2024-05-09", "home")
        snapshot = prefill_holidays(base, team, [2024])
        assert snapshot.get("u-anna", "2024-05-09") is Location.HOME
        assert snapshot.get("u-bram", "2024-05-09") is Location.HOLIDAY

    def test_input_not_modified(self, empty_snapshot, team):
        prefill_holidays(empty_snapshot, team, [2024])
        assert empty_snapshot.get("u-anna", "2024-04-01") is None


class TestPlanningEdits:

    def test_copy_last_week(self, empty_snapshot):
        snapshot = (
            empty_snapshot
            .with_entry("u-anna", "2024-01-01", "holiday")
            .with_entry("u-anna", "2024-01-02", "delft")
            .with_entry("u-anna", "2024-01-05", "home")
        )
        assert copy_week_entries(snapshot, "u-anna", date(2024, 1, 10)) == [
            ("2024-01-09", Location.DELFT),
            ("2024-01-12", Location.HOME),
        ]

    def test_copy_last_week_nothing_planned(self, empty_snapshot):
        assert copy_week_entries(empty_snapshot, "u-anna", date(2024, 1, 10)) == []

    def test_vacation_week(self):
        entries = vacation_week_entries(date(2024, 1, 13))
        assert [key for key, _ in entries] == [
            "2024-01-08", "2024-01-09", "2024-01-10", "2024-01-11", "2024-01-12",
        ]
        assert {loc for _, loc in entries} == {Location.OFF}


class TestTeamWeekText:

    def test_layout(self, empty_snapshot, team):
        snapshot = empty_snapshot.with_entry("u-anna", "2024-01-08", "home")

        def translate(key, lang, section=None):
            return f"{section}:{key}" if section else key.upper()

        text = team_week_text(
            snapshot, team, date(2024, 1, 10), "en",
            translate=translate, day_label=lambda d, lang: d.strftime("%d/%m"),
        )
        lines = text.splitlines()
        assert lines[0] == "TEAM_OVERVIEW - WEEK 2"
        assert lines[1] == ""
        assert lines[2] == "\t08/01\t09/01\t10/01\t11/01\t12/01"
        assert lines[3] == "Anna\tlocations:home\t-\t-\t-\t-"
        assert lines[4] == "Bram\t-\t-\t-\t-\t-"

    def test_default_translations(self, empty_snapshot, team):
        snapshot = empty_snapshot.with_entry("u-bram", "2024-01-09", "off")
        text = team_week_text(snapshot, team, date(2024, 1, 10), "nl")
        assert text.startswith("Teamoverzicht - Week 2")
        assert "Bram\t-\tVrij\t-\t-\t-" in text
