"""Overlap warnings against calendar blocks and slot-alternative ranking."""

from __future__ import annotations

import pytest

from tripslot.modules.scheduling.alternatives import SlotActivity, rank_slot_alternatives
from tripslot.modules.scheduling.overlaps import (
    CalendarBlock,
    PlannedItem,
    block_kind_label,
    build_overlap_warnings,
)
from tripslot.schemas.schedule import Coordinates, OpenHoursRow

DAY = "2026-03-18"
FLIGHT = CalendarBlock(id="f1", title="Flight to Rome", kind="flight", date=DAY,
                       start_time="10:30:00", end_time="12:30:00")


# ── Overlap warnings ──────────────────────────────────────────────────────────

def test_overlap_produces_readable_warning():
    planned = [PlannedItem("1", "Colosseum", DAY, "10:00:00", "11:00:00")]
    assert build_overlap_warnings(planned, [FLIGHT]) == [
        'Overlap on 2026-03-18: "Colosseum" (10:00-11:00) overlaps Flight "Flight to Rome" (10:30-12:30).',
    ]


def test_touching_ranges_do_not_overlap():
    planned = [PlannedItem("1", "Colosseum", DAY, "09:30", "10:30")]
    assert build_overlap_warnings(planned, [FLIGHT]) == []


def test_other_dates_and_bad_rows_are_ignored():
    planned = [
        PlannedItem("1", "Elsewhere", "2026-03-19", "10:00", "11:00"),
        PlannedItem("2", "Broken", DAY, "11:00", "10:00"),
        PlannedItem("3", "No date", "", "10:00", "11:00"),
    ]
    assert build_overlap_warnings(planned, [FLIGHT]) == []


def test_warnings_are_capped_with_summary_line():
    planned = [
        PlannedItem("1", "Colosseum", DAY, "10:00:00", "11:00:00"),
        PlannedItem("2", "Trevi Fountain", DAY, "10:15:00", "11:15:00"),
    ]
    warnings = build_overlap_warnings(planned, [FLIGHT], max_warnings=1)
    assert warnings == [
        'Overlap on 2026-03-18: "Colosseum" (10:00-11:00) overlaps Flight "Flight to Rome" (10:30-12:30).',
        "Overlap warnings omitted for 1 other item(s).",
    ]


def test_cap_is_clamped_to_at_least_one():
    planned = [PlannedItem("1", "Colosseum", DAY, "10:00", "11:00")]
    assert len(build_overlap_warnings(planned, [FLIGHT], max_warnings=0)) == 1


def test_block_kind_labels():
    assert block_kind_label("hotel_check_in") == "Hotel check-in"
    assert block_kind_label(None) == "Custom event"
    assert block_kind_label("boat_trip") == "Boat trip"


# ── Slot alternatives ─────────────────────────────────────────────────────────

MONDAY = "2026-01-05"


def _target(**overrides):
    base = dict(
        id="10", name="Target Museum", destination_id="1", date=MONDAY,
        start_time="10:00:00", end_time="11:00:00",
        type_tags=("museum",), coordinates=Coordinates(0.0, 0.0),
    )
    base.update(overrides)
    return SlotActivity(**base)


def _hours(day, open_hour, close_hour):
    return (OpenHoursRow(day=day, open_hour=open_hour, open_minute=0, close_hour=close_hour, close_minute=0),)


def test_ranks_unscheduled_same_destination_open_candidates():
    candidates = [
        SlotActivity("11", "Nearby Museum", "1", type_tags=("museum",),
                     coordinates=Coordinates(0.0, 0.01), open_hours=_hours(1, 9, 17)),
        SlotActivity("12", "Far Park", "1", type_tags=("park",), coordinates=Coordinates(0.0, 0.1)),
        SlotActivity("13", "Wrong Destination", "2", type_tags=("museum",), coordinates=Coordinates(0.01, 0.0)),
        SlotActivity("14", "Closed During Slot", "1", date=MONDAY, start_time="10:00:00", end_time="11:00:00",
                     type_tags=("museum",), coordinates=Coordinates(0.0, 0.02), open_hours=_hours(1, 12, 13)),
        SlotActivity("15", "Closest Backup", "1", type_tags=("museum",), coordinates=Coordinates(0.0, 0.005)),
    ]
    ranked = rank_slot_alternatives(_target(), candidates)

    assert [s.id for s in ranked] == ["11", "15", "12"]
    assert ranked[0].is_open_during_slot is True
    assert ranked[0].reasons == ["Nearby (1.1 km)", "Similar vibe", "Open during that time"]
    assert ranked[1].is_open_during_slot is None
    assert ranked[2].score == pytest.approx(0.0)


def test_candidates_scheduled_elsewhere_are_excluded():
    candidates = [
        SlotActivity("11", "Already Scheduled", "1", date=MONDAY, start_time="09:00:00", end_time="10:00:00",
                     type_tags=("museum",), coordinates=Coordinates(0.0, 0.01)),
    ]
    assert rank_slot_alternatives(_target(), candidates) == []


def test_target_itself_and_blank_ids_are_skipped():
    candidates = [SlotActivity("10", "Self", "1"), SlotActivity("  ", "Blank", "1")]
    assert rank_slot_alternatives(_target(), candidates) == []


def test_ties_break_on_distance_then_id():
    candidates = [
        SlotActivity("b", "No coords B", "1"),
        SlotActivity("a", "No coords A", "1"),
    ]
    assert [s.id for s in rank_slot_alternatives(_target(), candidates)] == ["a", "b"]


def test_limit_is_clamped_to_three():
    candidates = [
        SlotActivity(str(i), f"Spot {i}", "1", coordinates=Coordinates(0.0, 0.001 * i)) for i in range(1, 6)
    ]
    assert len(rank_slot_alternatives(_target(), candidates, max_alternatives=10)) == 3
    assert len(rank_slot_alternatives(_target(), candidates, max_alternatives=0)) == 1


def test_without_slot_time_opening_hours_are_not_checked():
    target = _target(date=None, start_time=None, end_time=None)
    candidates = [
        SlotActivity("11", "Closed Monday", "1", coordinates=Coordinates(0.0, 0.01), open_hours=_hours(1, 20, 21)),
    ]
    ranked = rank_slot_alternatives(target, candidates)
    assert [s.id for s in ranked] == ["11"]
    assert ranked[0].is_open_during_slot is None
