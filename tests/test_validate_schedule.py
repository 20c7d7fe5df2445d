"""Tests for the parse → duration → overlap validation sequence."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from crewtrack.domain.models import (
    RejectionKind,
    ScheduleCandidate,
    ValidationState,
)
from crewtrack.services.conflicts import (
    END_BEFORE_START,
    SHIFT_CONFLICT,
    validate_schedule,
)

# Worker W1 already works 09:00–11:00 on 2024-03-01.
ROSTER = [
    {
        "_id": "existing",
        "workerId": "W1",
        "buildingId": "B1",
        "startTime": "2024-03-01T09:00:00",
        "endTime": "2024-03-01T11:00:00",
    }
]


def _candidate(
    worker="W1", day="2024-03-01", start="10:00", end="12:00", **extra
) -> dict:
    return {
        "workerId": worker,
        "buildingId": "B1",
        "date": day,
        "startTime": start,
        "endTime": end,
        "task": "Replace hallway light fixtures",
        **extra,
    }


# ---------------------------------------------------------------------------
# Seed scenario
# ---------------------------------------------------------------------------


def test_overlapping_candidate_is_rejected():
    outcome = validate_schedule(_candidate(start="10:00", end="12:00"), ROSTER)
    assert not outcome.approved
    assert outcome.state == ValidationState.OVERLAP_CHECK
    assert outcome.kind == RejectionKind.CONFLICT
    assert outcome.reason == SHIFT_CONFLICT
    assert outcome.conflicting_ids == ["existing"]


def test_adjacent_candidate_is_approved():
    outcome = validate_schedule(_candidate(start="11:00", end="12:00"), ROSTER)
    assert outcome.approved
    assert outcome.state == ValidationState.APPROVED
    assert outcome.start == datetime(2024, 3, 1, 11, 0)
    assert outcome.end == datetime(2024, 3, 1, 12, 0)
    assert outcome.estimated_hours == 1.0


def test_different_day_is_approved():
    outcome = validate_schedule(
        _candidate(day="2024-03-02", start="09:00", end="11:00"), ROSTER
    )
    assert outcome.approved


def test_different_worker_is_approved():
    outcome = validate_schedule(_candidate(worker="W2", start="09:00", end="11:00"), ROSTER)
    assert outcome.approved
    assert outcome.worker_id == "W2"


def test_short_overlapping_candidate_fails_duration_first():
    outcome = validate_schedule(_candidate(start="09:10", end="09:30"), ROSTER)
    assert not outcome.approved
    assert outcome.state == ValidationState.DURATION_CHECK
    assert outcome.kind == RejectionKind.MINIMUM_DURATION
    assert outcome.reason == "Minimum duration is 30 minutes"


# ---------------------------------------------------------------------------
# Duration
# ---------------------------------------------------------------------------


def test_fifteen_minutes_is_too_short():
    outcome = validate_schedule(_candidate(start="14:00", end="14:15"), [])
    assert outcome.kind == RejectionKind.MINIMUM_DURATION


def test_thirty_minutes_is_enough():
    outcome = validate_schedule(_candidate(start="14:00", end="14:30"), [])
    assert outcome.approved
    assert outcome.estimated_hours == 0.5


@pytest.mark.parametrize("end", ["14:00", "13:00"])
def test_end_must_follow_start(end):
    outcome = validate_schedule(_candidate(start="14:00", end=end), [])
    assert outcome.state == ValidationState.DURATION_CHECK
    assert outcome.reason == END_BEFORE_START
    assert outcome.field == "end_time"


def test_custom_minimum_duration():
    outcome = validate_schedule(
        _candidate(start="14:00", end="14:45"), [], min_duration=timedelta(hours=1)
    )
    assert outcome.reason == "Minimum duration is 60 minutes"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def test_missing_worker_is_invalid_input():
    outcome = validate_schedule(_candidate(worker={"name": "nobody"}), ROSTER)
    assert outcome.state == ValidationState.PARSING
    assert outcome.kind == RejectionKind.INVALID_INPUT
    assert outcome.field == "worker_id"


def test_missing_building_is_invalid_input():
    outcome = validate_schedule(_candidate(buildingId=""), [])
    assert outcome.kind == RejectionKind.INVALID_INPUT
    assert outcome.field == "building_id"


@pytest.mark.parametrize("task", ["", "   ", None, "x" * 501])
def test_task_must_be_present_and_bounded(task):
    outcome = validate_schedule(_candidate(task=task), [])
    assert outcome.kind == RejectionKind.INVALID_INPUT
    assert outcome.field == "task"


def test_notes_are_bounded():
    outcome = validate_schedule(_candidate(notes="n" * 1001), [])
    assert outcome.field == "notes"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"date": "garbage"}, "date"),
        ({"date": None}, "date"),
        ({"startTime": "garbage"}, "start_time"),
        ({"endTime": None}, "end_time"),
    ],
)
def test_unparseable_time_is_rejected_before_other_checks(overrides, field):
    outcome = validate_schedule(_candidate(**overrides), ROSTER)
    assert outcome.state == ValidationState.PARSING
    assert outcome.kind == RejectionKind.INVALID_TIME
    assert outcome.field == field


# ---------------------------------------------------------------------------
# Editing and input shapes
# ---------------------------------------------------------------------------


def test_editing_excludes_the_record_itself():
    candidate = _candidate(start="09:00", end="11:30")
    assert not validate_schedule(candidate, ROSTER).approved
    assert validate_schedule(candidate, ROSTER, exclude_id="existing").approved


def test_embedded_references_and_native_values():
    candidate = ScheduleCandidate(
        worker_id={"_id": "W1", "firstName": "Ana"},
        building_id={"id": "B1"},
        date=date(2024, 3, 1),
        start_time=datetime(2024, 3, 1, 11, 0, 45),
        end_time=datetime(2024, 3, 1, 13, 0),
        task="Inspect roof drains",
    )
    outcome = validate_schedule(candidate, ROSTER)
    assert outcome.approved
    assert outcome.worker_id == "W1"
    assert outcome.building_id == "B1"
    assert outcome.start == datetime(2024, 3, 1, 11, 0)


def test_malformed_roster_entry_does_not_block():
    roster = ROSTER + [
        {"_id": "broken", "workerId": "W1", "startTime": "garbage", "endTime": None}
    ]
    outcome = validate_schedule(_candidate(start="13:00", end="15:00"), roster)
    assert outcome.approved


def test_non_list_roster_is_a_programming_error():
    with pytest.raises(TypeError):
        validate_schedule(_candidate(), None)


def test_relative_date_lands_on_the_real_calendar():
    before = date.today()
    outcome = validate_schedule(_candidate(day="tomorrow", start="09:00", end="11:00"), [])
    after = date.today()
    assert outcome.approved
    assert before + timedelta(days=1) <= outcome.start.date() <= after + timedelta(days=1)


def test_bare_numbers_are_not_clock_times():
    outcome = validate_schedule(_candidate(start="9", end="17"), [])
    assert outcome.state == ValidationState.PARSING
    assert outcome.kind == RejectionKind.INVALID_TIME
    assert outcome.reason == "Invalid date or time"
    assert outcome.field == "start_time"


@pytest.mark.parametrize(
    "overrides, field",
    [({"task": 123}, "task"), ({"status": "on_hold"}, "status")],
)
def test_payload_type_errors_become_rejections(overrides, field):
    outcome = validate_schedule(_candidate(**overrides), ROSTER)
    assert not outcome.approved
    assert outcome.state == ValidationState.PARSING
    assert outcome.kind == RejectionKind.INVALID_INPUT
    assert outcome.field == field
