"""Service for validating worker schedule submissions against a roster.

Roster entries come from more than one source, so worker references may be
bare ids or embedded objects, and start/end may be stored as
``startDate``/``endDate`` instants or as ``startTime``/``endTime`` on a
``date``. Everything is normalized here before any comparison.

Overlap rule: conflict if candidate.start < existing.end AND existing.start < candidate.end.
Shifts that only touch (end == start) are NOT considered conflicts.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from crewtrack.config import settings
from crewtrack.domain.models import (
    RejectionKind,
    ScheduleCandidate,
    ValidationOutcome,
    ValidationState,
)
from crewtrack.services.timeparse import to_clock, to_datetime

logger = logging.getLogger(__name__)

_ID_KEYS = ("_id", "id", "value")
_RECORD_ID_FIELDS = ("_id", "id")
_WORKER_FIELDS = ("workerId", "worker_id")
_WORKER_FALLBACK_FIELDS = ("worker",)
_DAY_FIELDS = ("date",)
_START_DATE_FIELDS = ("startDate", "start_date")
_END_DATE_FIELDS = ("endDate", "end_date")
_START_TIME_FIELDS = ("startTime", "start_time")
_END_TIME_FIELDS = ("endTime", "end_time")

WORKER_REQUIRED = "Worker is required"
BUILDING_REQUIRED = "Building is required"
TASK_REQUIRED = "Task description is required"
INVALID_TIME = "Invalid date or time"
END_BEFORE_START = "End time must be after start time"
SHIFT_CONFLICT = "Schedule conflicts with an existing shift for this worker"


@dataclass(frozen=True)
class Shift:
    """A candidate reduced to what overlap detection needs."""

    worker_id: str
    start: datetime
    end: datetime


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def _field(record: Any, names: Sequence[str]) -> Any:
    """Return the first non-None value stored under any of *names*."""
    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name)
        else:
            value = getattr(record, name, None)
        if value is not None:
            return value
    return None


def resolve_identifier(value: Any) -> str | None:
    """Reduce a bare id or an embedded ``{_id|id|value: ...}`` object to a scalar id."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, UUID)):
        return str(value)
    for key in _ID_KEYS:
        if isinstance(value, Mapping):
            nested = value.get(key)
        else:
            nested = getattr(value, key, None)
        if nested is None or nested is value:
            continue
        resolved = resolve_identifier(nested)
        if resolved is not None:
            return resolved
    return None


def combine_date_and_time(day: Any, time_of_day: Any) -> datetime | None:
    """Build one instant from *day*'s calendar date and *time_of_day*'s hour and minute.

    Returns ``None`` when either input does not parse, so callers can stop
    before comparing against a corrupt instant.
    """
    parsed_day = to_datetime(day)
    parsed_time = to_clock(time_of_day)
    if parsed_day is None or parsed_time is None:
        return None
    return datetime(
        parsed_day.year,
        parsed_day.month,
        parsed_day.day,
        parsed_time.hour,
        parsed_time.minute,
    )


def _schedule_instant(
    record: Any, date_fields: Sequence[str], time_fields: Sequence[str]
) -> datetime | None:
    value = _field(record, date_fields)
    if value is not None:
        return to_datetime(value)

    value = _field(record, time_fields)
    if value is None:
        return None
    day = _field(record, _DAY_FIELDS)
    if day is not None:
        return combine_date_and_time(day, value)
    return to_datetime(value)


def get_schedule_start(record: Any) -> datetime | None:
    """Start instant of a roster entry: ``startDate``, else ``startTime`` on ``date``."""
    return _schedule_instant(record, _START_DATE_FIELDS, _START_TIME_FIELDS)


def get_schedule_end(record: Any) -> datetime | None:
    """End instant of a roster entry: ``endDate``, else ``endTime`` on ``date``."""
    return _schedule_instant(record, _END_DATE_FIELDS, _END_TIME_FIELDS)


def worker_ids_of(record: Any) -> set[str]:
    """Worker ids a roster entry belongs to, from its primary and fallback fields."""
    ids: set[str] = set()
    for names in (_WORKER_FIELDS, _WORKER_FALLBACK_FIELDS):
        resolved = resolve_identifier(_field(record, names))
        if resolved is not None:
            ids.add(resolved)
    return ids


def record_id(record: Any) -> str | None:
    """Id of a roster entry, read from ``_id`` or ``id``."""
    return resolve_identifier(_field(record, _RECORD_ID_FIELDS))


# ---------------------------------------------------------------------------
# Overlap detection
# ---------------------------------------------------------------------------


def find_overlaps(
    candidate: Shift,
    roster: Sequence[Any],
    exclude_id: Any = None,
) -> list[Any]:
    """Return roster entries for the same worker and day that overlap *candidate*.

    The entry matching *exclude_id* (the record being edited) is skipped, as
    is any entry whose start or end does not parse. *roster* is only read.
    """
    if not isinstance(roster, (list, tuple)):
        raise TypeError(f"roster must be a list, got {type(roster).__name__}")

    candidate_day = candidate.start.strftime("%Y-%m-%d")
    excluded = resolve_identifier(exclude_id)

    overlapping = []
    for record in roster:
        if candidate.worker_id not in worker_ids_of(record):
            continue

        start = get_schedule_start(record)
        end = get_schedule_end(record)
        if start is None or end is None or end <= start:
            logger.debug("Ignoring roster entry with bad times: %s", record_id(record))
            continue

        if start.strftime("%Y-%m-%d") != candidate_day:
            continue
        if excluded is not None and record_id(record) == excluded:
            continue

        if start < candidate.end and candidate.start < end:
            overlapping.append(record)
    return overlapping


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _reject(
    state: ValidationState,
    kind: RejectionKind,
    reason: str,
    field: str | None = None,
    **known: Any,
) -> ValidationOutcome:
    logger.info("Schedule rejected at %s: %s", state, reason)
    return ValidationOutcome(
        approved=False, state=state, kind=kind, reason=reason, field=field, **known
    )


def invalid_input_outcome(exc: ValidationError) -> ValidationOutcome:
    """Turn a payload that does not fit the candidate model into a PARSING rejection."""
    errors = exc.errors()
    loc = errors[0]["loc"] if errors else ()
    field = to_snake(str(loc[0])) if loc else None
    reason = f"Invalid {field.replace('_', ' ')}" if field else "Invalid schedule payload"
    return _reject(ValidationState.PARSING, RejectionKind.INVALID_INPUT, reason, field)


def validate_schedule(
    candidate: ScheduleCandidate | Mapping[str, Any],
    roster: Sequence[Any],
    exclude_id: Any = None,
    min_duration: timedelta | None = None,
) -> ValidationOutcome:
    """Decide whether *candidate* may be committed against *roster*.

    Runs parsing, then the duration check, then the overlap check, and stops
    at the first failure. Business-rule violations come back as a rejected
    outcome; only a non-list *roster* raises.
    """
    if not isinstance(roster, (list, tuple)):
        raise TypeError(f"roster must be a list, got {type(roster).__name__}")
    if not isinstance(candidate, ScheduleCandidate):
        try:
            candidate = ScheduleCandidate.model_validate(candidate)
        except ValidationError as exc:
            return invalid_input_outcome(exc)
    if min_duration is None:
        min_duration = timedelta(minutes=settings.MIN_SHIFT_MINUTES)

    # -- parsing -----------------------------------------------------------
    parsing = ValidationState.PARSING
    worker_id = resolve_identifier(candidate.worker_id)
    if worker_id is None:
        return _reject(parsing, RejectionKind.INVALID_INPUT, WORKER_REQUIRED, "worker_id")

    building_id = resolve_identifier(candidate.building_id)
    if building_id is None:
        return _reject(
            parsing,
            RejectionKind.INVALID_INPUT,
            BUILDING_REQUIRED,
            "building_id",
            worker_id=worker_id,
        )
    known: dict[str, Any] = {"worker_id": worker_id, "building_id": building_id}

    task = (candidate.task or "").strip()
    if not task:
        return _reject(parsing, RejectionKind.INVALID_INPUT, TASK_REQUIRED, "task", **known)
    if len(task) > settings.TASK_MAX_LENGTH:
        return _reject(
            parsing,
            RejectionKind.INVALID_INPUT,
            f"Task description must be at most {settings.TASK_MAX_LENGTH} characters",
            "task",
            **known,
        )
    if candidate.notes and len(candidate.notes.strip()) > settings.NOTES_MAX_LENGTH:
        return _reject(
            parsing,
            RejectionKind.INVALID_INPUT,
            f"Notes must be at most {settings.NOTES_MAX_LENGTH} characters",
            "notes",
            **known,
        )

    start = combine_date_and_time(candidate.date, candidate.start_time)
    end = combine_date_and_time(candidate.date, candidate.end_time)
    if start is None or end is None:
        if to_datetime(candidate.date) is None:
            bad_field = "date"
        else:
            bad_field = "start_time" if start is None else "end_time"
        return _reject(parsing, RejectionKind.INVALID_TIME, INVALID_TIME, bad_field, **known)
    known.update(start=start, end=end)

    # -- duration ----------------------------------------------------------
    if end <= start:
        return _reject(
            ValidationState.DURATION_CHECK,
            RejectionKind.MINIMUM_DURATION,
            END_BEFORE_START,
            "end_time",
            **known,
        )
    if end - start < min_duration:
        minutes = int(min_duration.total_seconds() // 60)
        return _reject(
            ValidationState.DURATION_CHECK,
            RejectionKind.MINIMUM_DURATION,
            f"Minimum duration is {minutes} minutes",
            "end_time",
            **known,
        )

    # -- overlap -----------------------------------------------------------
    overlapping = find_overlaps(Shift(worker_id, start, end), roster, exclude_id)
    if overlapping:
        return _reject(
            ValidationState.OVERLAP_CHECK,
            RejectionKind.CONFLICT,
            SHIFT_CONFLICT,
            conflicting_ids=[rid for rid in map(record_id, overlapping) if rid],
            **known,
        )

    return ValidationOutcome(
        approved=True,
        state=ValidationState.APPROVED,
        estimated_hours=round((end - start).total_seconds() / 3600, 2),
        **known,
    )
