"""Domain models for worker scheduling."""

from __future__ import annotations

import datetime as dt
import uuid
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ScheduleStatus(StrEnum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RejectionKind(StrEnum):
    INVALID_INPUT = "invalid_input"
    INVALID_TIME = "invalid_time"
    MINIMUM_DURATION = "minimum_duration"
    CONFLICT = "conflict"


class ValidationState(StrEnum):
    PARSING = "parsing"
    DURATION_CHECK = "duration_check"
    OVERLAP_CHECK = "overlap_check"
    APPROVED = "approved"


class TimelineEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    REJECTED = "rejected"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class _CamelModel(BaseModel):
    """Accepts both the client's camelCase keys and snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Reference entities
# ---------------------------------------------------------------------------


class Worker(_CamelModel):
    id: str = Field(default_factory=_new_id)
    first_name: str
    last_name: str
    role: str = "worker"

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Building(_CamelModel):
    id: str = Field(default_factory=_new_id)
    name: str
    address: str | None = None


# ---------------------------------------------------------------------------
# Worker schedules
# ---------------------------------------------------------------------------


class WorkerSchedule(_CamelModel):
    id: str = Field(default_factory=_new_id)
    worker_id: str
    building_id: str
    date: dt.date
    start_time: dt.datetime
    end_time: dt.datetime
    task: str
    notes: str = ""
    status: ScheduleStatus = ScheduleStatus.PLANNED
    estimated_hours: float = Field(default=0.0, ge=0)
    created_by: str | None = None
    updated_by: str | None = None
    created_at: dt.datetime = Field(default_factory=_utcnow)
    updated_at: dt.datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _end_after_start(self) -> WorkerSchedule:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def time_range(self) -> str:
        """Clock range for display, e.g. ``"09:00 - 11:00"``."""
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"


class ScheduleCandidate(_CamelModel):
    """An unvalidated submission.

    References may be bare ids or embedded objects, and date/time fields may
    be strings or native values; ``validate_schedule`` normalizes all of them.
    """

    worker_id: Any = None
    building_id: Any = None
    date: Any = None
    start_time: Any = None
    end_time: Any = None
    task: str | None = None
    notes: str | None = None
    status: ScheduleStatus = ScheduleStatus.PLANNED


class SchedulePatch(_CamelModel):
    """Partial update; unset fields keep their stored values."""

    worker_id: Any = None
    building_id: Any = None
    date: Any = None
    start_time: Any = None
    end_time: Any = None
    task: str | None = None
    notes: str | None = None
    status: ScheduleStatus | None = None


class ValidationOutcome(BaseModel):
    """Result of one validation run.

    ``state`` is where the run stopped: ``approved`` on success, otherwise the
    check that rejected the candidate.
    """

    approved: bool
    state: ValidationState
    kind: RejectionKind | None = None
    reason: str | None = None
    field: str | None = None
    conflicting_ids: list[str] = Field(default_factory=list)
    worker_id: str | None = None
    building_id: str | None = None
    start: dt.datetime | None = None
    end: dt.datetime | None = None
    estimated_hours: float | None = None


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    schedule_id: str | None = None
    timestamp: dt.datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)
