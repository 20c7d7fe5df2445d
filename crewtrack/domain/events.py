"""Domain events emitted during the worker schedule lifecycle."""

from __future__ import annotations

from pydantic import BaseModel

from crewtrack.domain.models import RejectionKind


class ScheduleEvent(BaseModel):
    """Base for every worker schedule event; subscribe to it to see them all."""


class ScheduleCreated(ScheduleEvent):
    """Fired after a new WorkerSchedule is persisted."""

    schedule_id: str
    worker_id: str
    created_by: str | None = None


class ScheduleUpdated(ScheduleEvent):
    """Fired after an existing WorkerSchedule is changed."""

    schedule_id: str
    changed_fields: list[str]
    updated_by: str | None = None


class ScheduleDeleted(ScheduleEvent):
    """Fired after a WorkerSchedule is removed."""

    schedule_id: str
    worker_id: str


class ScheduleRejected(ScheduleEvent):
    """Fired when a create or update fails validation.

    ``schedule_id`` is set only for rejected updates.
    """

    schedule_id: str | None = None
    kind: RejectionKind
    reason: str
    conflicting_ids: list[str] = []
