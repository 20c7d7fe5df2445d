"""Service for creating, changing and listing worker schedules.

Every write runs ``validate_schedule`` against the worker's stored roster
inside one lock, right before the commit, so two submissions cannot both pass
against the same stale snapshot.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from datetime import date, datetime, timedelta, timezone
from typing import Any, NoReturn

from pydantic import ValidationError

from crewtrack.config import settings
from crewtrack.domain.bus import EventBus
from crewtrack.domain.events import (
    ScheduleCreated,
    ScheduleDeleted,
    ScheduleRejected,
    ScheduleUpdated,
)
from crewtrack.domain.models import (
    ScheduleCandidate,
    SchedulePatch,
    ScheduleStatus,
    ValidationOutcome,
    WorkerSchedule,
)
from crewtrack.errors import (
    BuildingNotFoundError,
    ScheduleNotFoundError,
    ScheduleRejectedError,
    WorkerNotFoundError,
)
from crewtrack.repos.memory import (
    BuildingRepository,
    WorkerRepository,
    WorkerScheduleRepository,
)
from crewtrack.services.conflicts import (
    invalid_input_outcome,
    resolve_identifier,
    validate_schedule,
)
from crewtrack.services.timeparse import to_date

logger = logging.getLogger(__name__)


def _parse_filter_date(value: date | str | None, name: str) -> date | None:
    if value is None:
        return None
    parsed = to_date(value)
    if parsed is None:
        raise ValueError(f"Invalid {name}: {value!r}")
    return parsed


class ScheduleService:
    """Persistence-side entry point for worker schedules."""

    def __init__(
        self,
        bus: EventBus,
        schedule_repo: WorkerScheduleRepository,
        worker_repo: WorkerRepository,
        building_repo: BuildingRepository,
        min_duration: timedelta | None = None,
    ) -> None:
        self.bus = bus
        self.schedule_repo = schedule_repo
        self.worker_repo = worker_repo
        self.building_repo = building_repo
        self.min_duration = min_duration or timedelta(minutes=settings.MIN_SHIFT_MINUTES)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, schedule_id: str) -> WorkerSchedule:
        schedule = self.schedule_repo.get(schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(
                "No schedule found with that ID", source="ScheduleService.get"
            )
        return schedule

    def list(
        self,
        worker_id: str | None = None,
        building_id: str | None = None,
        status: ScheduleStatus | str | None = None,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
    ) -> list[WorkerSchedule]:
        """Return schedules matching the filters, ordered by date then start time."""
        return self.schedule_repo.list(
            worker_id=worker_id,
            building_id=building_id,
            status=ScheduleStatus(status) if status is not None else None,
            start_date=_parse_filter_date(start_date, "start_date"),
            end_date=_parse_filter_date(end_date, "end_date"),
        )

    def list_for_worker(self, worker_id: str, **filters: Any) -> list[WorkerSchedule]:
        self._require_worker(worker_id)
        return self.list(worker_id=worker_id, **filters)

    def list_for_building(self, building_id: str, **filters: Any) -> list[WorkerSchedule]:
        self._require_building(building_id)
        return self.list(building_id=building_id, **filters)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(
        self,
        payload: ScheduleCandidate | Mapping[str, Any],
        created_by: str | None = None,
    ) -> WorkerSchedule:
        """Validate and store a new schedule.

        Raises ``WorkerNotFoundError`` / ``BuildingNotFoundError`` for unknown
        references and ``ScheduleRejectedError`` when validation fails.
        """
        if isinstance(payload, ScheduleCandidate):
            candidate = payload
        else:
            try:
                candidate = ScheduleCandidate.model_validate(payload)
            except ValidationError as exc:
                self._reject(invalid_input_outcome(exc))

        worker_id = resolve_identifier(candidate.worker_id)
        building_id = resolve_identifier(candidate.building_id)
        if worker_id is not None:
            self._require_worker(worker_id)
        if building_id is not None:
            self._require_building(building_id)

        with self._lock:
            roster = self.schedule_repo.list(worker_id=worker_id) if worker_id else []
            outcome = validate_schedule(candidate, roster, min_duration=self.min_duration)
            if not outcome.approved:
                self._reject(outcome)

            schedule = WorkerSchedule(
                worker_id=outcome.worker_id,
                building_id=outcome.building_id,
                date=outcome.start.date(),
                start_time=outcome.start,
                end_time=outcome.end,
                task=candidate.task.strip(),
                notes=(candidate.notes or "").strip(),
                status=candidate.status,
                estimated_hours=outcome.estimated_hours,
                created_by=created_by,
            )
            self.schedule_repo.add(schedule)

        self.bus.publish(
            ScheduleCreated(
                schedule_id=schedule.id,
                worker_id=schedule.worker_id,
                created_by=created_by,
            )
        )
        return schedule

    def update(
        self,
        schedule_id: str,
        patch: SchedulePatch | Mapping[str, Any],
        updated_by: str | None = None,
    ) -> WorkerSchedule:
        """Merge *patch* over the stored schedule and re-validate.

        The schedule being edited is excluded from its own overlap check.
        """
        existing = self.get(schedule_id)
        if not isinstance(patch, SchedulePatch):
            try:
                patch = SchedulePatch.model_validate(patch)
            except ValidationError as exc:
                self._reject(invalid_input_outcome(exc), schedule_id=schedule_id)
        changes = patch.model_dump(exclude_none=True)

        if "worker_id" in changes:
            new_worker = resolve_identifier(changes["worker_id"])
            if new_worker is not None and new_worker != existing.worker_id:
                self._require_worker(new_worker)
        if "building_id" in changes:
            new_building = resolve_identifier(changes["building_id"])
            if new_building is not None and new_building != existing.building_id:
                self._require_building(new_building)

        with self._lock:
            # Merge over the record as it is now; it may have changed or gone
            # since the read above.
            current = self.schedule_repo.get(schedule_id)
            if current is None:
                raise ScheduleNotFoundError(
                    "No schedule found with that ID", source="ScheduleService.update"
                )
            candidate = ScheduleCandidate(
                worker_id=changes.get("worker_id", current.worker_id),
                building_id=changes.get("building_id", current.building_id),
                date=changes.get("date", current.date),
                start_time=changes.get("start_time", current.start_time),
                end_time=changes.get("end_time", current.end_time),
                task=changes.get("task", current.task),
                notes=changes.get("notes", current.notes),
                status=changes.get("status", current.status),
            )

            worker_id = resolve_identifier(candidate.worker_id)
            roster = self.schedule_repo.list(worker_id=worker_id) if worker_id else []
            outcome = validate_schedule(
                candidate, roster, exclude_id=schedule_id, min_duration=self.min_duration
            )
            if not outcome.approved:
                self._reject(outcome, schedule_id=schedule_id)

            updated = current.model_copy(
                update={
                    "worker_id": outcome.worker_id,
                    "building_id": outcome.building_id,
                    "date": outcome.start.date(),
                    "start_time": outcome.start,
                    "end_time": outcome.end,
                    "task": candidate.task.strip(),
                    "notes": (candidate.notes or "").strip(),
                    "status": candidate.status,
                    "estimated_hours": outcome.estimated_hours,
                    "updated_by": updated_by,
                    "updated_at": datetime.now(timezone.utc),
                }
            )
            self.schedule_repo.replace(updated)

        self.bus.publish(
            ScheduleUpdated(
                schedule_id=schedule_id,
                changed_fields=sorted(changes),
                updated_by=updated_by,
            )
        )
        return updated

    def delete(self, schedule_id: str) -> None:
        with self._lock:
            schedule = self.get(schedule_id)
            self.schedule_repo.delete(schedule_id)
        self.bus.publish(
            ScheduleDeleted(schedule_id=schedule_id, worker_id=schedule.worker_id)
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_worker(self, worker_id: str) -> None:
        if self.worker_repo.get(worker_id) is None:
            raise WorkerNotFoundError("Worker not found", source="ScheduleService")

    def _require_building(self, building_id: str) -> None:
        if self.building_repo.get(building_id) is None:
            raise BuildingNotFoundError("Building not found", source="ScheduleService")

    def _reject(self, outcome: ValidationOutcome, schedule_id: str | None = None) -> NoReturn:
        self.bus.publish(
            ScheduleRejected(
                schedule_id=schedule_id,
                kind=outcome.kind,
                reason=outcome.reason,
                conflicting_ids=outcome.conflicting_ids,
            )
        )
        raise ScheduleRejectedError(outcome, source="ScheduleService")
