"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import logging

from crewtrack.domain.bus import EventBus
from crewtrack.domain.events import (
    ScheduleCreated,
    ScheduleDeleted,
    ScheduleRejected,
    ScheduleUpdated,
)
from crewtrack.domain.models import TimelineEntry, TimelineEntryType
from crewtrack.repos.memory import TimelineRepository, WorkerScheduleRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        schedule_repo: WorkerScheduleRepository,
        timeline_repo: TimelineRepository,
    ) -> None:
        self.bus = bus
        self.schedule_repo = schedule_repo
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(ScheduleCreated, self.on_schedule_created)
        self.bus.subscribe(ScheduleUpdated, self.on_schedule_updated)
        self.bus.subscribe(ScheduleDeleted, self.on_schedule_deleted)
        self.bus.subscribe(ScheduleRejected, self.on_schedule_rejected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_schedule_created(self, event: ScheduleCreated) -> None:
        stored = self.schedule_repo.get(event.schedule_id)
        if stored is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                schedule_id=event.schedule_id,
                type=TimelineEntryType.CREATED,
                payload={
                    "worker_id": event.worker_id,
                    "created_by": event.created_by,
                    "time_range": stored.time_range,
                },
            )
        )
        logger.info(
            "Schedule %s created for worker %s on %s (%s)",
            stored.id,
            stored.worker_id,
            stored.date,
            stored.time_range,
        )

    def on_schedule_updated(self, event: ScheduleUpdated) -> None:
        stored = self.schedule_repo.get(event.schedule_id)
        if stored is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                schedule_id=event.schedule_id,
                type=TimelineEntryType.UPDATED,
                payload={
                    "changed_fields": event.changed_fields,
                    "updated_by": event.updated_by,
                },
            )
        )
        logger.info("Schedule %s updated: %s", stored.id, ", ".join(event.changed_fields))

    def on_schedule_deleted(self, event: ScheduleDeleted) -> None:
        # The schedule is already gone from the repo; the timeline keeps the trace.
        self.timeline_repo.add(
            TimelineEntry(
                schedule_id=event.schedule_id,
                type=TimelineEntryType.DELETED,
                payload={"worker_id": event.worker_id},
            )
        )
        logger.info("Schedule %s deleted", event.schedule_id)

    def on_schedule_rejected(self, event: ScheduleRejected) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                schedule_id=event.schedule_id,
                type=TimelineEntryType.REJECTED,
                payload={
                    "kind": event.kind,
                    "reason": event.reason,
                    "conflicting_ids": event.conflicting_ids,
                },
            )
        )
