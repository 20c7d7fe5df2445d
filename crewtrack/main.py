"""Application wiring: entry point for the worker scheduling service."""

from __future__ import annotations

import logging

from crewtrack.config import configure_logging
from crewtrack.domain.bus import EventBus
from crewtrack.domain.handlers import HandlerRegistry
from crewtrack.repos.memory import (
    BuildingRepository,
    TimelineRepository,
    WorkerRepository,
    WorkerScheduleRepository,
    seed,
)
from crewtrack.services.scheduling import ScheduleService

configure_logging()
logger = logging.getLogger(__name__)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
worker_repo = WorkerRepository()
building_repo = BuildingRepository()
schedule_repo = WorkerScheduleRepository()
timeline_repo = TimelineRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    schedule_repo=schedule_repo,
    timeline_repo=timeline_repo,
)

schedule_service = ScheduleService(
    bus=event_bus,
    schedule_repo=schedule_repo,
    worker_repo=worker_repo,
    building_repo=building_repo,
)


def load_sample_data() -> None:
    """Populate the singleton repositories with a sample crew and shifts."""
    seed(worker_repo, building_repo, schedule_repo)
    logger.info(
        "Loaded %d workers, %d buildings, %d schedules",
        len(worker_repo.list_all()),
        len(building_repo.list_all()),
        len(schedule_repo.list_all()),
    )
