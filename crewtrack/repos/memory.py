"""In-memory repositories for workers, buildings and worker schedules."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from crewtrack.domain.models import (
    Building,
    ScheduleStatus,
    TimelineEntry,
    Worker,
    WorkerSchedule,
)


class WorkerRepository:
    """Dict-backed store for Worker instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Worker] = {}

    def add(self, worker: Worker) -> None:
        self._store[worker.id] = worker

    def get(self, worker_id: str) -> Worker | None:
        return self._store.get(worker_id)

    def list_all(self) -> list[Worker]:
        return list(self._store.values())


class BuildingRepository:
    """Dict-backed store for Building instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Building] = {}

    def add(self, building: Building) -> None:
        self._store[building.id] = building

    def get(self, building_id: str) -> Building | None:
        return self._store.get(building_id)

    def list_all(self) -> list[Building]:
        return list(self._store.values())


class WorkerScheduleRepository:
    """Dict-backed store for WorkerSchedule instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, WorkerSchedule] = {}

    def add(self, schedule: WorkerSchedule) -> None:
        self._store[schedule.id] = schedule

    def replace(self, schedule: WorkerSchedule) -> None:
        self._store[schedule.id] = schedule

    def get(self, schedule_id: str) -> WorkerSchedule | None:
        return self._store.get(schedule_id)

    def delete(self, schedule_id: str) -> None:
        self._store.pop(schedule_id, None)

    def list_all(self) -> list[WorkerSchedule]:
        return list(self._store.values())

    def list(
        self,
        worker_id: str | None = None,
        building_id: str | None = None,
        status: ScheduleStatus | str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[WorkerSchedule]:
        """Return schedules matching every given filter, ordered by date and start.

        The date range is inclusive on both ends.
        """
        matches = [
            s
            for s in self._store.values()
            if (worker_id is None or s.worker_id == worker_id)
            and (building_id is None or s.building_id == building_id)
            and (status is None or s.status == status)
            and (start_date is None or s.date >= start_date)
            and (end_date is None or s.date <= end_date)
        ]
        return sorted(matches, key=lambda s: (s.date, s.start_time))


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_schedule(self, schedule_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.schedule_id == schedule_id],
            key=lambda e: e.timestamp,
        )

    def list_all(self) -> list[TimelineEntry]:
        return list(self._entries)


# ---------------------------------------------------------------------------
# Seed data – a small crew and two buildings with a day of shifts
# ---------------------------------------------------------------------------


def seed(
    worker_repo: WorkerRepository,
    building_repo: BuildingRepository,
    schedule_repo: WorkerScheduleRepository,
) -> None:
    """Load a sample crew, buildings and tomorrow's shifts."""
    alice = Worker(first_name="Alice", last_name="Moreno")
    bob = Worker(first_name="Bob", last_name="Okafor")
    for worker in (alice, bob):
        worker_repo.add(worker)

    tower = Building(name="Harbor Tower", address="12 Quay St")
    annex = Building(name="Elm Street Annex", address="400 Elm St")
    for building in (tower, annex):
        building_repo.add(building)

    tomorrow = date.today() + timedelta(days=1)

    def _at(hour: int, minute: int = 0) -> datetime:
        return datetime(tomorrow.year, tomorrow.month, tomorrow.day, hour, minute)

    shifts = [
        (alice, tower, 8, 12, "Lobby drywall repair"),
        (alice, annex, 13, 16, "Unit 3B paint touch-up"),
        (bob, tower, 9, 17, "Boiler room inspection"),
    ]
    for worker, building, start_hour, end_hour, task in shifts:
        schedule_repo.add(
            WorkerSchedule(
                worker_id=worker.id,
                building_id=building.id,
                date=tomorrow,
                start_time=_at(start_hour),
                end_time=_at(end_hour),
                task=task,
                estimated_hours=float(end_hour - start_hour),
            )
        )
