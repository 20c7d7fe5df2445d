"""Exceptions raised by the scheduling service layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from crewtrack.domain.models import ValidationOutcome


class CrewtrackError(Exception):
    """Base class for all crewtrack exceptions."""

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.source = source or "unknown"

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] {self.message} (source={self.source})"


class NotFoundError(CrewtrackError):
    """A referenced record does not exist."""


class WorkerNotFoundError(NotFoundError):
    """Worker not found"""


class BuildingNotFoundError(NotFoundError):
    """Building not found"""


class ScheduleNotFoundError(NotFoundError):
    """No schedule found with that ID"""


class ScheduleRejectedError(CrewtrackError):
    """A submission failed validation; ``outcome`` holds the reason."""

    def __init__(self, outcome: ValidationOutcome, source: str | None = None) -> None:
        super().__init__(outcome.reason or "Schedule rejected", source=source)
        self.outcome = outcome
