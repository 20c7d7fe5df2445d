"""Helpers for the weekly roster view: week days and per-day schedule lookup."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from dateutil.relativedelta import SU, relativedelta, weekday
from dateutil.rrule import DAILY, rrule

from crewtrack.services.conflicts import get_schedule_start, resolve_identifier, worker_ids_of
from crewtrack.services.timeparse import to_date


def week_days(anchor: date | datetime | str, week_start: weekday = SU) -> list[date]:
    """Return the seven days of the week containing *anchor*.

    Weeks start on Sunday unless *week_start* says otherwise.
    """
    day = to_date(anchor)
    if day is None:
        raise ValueError(f"Invalid anchor date: {anchor!r}")
    first = day + relativedelta(weekday=week_start(-1))
    return [
        dt.date()
        for dt in rrule(DAILY, dtstart=datetime.combine(first, time()), count=7)
    ]


def schedules_for_day(
    schedules: list[Any], day: date | datetime | str, worker_id: Any = None
) -> list[Any]:
    """Return the schedules starting on *day*, optionally for one worker only.

    Entries whose start does not parse are left out.
    """
    target = to_date(day)
    if target is None:
        raise ValueError(f"Invalid day: {day!r}")
    wanted = resolve_identifier(worker_id)

    matches = []
    for schedule in schedules:
        start = get_schedule_start(schedule)
        if start is None or start.date() != target:
            continue
        if wanted is not None and wanted not in worker_ids_of(schedule):
            continue
        matches.append(schedule)
    return matches
