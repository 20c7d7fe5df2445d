"""Lenient parsing of the date and time-of-day values a scheduler submits."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time

import dateparser

logger = logging.getLogger(__name__)

# Anchor day for bare ``time`` values; callers only read hour and minute.
_ANCHOR_DAY = date(2000, 1, 1)

# A time-of-day string must name a clock reading: "9:30", "14:00", "9 am", "9pm".
_CLOCK_PATTERN = re.compile(r"\d\s*(?::\s*\d|[ap]\.?\s*m\b)", re.IGNORECASE)


def _parse_string(raw: str, now: datetime | None = None) -> datetime | None:
    settings = {
        "RETURN_AS_TIMEZONE_AWARE": False,
        "RELATIVE_BASE": now or datetime.now(),
        "PREFER_DAY_OF_MONTH": "first",
    }
    parsed = dateparser.parse(raw, languages=["en"], settings=settings)
    if parsed is None:
        logger.debug("Unparseable date/time value: %r", raw)
    return parsed


def to_datetime(value: object, now: datetime | None = None) -> datetime | None:
    """Coerce *value* into a naive ``datetime``, or ``None`` if it won't parse.

    Native ``datetime``/``date``/``time`` objects are used directly; strings go
    through ``dateparser``, with relative phrases ("tomorrow") resolved against
    *now* (defaults to the current local time). Aware values keep their
    wall-clock fields and drop the offset.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, time):
        parsed = datetime.combine(_ANCHOR_DAY, value)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        parsed = _parse_string(raw, now)
        if parsed is None:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None)
    return parsed


def to_date(value: object, now: datetime | None = None) -> date | None:
    parsed = to_datetime(value, now)
    return parsed.date() if parsed is not None else None


def to_clock(value: object) -> datetime | None:
    """Like ``to_datetime`` but only for values that carry a time of day.

    A bare ``date`` or a string without a clock reading (``"9"``, ``"monday"``)
    gives ``None`` instead of a midnight that would pass for a real time.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return None
    if isinstance(value, str) and not _CLOCK_PATTERN.search(value):
        logger.debug("No clock reading in time value: %r", value)
        return None
    return to_datetime(value)
