"""Smoke tests for lenient date/time coercion."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from crewtrack.services.timeparse import to_clock, to_date, to_datetime


def test_native_values_pass_through():
    assert to_datetime(datetime(2024, 3, 1, 9, 30)) == datetime(2024, 3, 1, 9, 30)
    assert to_datetime(date(2024, 3, 1)) == datetime(2024, 3, 1)
    assert to_datetime(time(9, 30)).time() == time(9, 30)


def test_aware_values_keep_wall_clock():
    aware = datetime(2024, 3, 1, 9, 30, tzinfo=timezone(timedelta(hours=-5)))
    parsed = to_datetime(aware)
    assert parsed.tzinfo is None
    assert (parsed.hour, parsed.minute) == (9, 30)


def test_iso_strings():
    assert to_datetime("2024-03-01T09:30:00") == datetime(2024, 3, 1, 9, 30)
    assert to_date("2024-03-01") == date(2024, 3, 1)


def test_clock_strings():
    parsed = to_datetime("14:45")
    assert (parsed.hour, parsed.minute) == (14, 45)


@pytest.mark.parametrize("value", [None, "", "   ", "garbage", 17, object()])
def test_unparseable_values(value):
    assert to_datetime(value) is None


def test_relative_dates_resolve_against_now():
    before = date.today()
    parsed = to_date("tomorrow")
    after = date.today()
    assert before + timedelta(days=1) <= parsed <= after + timedelta(days=1)


def test_relative_dates_follow_explicit_now():
    now = datetime(2024, 3, 1, 12, 0)
    assert to_date("tomorrow", now=now) == date(2024, 3, 2)


@pytest.mark.parametrize("value", ["14:45", "2:45 pm", "2pm", "2024-03-01T14:45:00", time(14, 45)])
def test_clock_values(value):
    parsed = to_clock(value)
    assert parsed is not None
    assert parsed.hour == 14


@pytest.mark.parametrize("value", ["9", "17", "monday", "tomorrow", date(2024, 3, 1), None])
def test_values_without_clock_reading(value):
    assert to_clock(value) is None
