from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import pytest

from src.timecard.timecard.common.datetime_utils import (
    DateWindow,
    LocalCalendar,
    parse_clock_time,
    parse_iso_date,
    parse_iso_utc,
    round_hours,
    to_iso_utc,
    week_start_for,
    weekday_index,
    weekday_name,
)
from src.timecard.timecard.core.exceptions import ValidationError


def test_parse_iso_utc_accepts_z_and_offsets():
    assert parse_iso_utc("2024-03-04T15:00:00Z") == datetime(2024, 3, 4, 15, tzinfo=timezone.utc)
    assert parse_iso_utc("2024-03-04T09:00:00-06:00") == datetime(2024, 3, 4, 15, tzinfo=timezone.utc)
    assert parse_iso_utc(None) is None
    assert parse_iso_utc("") is None


@pytest.mark.parametrize("raw", ["yesterday", "2024-13-01T00:00:00Z", 12345])
def test_parse_iso_utc_rejects_garbage(raw):
    with pytest.raises(ValidationError):
        parse_iso_utc(raw)


def test_to_iso_utc_uses_z_suffix():
    assert to_iso_utc(datetime(2024, 3, 4, 15, tzinfo=timezone.utc)) == "2024-03-04T15:00:00Z"
    assert to_iso_utc(None) is None


def test_parse_iso_date_and_clock_time():
    assert parse_iso_date("2024-02-29") == date(2024, 2, 29)
    assert parse_clock_time("08:30") == time(8, 30)
    assert parse_clock_time("23:05:10") == time(23, 5, 10)
    with pytest.raises(ValidationError):
        parse_iso_date("02/29/2024")
    with pytest.raises(ValidationError):
        parse_clock_time("noon")


def test_weekdays_count_from_sunday():
    sunday = date(2024, 3, 3)
    assert weekday_index(sunday) == 0
    assert weekday_name(sunday) == "sunday"
    assert weekday_name(date(2024, 3, 9)) == "saturday"


def test_week_start_for_respects_start_day():
    wednesday = date(2024, 3, 6)
    assert week_start_for(wednesday, 0) == date(2024, 3, 3)
    assert week_start_for(wednesday, 1) == date(2024, 3, 4)
    assert week_start_for(wednesday, 3) == wednesday
    assert week_start_for(wednesday, 4) == date(2024, 2, 29)


def test_round_hours():
    assert round_hours(timedelta(minutes=90)) == 1.5
    assert round_hours(timedelta(minutes=10)) == 0.17


def test_date_window_days_and_length():
    window = DateWindow(date(2024, 2, 27), date(2024, 3, 1))
    assert list(window.days()) == [date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
    assert len(window) == 4
    assert window.contains(date(2024, 2, 29))
    assert not window.contains(date(2024, 3, 2))


def test_date_window_rejects_reversed_range():
    with pytest.raises(ValidationError):
        DateWindow(date(2024, 3, 2), date(2024, 3, 1))



def test_local_calendar_conversions():
    cal = LocalCalendar("America/Chicago")
    late = datetime(2024, 3, 10, 5, 30, tzinfo=timezone.utc)
    assert cal.local_date(late) == date(2024, 3, 9)
    assert cal.at_local_time(date(2024, 3, 4), time(9, 0)) == datetime(2024, 3, 4, 15, tzinfo=timezone.utc)
    # After the spring-forward change the offset is five hours.
    assert cal.at_local_time(date(2024, 3, 11), time(9, 0)) == datetime(2024, 3, 11, 14, tzinfo=timezone.utc)


def test_window_bounds_are_half_open_local_midnights():
    cal = LocalCalendar("America/Chicago")
    start, end = cal.window_bounds_utc(DateWindow(date(2024, 3, 4), date(2024, 3, 5)))
    assert start == datetime(2024, 3, 4, 6, tzinfo=timezone.utc)
    assert end == datetime(2024, 3, 6, 6, tzinfo=timezone.utc)


def test_unknown_timezone_is_rejected():
    with pytest.raises(ValidationError):
        LocalCalendar("Mars/Olympus_Mons")
