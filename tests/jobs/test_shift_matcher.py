from __future__ import annotations

from datetime import date, datetime, time, timezone

from src.timecard.timecard.common.datetime_utils import LocalCalendar
from src.timecard.timecard.core.enums import TieBreak
from src.timecard.timecard.jobs.matcher import ShiftMatcher
from src.timecard.timecard.jobs.model import AdditionalConfig, Job, RosterEntry, ScheduleEntry, Shift
from src.timecard.timecard.punches.model import Punch


def utc(month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(2024, month, day, hour, minute, tzinfo=timezone.utc)


def shift(slug: str, start: datetime, end: datetime, **kwargs) -> Shift:
    return Shift(slug=slug, shift_name=slug.title(), shift_start_date=start, shift_end_date=end, **kwargs)


def punch(time_in: datetime, *, slug=None, time_out=None, punch_id="p1") -> Punch:
    return Punch(
        punch_id=punch_id,
        worker_id="w1",
        applicant_id="a1",
        job_id="j1",
        time_in=time_in,
        time_out=time_out,
        shift_slug=slug,
    )


SPRING = shift("spring", utc(3, 1), utc(5, 31))
SUMMER = shift("summer", utc(5, 1), utc(8, 31))
JOB = Job(job_id="j1", title="Festival", shifts=(SPRING, SUMMER))


def test_named_slug_wins_over_window():
    assert ShiftMatcher().match_shift(JOB, punch(utc(3, 10), slug="summer")) is SUMMER


def test_window_match_when_no_slug():
    assert ShiftMatcher().match_shift(JOB, punch(utc(3, 10))) is SPRING


def test_overlapping_shifts_pick_first_listed_by_default():
    assert ShiftMatcher().match_shift(JOB, punch(utc(5, 15))) is SPRING


def test_overlapping_shifts_latest_start_tie_break():
    matcher = ShiftMatcher(tie_break=TieBreak.LATEST_START)
    assert matcher.match_shift(JOB, punch(utc(5, 15))) is SUMMER


def test_unknown_slug_falls_back_to_window():
    assert ShiftMatcher().match_shift(JOB, punch(utc(7, 1), slug="winter")) is SUMMER


def test_no_shift_matches_outside_all_windows():
    assert ShiftMatcher().match_shift(JOB, punch(utc(11, 1))) is None


def test_window_bounds_are_inclusive():
    assert ShiftMatcher().match_shift(JOB, punch(utc(3, 1))) is SPRING
    assert ShiftMatcher().match_shift(JOB, punch(utc(8, 31))) is SUMMER


def test_attribute_maps_each_punch_of_the_job():
    punches = [punch(utc(3, 10), punch_id="a"), punch(utc(11, 1), punch_id="b")]
    assert ShiftMatcher().attribute(JOB, punches) == {"a": SPRING, "b": None}


def test_forgotten_clock_out_after_shift_end_plus_grace():
    short = shift("gig", utc(6, 1, 8), utc(6, 1, 16))
    job = Job(
        job_id="j1",
        title="Gig",
        additional_config=AdditionalConfig(auto_clockout_shift_end=True),
        shifts=(short,),
    )
    open_punch = punch(utc(6, 1, 9))
    matcher = ShiftMatcher(clock_out_grace_minutes=30)

    assert not matcher.has_forgotten_to_clock_out(job, open_punch, utc(6, 1, 16, 20))
    assert matcher.has_forgotten_to_clock_out(job, open_punch, utc(6, 1, 16, 31))


def test_forgotten_clock_out_needs_feature_and_open_punch():
    short = shift("gig", utc(6, 1, 8), utc(6, 1, 16))
    plain = Job(job_id="j1", title="Gig", shifts=(short,))
    tracked = Job(
        job_id="j1",
        title="Gig",
        additional_config=AdditionalConfig(auto_clockout_shift_end=True),
        shifts=(short,),
    )
    later = utc(6, 3)

    assert not ShiftMatcher().has_forgotten_to_clock_out(plain, punch(utc(6, 1, 9)), later)
    closed = punch(utc(6, 1, 9), time_out=utc(6, 1, 15))
    assert not ShiftMatcher().has_forgotten_to_clock_out(tracked, closed, later)


def test_scheduled_window_in_local_time():
    night = shift(
        "night",
        utc(1, 1),
        utc(12, 31),
        default_schedule={"monday": ScheduleEntry(start=time(9, 0), end=time(17, 0))},
    )
    calendar = LocalCalendar("America/Chicago")

    start, end = ShiftMatcher().scheduled_window(night, date(2024, 3, 4), calendar)

    assert start == utc(3, 4, 15)
    assert end == utc(3, 4, 23)


def test_overnight_schedule_ends_next_day():
    night = shift(
        "night",
        utc(1, 1),
        utc(12, 31),
        default_schedule={"friday": ScheduleEntry(start=time(22, 0), end=time(6, 0))},
    )
    calendar = LocalCalendar("UTC")

    start, end = ShiftMatcher().scheduled_window(night, date(2024, 3, 8), calendar)

    assert start == utc(3, 8, 22)
    assert end == utc(3, 9, 6)


def test_no_window_on_unscheduled_weekday():
    calendar = LocalCalendar("UTC")
    assert ShiftMatcher().scheduled_window(SPRING, date(2024, 3, 8), calendar) is None


def test_scheduled_windows_filter_by_slug():
    schedule = {"monday": ScheduleEntry(start=time(9, 0), end=time(12, 0))}
    a = shift("a", utc(1, 1), utc(12, 31), default_schedule=schedule)
    b = shift("b", utc(1, 1), utc(12, 31), default_schedule=schedule)
    job = Job(job_id="j1", title="Two", timezone="UTC", shifts=(a, b))
    calendar = LocalCalendar("UTC")

    assert [w[0] for w in ShiftMatcher().scheduled_windows_on(job, date(2024, 3, 4), calendar)] == [a, b]
    assert [w[0] for w in ShiftMatcher().scheduled_windows_on(job, date(2024, 3, 4), calendar, slug="b")] == [b]


def test_roster_membership_by_shift_and_by_day():
    monday = ScheduleEntry(
        start=time(9, 0),
        end=time(17, 0),
        roster=(RosterEntry(employee_id="a2", on_date=date(2024, 3, 4)),),
    )
    staffed = shift("staffed", utc(1, 1), utc(12, 31), default_schedule={"monday": monday}, shift_roster=("a1",))
    matcher = ShiftMatcher()

    assert matcher.is_in_roster(staffed, "a1")
    assert matcher.is_in_roster(staffed, "a2", date(2024, 3, 4))
    assert not matcher.is_in_roster(staffed, "a2", date(2024, 3, 11))
    assert not matcher.is_in_roster(staffed, "a3", date(2024, 3, 4))


def test_forgotten_clock_out_uses_that_days_scheduled_end():
    weekdays = {
        day: ScheduleEntry(start=time(8, 0), end=time(16, 0))
        for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
    }
    season = shift("season", utc(3, 1), utc(12, 31), default_schedule=weekdays)
    job = Job(
        job_id="j1",
        title="Season",
        timezone="UTC",
        additional_config=AdditionalConfig(auto_clockout_shift_end=True),
        shifts=(season,),
    )
    open_punch = punch(utc(3, 11, 8))
    matcher = ShiftMatcher(clock_out_grace_minutes=30)

    assert not matcher.has_forgotten_to_clock_out(job, open_punch, utc(3, 11, 16, 20))
    assert matcher.has_forgotten_to_clock_out(job, open_punch, utc(3, 12, 9))


def test_off_roster_only_when_the_shift_keeps_a_roster():
    monday = ScheduleEntry(
        start=time(9, 0),
        end=time(17, 0),
        roster=(RosterEntry(employee_id="a2", on_date=date(2024, 3, 4)),),
    )
    staffed = shift("staffed", utc(1, 1), utc(12, 31), default_schedule={"monday": monday})
    open_shift = shift("open", utc(1, 1), utc(12, 31))
    job = Job(job_id="j1", title="Crew", timezone="UTC", shifts=(staffed, open_shift))
    matcher = ShiftMatcher()
    monday_punch = punch(utc(3, 4, 9))

    assert matcher.is_off_roster(job, monday_punch, staffed)
    assert not matcher.is_off_roster(job, monday_punch, open_shift)
    assert not matcher.is_off_roster(job, punch(utc(3, 5, 9)), staffed)
    on_roster = Punch(punch_id="p2", worker_id="w2", applicant_id="a2", job_id="j1", time_in=utc(3, 4, 9))
    assert not matcher.is_off_roster(job, on_roster, staffed)
