from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

import pytest

from src.timecard.timecard.core.exceptions import InvalidState
from src.timecard.timecard.jobs.model import AdditionalConfig, Job, ScheduleEntry, Shift
from src.timecard.timecard.punches.factory import ClockInStrategyFactory
from src.timecard.timecard.punches.model import Punch
from src.timecard.timecard.punches.service import PunchLifecycleService
from src.timecard.timecard.punches.strategies.actual_time_strategy import ActualTimeStrategy
from src.timecard.timecard.punches.strategies.snap_to_shift_start_strategy import SnapToShiftStartStrategy

# Monday 2024-03-04; Chicago is UTC-6 that week, so 09:00 local is 15:00Z.
SHIFT_START = datetime(2024, 3, 4, 15, 0, tzinfo=timezone.utc)


def utc(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 3, day, hour, minute, tzinfo=timezone.utc)


def make_job(**config) -> Job:
    weekdays = ("monday", "tuesday", "wednesday", "thursday", "friday")
    return Job(
        job_id="j1",
        title="Front desk",
        timezone="America/Chicago",
        additional_config=AdditionalConfig(**config),
        shifts=(
            Shift(
                slug="day",
                shift_name="Day",
                shift_start_date=utc(1, 0),
                shift_end_date=utc(31, 0),
                default_schedule={d: ScheduleEntry(start=time(9, 0), end=time(17, 0)) for d in weekdays},
            ),
        ),
    )


def closed(punch_id: str, start: datetime, end: datetime, job_id: str = "j2") -> Punch:
    return Punch(punch_id=punch_id, worker_id="w1", applicant_id="a1", job_id=job_id, time_in=start, time_out=end)


def clock_in(svc, now):
    return svc.clock_in(worker_id="w1", applicant_id="a1", job_id="j1", now=now)


def test_factory_snaps_inside_early_window():
    config = AdditionalConfig(auto_adjust_early_clock_in=True, early_clock_in_minutes=15)
    factory = ClockInStrategyFactory()

    strategy = factory.for_clock_in(now=SHIFT_START - timedelta(minutes=10), scheduled_start=SHIFT_START, config=config)

    assert isinstance(strategy, SnapToShiftStartStrategy)


@pytest.mark.parametrize("offset_minutes", [-20, 0, 5])
def test_factory_keeps_actual_time_outside_early_window(offset_minutes):
    config = AdditionalConfig(auto_adjust_early_clock_in=True, early_clock_in_minutes=15)
    now = SHIFT_START + timedelta(minutes=offset_minutes)

    strategy = ClockInStrategyFactory().for_clock_in(now=now, scheduled_start=SHIFT_START, config=config)

    assert isinstance(strategy, ActualTimeStrategy)


def test_factory_without_auto_adjust_uses_actual_time():
    config = AdditionalConfig(early_clock_in_minutes=15)
    strategy = ClockInStrategyFactory().for_clock_in(
        now=SHIFT_START - timedelta(minutes=5), scheduled_start=SHIFT_START, config=config
    )
    assert isinstance(strategy, ActualTimeStrategy)


def test_early_clock_in_snaps_to_scheduled_start(punches, jobs):
    jobs.add(make_job(auto_adjust_early_clock_in=True, early_clock_in_minutes=15))
    svc = PunchLifecycleService(punches, jobs)

    punch = clock_in(svc, SHIFT_START - timedelta(minutes=10))

    assert punch.time_in == SHIFT_START


def test_clock_in_too_early_keeps_actual_time(punches, jobs):
    jobs.add(make_job(auto_adjust_early_clock_in=True, early_clock_in_minutes=15))
    svc = PunchLifecycleService(punches, jobs)

    now = SHIFT_START - timedelta(minutes=40)
    assert clock_in(svc, now).time_in == now


def test_breaks_disallowed_blocks_second_punch_in_shift(punches, jobs):
    jobs.add(make_job(allow_breaks=False))
    punches.add(closed("morning", utc(4, 15), utc(4, 17), job_id="j1"))
    svc = PunchLifecycleService(punches, jobs)

    with pytest.raises(InvalidState):
        clock_in(svc, utc(4, 18))


def test_breaks_disallowed_allows_first_punch(punches, jobs):
    jobs.add(make_job(allow_breaks=False))
    svc = PunchLifecycleService(punches, jobs)

    assert clock_in(svc, utc(4, 15)).time_in == utc(4, 15)


def test_overtime_disallowed_blocks_clock_in_past_weekly_threshold(punches, jobs):
    jobs.add(make_job(allow_overtime=False))
    for i, day in enumerate((4, 5, 6)):
        punches.add(closed(f"d{i}", utc(day, 12), utc(day, 23)))
    punches.add(closed("thu", utc(7, 12), utc(7, 21)))
    svc = PunchLifecycleService(punches, jobs)

    with pytest.raises(InvalidState):
        clock_in(svc, utc(8, 15))


def test_overtime_threshold_is_configurable(punches, jobs):
    jobs.add(make_job(allow_overtime=False))
    for i, day in enumerate((4, 5, 6)):
        punches.add(closed(f"d{i}", utc(day, 12), utc(day, 23)))
    punches.add(closed("thu", utc(7, 12), utc(7, 21)))
    svc = PunchLifecycleService(punches, jobs, overtime_threshold_hours=50)

    assert clock_in(svc, utc(8, 15)).punch_id


def test_previous_week_hours_do_not_count(punches, jobs):
    jobs.add(make_job(allow_overtime=False))
    punches.add(closed("last-week", utc(1, 0), utc(3, 0)))
    svc = PunchLifecycleService(punches, jobs)

    assert clock_in(svc, utc(4, 15)).punch_id
