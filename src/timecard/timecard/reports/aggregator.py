"""Per-day, per-week and per-month time totals for one worker.

Durations stay exact ``timedelta`` values until ``to_dict`` renders hours, so
week, month and report totals always equal the sum of their days.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..common.datetime_utils import DateWindow, LocalCalendar, ensure_utc, now_utc, week_start_for, weekday_name
from ..core.enums import DetailKind, PunchStatus, Weekday
from ..hours.calculator.base import HoursCalculator
from ..hours.calculator.standard_calculator import StandardHoursCalculator
from ..leave.model import LeaveRequest
from ..punches.intervals import pairwise_conflicts
from ..punches.model import Punch
from .model import Anomalies, DayBucket, DayDetail, MonthBucket, TimesheetReport, WeekBucket

logger = logging.getLogger(__name__)


class TimeAggregator:
    def __init__(
        self,
        *,
        calculator: HoursCalculator | None = None,
        week_start_day: int = Weekday.SUNDAY,
    ):
        self._calculator = calculator or StandardHoursCalculator()
        self._week_start_day = int(week_start_day)

    def aggregate(
        self,
        punches: Iterable[Punch],
        leave_requests: Iterable[LeaveRequest],
        window: DateWindow,
        timezone: str,
        *,
        week_start_day: Optional[int] = None,
        now: Optional[datetime] = None,
        shift_names: Optional[Mapping[str, str]] = None,
        forgotten_clock_out_ids: Iterable[str] = (),
        off_roster_ids: Iterable[str] = (),
        worker_id: Optional[str] = None,
    ) -> TimesheetReport:
        calendar = LocalCalendar(timezone)
        now = ensure_utc(now) if now is not None else now_utc()
        week_start_day = self._week_start_day if week_start_day is None else int(week_start_day)
        shift_names = shift_names or {}

        details: Dict[date, List[DayDetail]] = OrderedDict((d, []) for d in window.days())

        counted = [
            p
            for p in punches
            if p.status != PunchStatus.CANCELLED and window.contains(calendar.local_date(p.time_in))
        ]
        counted.sort(key=lambda p: (p.time_in, p.punch_id))
        for p in counted:
            details[calendar.local_date(p.time_in)].append(
                DayDetail(
                    kind=DetailKind.PUNCH,
                    duration=self._calculator.elapsed(p, now=now),
                    punch_id=p.punch_id,
                    job_id=p.job_id,
                    shift_name=shift_names.get(p.punch_id),
                    time_in=p.time_in,
                    time_out=p.time_out,
                )
            )

        for leave in leave_requests:
            if not leave.counts_toward_hours:
                continue
            for day, share in self._spread_leave(leave, calendar):
                if day in details:
                    details[day].append(
                        DayDetail(
                            kind=DetailKind.LEAVE,
                            duration=share,
                            leave_id=leave.leave_id,
                            leave_request_type=leave.leave_request_type,
                        )
                    )

        days = tuple(self._day_bucket(day, entries) for day, entries in details.items())
        logger.debug("Aggregated %d punch(es) over %d day(s) in %s", len(counted), len(days), calendar.tz_name)
        return TimesheetReport(
            window=window,
            timezone=calendar.tz_name,
            week_start_day=week_start_day,
            days=days,
            weeks=self._weeks(days, week_start_day),
            months=self._months(days),
            anomalies=Anomalies(
                overlaps=tuple(pairwise_conflicts(counted)),
                open_punch_ids=tuple(p.punch_id for p in counted if p.is_open),
                missing_clock_out_ids=tuple(sorted(set(forgotten_clock_out_ids))),
                off_roster_ids=tuple(sorted(set(off_roster_ids))),
                geofence_violation_ids=tuple(p.punch_id for p in counted if p.has_geofence_violation),
                duplicate_days=tuple(d.day for d in days if d.multiple_entries),
                gap_days=tuple(d.day for d in days if not d.details),
            ),
            worker_id=worker_id,
        )

    @staticmethod
    def _spread_leave(leave: LeaveRequest, calendar: LocalCalendar) -> List[Tuple[date, timedelta]]:
        """Leave hours split evenly across every local date the leave covers."""
        first = calendar.local_date(leave.start)
        last = calendar.local_date(leave.end)
        # An end at local midnight does not cover the day it lands on.
        if last > first and calendar.to_local(leave.end).time() == time.min:
            last -= timedelta(days=1)

        span = DateWindow(first, last)
        share = leave.total_hours / len(span)
        return [(day, share) for day in span.days()]

    @staticmethod
    def _day_bucket(day: date, entries: Sequence[DayDetail]) -> DayBucket:
        punch_total = sum((e.duration for e in entries if e.kind == DetailKind.PUNCH), timedelta(0))
        leave_total = sum((e.duration for e in entries if e.kind == DetailKind.LEAVE), timedelta(0))
        return DayBucket(
            day=day,
            day_name=weekday_name(day),
            punch_duration=punch_total,
            leave_duration=leave_total,
            details=tuple(entries),
        )

    @staticmethod
    def _weeks(days: Sequence[DayBucket], week_start_day: int) -> Tuple[WeekBucket, ...]:
        grouped: Dict[date, List[DayBucket]] = OrderedDict()
        for d in days:
            grouped.setdefault(week_start_for(d.day, week_start_day), []).append(d)
        return tuple(
            WeekBucket(
                week_start=start,
                duration=sum((d.duration for d in members), timedelta(0)),
                days=tuple(d.day for d in members),
            )
            for start, members in grouped.items()
        )

    @staticmethod
    def _months(days: Sequence[DayBucket]) -> Tuple[MonthBucket, ...]:
        grouped: Dict[Tuple[int, int], timedelta] = OrderedDict()
        for d in days:
            key = (d.day.year, d.day.month)
            grouped[key] = grouped.get(key, timedelta(0)) + d.duration
        return tuple(MonthBucket(year=y, month=m, duration=total) for (y, m), total in grouped.items())
