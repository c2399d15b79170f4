from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..common.datetime_utils import DateWindow, LocalCalendar, ensure_utc, now_utc
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import Weekday
from ..jobs.matcher import ShiftMatcher
from ..jobs.model import Job
from ..jobs.repository import JobRepository
from ..leave.repository import LeaveRepository
from ..punches.repository import PunchRepository
from .aggregator import TimeAggregator
from .model import TimesheetReport

logger = logging.getLogger(__name__)


class ReportService:
    """Loads a worker's punches and leave for a window and aggregates them."""

    def __init__(
        self,
        punches: PunchRepository,
        jobs: JobRepository,
        leaves: LeaveRepository,
        *,
        aggregator: Optional[TimeAggregator] = None,
        matcher: Optional[ShiftMatcher] = None,
        default_timezone: str = DEFAULT_TIMEZONE,
        week_start_day: int = Weekday.SUNDAY,
    ):
        self._punches = punches
        self._jobs = jobs
        self._leaves = leaves
        self._aggregator = aggregator or TimeAggregator(week_start_day=week_start_day)
        self._matcher = matcher or ShiftMatcher()
        self._default_timezone = default_timezone
        self._week_start_day = int(week_start_day)

    def build_timesheet(
        self,
        *,
        worker_id: str,
        window: DateWindow,
        timezone: Optional[str] = None,
        job_ids: Optional[Sequence[str]] = None,
        week_start_day: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> TimesheetReport:
        worker_id = require_non_empty(worker_id, "worker_id")
        tz_name = timezone or self._default_timezone
        now = ensure_utc(now) if now is not None else now_utc()

        start, end = LocalCalendar(tz_name).window_bounds_utc(window)
        punches = list(self._punches.find_punches_in_range(worker_id, job_ids, start, end))
        leaves = list(self._leaves.find_leave_requests(worker_id, start, end))

        shift_names: Dict[str, str] = {}
        forgotten: List[str] = []
        off_roster: List[str] = []
        by_id = {p.punch_id: p for p in punches}
        for job in self._load_jobs(p.job_id for p in punches):
            for punch_id, shift in self._matcher.attribute(job, punches).items():
                if shift is None:
                    continue
                shift_names[punch_id] = shift.shift_name
                if self._matcher.is_off_roster(job, by_id[punch_id], shift):
                    off_roster.append(punch_id)
            forgotten.extend(
                p.punch_id
                for p in punches
                if p.job_id == job.job_id and self._matcher.has_forgotten_to_clock_out(job, p, now)
            )

        return self._aggregator.aggregate(
            punches,
            leaves,
            window,
            tz_name,
            week_start_day=self._week_start_day if week_start_day is None else week_start_day,
            now=now,
            shift_names=shift_names,
            forgotten_clock_out_ids=forgotten,
            off_roster_ids=off_roster,
            worker_id=worker_id,
        )

    def _load_jobs(self, job_ids) -> List[Job]:
        jobs = []
        for job_id in sorted(set(job_ids)):
            job = self._jobs.get_job(job_id)
            if job is None:
                logger.warning("Punches reference missing job %s, skipping shift attribution", job_id)
                continue
            jobs.append(job)
        return jobs
