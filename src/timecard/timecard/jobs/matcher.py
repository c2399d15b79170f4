from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from ..common.datetime_utils import LocalCalendar, weekday_name
from ..core.constants import DEFAULT_CLOCK_OUT_GRACE_MINUTES
from ..core.enums import TieBreak
from ..punches.model import Punch
from .model import Job, Shift

logger = logging.getLogger(__name__)


class ShiftMatcher:
    """Attributes punches to job shifts and flags forgotten clock-outs."""

    def __init__(
        self,
        *,
        tie_break: TieBreak = TieBreak.FIRST_LISTED,
        clock_out_grace_minutes: int = DEFAULT_CLOCK_OUT_GRACE_MINUTES,
    ):
        self._tie_break = TieBreak(tie_break)
        self._grace = timedelta(minutes=int(clock_out_grace_minutes))

    def match_shift(self, job: Job, punch: Punch) -> Optional[Shift]:
        if punch.shift_slug:
            shift = job.shift_by_slug(punch.shift_slug)
            if shift is not None:
                return shift
            logger.warning(
                "Punch %s names unknown shift %r on job %s, matching by date window",
                punch.punch_id,
                punch.shift_slug,
                job.job_id,
            )

        candidates = [s for s in job.shifts if s.contains(punch.time_in)]
        if not candidates:
            return None
        if self._tie_break == TieBreak.LATEST_START:
            return max(candidates, key=lambda s: s.shift_start_date)
        return candidates[0]

    def attribute(self, job: Job, punches: Iterable[Punch]) -> Dict[str, Optional[Shift]]:
        return {p.punch_id: self.match_shift(job, p) for p in punches if p.job_id == job.job_id}

    def has_forgotten_to_clock_out(self, job: Job, punch: Punch, now: datetime) -> bool:
        if not punch.is_open or not job.additional_config.auto_clockout_shift_end:
            return False
        shift = self.match_shift(job, punch)
        if shift is None:
            return False

        calendar = LocalCalendar(job.timezone)
        window = self.scheduled_window(shift, calendar.local_date(punch.time_in), calendar)
        # No hours scheduled that weekday: only the end of the assignment applies.
        ends_at = window[1] if window is not None else shift.shift_end_date
        return ends_at + self._grace < now

    def scheduled_window(
        self,
        shift: Shift,
        local_date: date,
        calendar: LocalCalendar,
    ) -> Optional[Tuple[datetime, datetime]]:
        """UTC bounds of the shift's scheduled hours on ``local_date``, if any."""
        entry = shift.schedule_for(weekday_name(local_date))
        if entry is None:
            return None
        start = calendar.at_local_time(local_date, entry.start)
        end_date = local_date if entry.end > entry.start else local_date + timedelta(days=1)
        end = calendar.at_local_time(end_date, entry.end)
        return start, end

    def scheduled_windows_on(
        self,
        job: Job,
        local_date: date,
        calendar: LocalCalendar,
        *,
        slug: Optional[str] = None,
    ) -> List[Tuple[Shift, datetime, datetime]]:
        shifts = [job.shift_by_slug(slug)] if slug else list(job.shifts)
        windows = []
        for shift in shifts:
            if shift is None:
                continue
            bounds = self.scheduled_window(shift, local_date, calendar)
            if bounds is None:
                continue
            start, end = bounds
            if start <= shift.shift_end_date and shift.shift_start_date <= end:
                windows.append((shift, start, end))
        return windows

    def is_in_roster(self, shift: Shift, applicant_id: str, on_date: Optional[date] = None) -> bool:
        if applicant_id in shift.shift_roster:
            return True
        if on_date is None:
            return False
        entry = shift.schedule_for(weekday_name(on_date))
        if entry is None:
            return False
        return any(
            r.employee_id == applicant_id and (r.on_date is None or r.on_date == on_date)
            for r in entry.roster
        )

    def is_off_roster(self, job: Job, punch: Punch, shift: Shift) -> bool:
        """True when the shift keeps a roster for the punch's local day and the applicant is not on it."""
        on_date = LocalCalendar(job.timezone).local_date(punch.time_in)
        entry = shift.schedule_for(weekday_name(on_date))
        if not shift.shift_roster and not (entry and entry.roster):
            return False
        return not self.is_in_roster(shift, punch.applicant_id, on_date)
