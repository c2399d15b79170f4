from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from ..common.datetime_utils import LocalCalendar, ensure_utc, now_utc, week_start_for
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_OVERTIME_THRESHOLD_HOURS
from ..core.enums import PingOutcome, PunchState, PunchStatus, Weekday
from ..core.exceptions import (
    AuthorizationError,
    InvalidState,
    NotFound,
    OverlapDetected,
    ValidationError,
    ValidationFailed,
)
from ..geo.compliance import check_job_position
from ..geo.model import GeoPoint
from ..hours.calculator.base import HoursCalculator
from ..hours.calculator.standard_calculator import StandardHoursCalculator
from ..jobs.matcher import ShiftMatcher
from ..jobs.model import Job
from ..jobs.repository import JobRepository
from .factory import ClockInStrategyFactory
from .intervals import ensure_no_overlap
from .model import LocationPingResult, LocationSample, Punch
from .repository import PunchRepository

logger = logging.getLogger(__name__)


class PunchLifecycleService:
    """Clock-in, location pings, clock-out, edits and approval of single punches.

    Each operation validates fully in memory and then performs at most one write.
    """

    def __init__(
        self,
        punches: PunchRepository,
        jobs: JobRepository,
        *,
        matcher: ShiftMatcher | None = None,
        calculator: HoursCalculator | None = None,
        strategy_factory: ClockInStrategyFactory | None = None,
        overtime_threshold_hours: float = DEFAULT_OVERTIME_THRESHOLD_HOURS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._punches = punches
        self._jobs = jobs
        self._matcher = matcher or ShiftMatcher()
        self._calculator = calculator or StandardHoursCalculator()
        self._factory = strategy_factory or ClockInStrategyFactory()
        self._overtime_threshold = timedelta(hours=float(overtime_threshold_hours))
        self._clock = clock

    def _now(self, now: Optional[datetime]) -> datetime:
        return ensure_utc(now) if now is not None else self._clock()

    def _load_job(self, job_id: str) -> Job:
        job = self._jobs.get_job(job_id)
        if not job:
            raise NotFound(f"Job {job_id} not found")
        return job

    def get_punch(self, punch_id: str) -> Punch:
        punch = self._punches.get_by_id(punch_id)
        if not punch:
            raise NotFound(f"Punch {punch_id} not found")
        return punch

    def _apply(self, punch: Punch, patch: Dict[str, Any]) -> Punch:
        # Building the replacement first re-runs every Punch invariant before the write.
        updated = replace(punch, **patch)
        if not self._punches.update_punch(punch.punch_id, patch):
            raise NotFound(f"Punch {punch.punch_id} not found")
        return updated

    def _sample(self, job: Job, position: GeoPoint, accuracy: Optional[float], now: datetime) -> LocationSample:
        result = check_job_position(job, position)
        return LocationSample(
            latitude=position.latitude,
            longitude=position.longitude,
            recorded_at=now,
            accuracy=accuracy,
            within_geofence=result.within_geofence,
            distance_meters=result.distance_meters,
        )

    def clock_in(
        self,
        *,
        worker_id: str,
        applicant_id: str,
        job_id: str,
        shift_slug: Optional[str] = None,
        position: Optional[GeoPoint] = None,
        accuracy: Optional[float] = None,
        user_note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Punch:
        now = self._now(now)
        worker_id = require_non_empty(worker_id, "worker_id")
        applicant_id = require_non_empty(applicant_id, "applicant_id")
        job = self._load_job(require_non_empty(job_id, "job_id"))

        shift_slug = optional_text(shift_slug)
        if shift_slug and job.shift_by_slug(shift_slug) is None:
            raise NotFound(f"Shift {shift_slug!r} not found on job {job.job_id}")

        existing = self._punches.find_open_punch(worker_id, job.job_id)
        if existing:
            raise OverlapDetected(
                f"Worker {worker_id} is already clocked in to job {job.job_id}",
                conflicting_ids=[existing.punch_id],
            )

        config = job.additional_config
        calendar = LocalCalendar(job.timezone)
        windows = self._matcher.scheduled_windows_on(job, calendar.local_date(now), calendar, slug=shift_slug)

        if not config.allow_breaks:
            self._ensure_no_break(worker_id, job, windows)
        if not config.allow_overtime:
            self._ensure_within_overtime(worker_id, calendar, now)

        scheduled_start = windows[0][1] if windows else None
        strategy = self._factory.for_clock_in(now=now, scheduled_start=scheduled_start, config=config)
        decision = strategy.decide_time_in(now=now, scheduled_start=scheduled_start)
        if decision.note:
            logger.info("Clock-in for worker %s on job %s: %s", worker_id, job.job_id, decision.note)

        samples = ()
        if position is not None and config.tracks_location:
            samples = (self._sample(job, position, accuracy, now),)

        punch = Punch(
            punch_id="",
            worker_id=worker_id,
            applicant_id=applicant_id,
            job_id=job.job_id,
            time_in=decision.time_in,
            shift_slug=shift_slug,
            location_samples=samples,
            user_note=optional_text(user_note),
            modified_at=now,
            modified_by=worker_id,
        )
        punch_id = self._punches.insert_punch(punch)
        logger.info("Worker %s clocked in to job %s (punch %s)", worker_id, job.job_id, punch_id)
        return replace(punch, punch_id=punch_id)

    def _ensure_no_break(self, worker_id: str, job: Job, windows) -> None:
        for shift, start, end in windows:
            earlier = [
                p
                for p in self._punches.find_punches_in_range(worker_id, [job.job_id], start, end)
                if p.status != PunchStatus.CANCELLED
            ]
            if earlier:
                raise InvalidState(f"Breaks are not allowed on job {job.job_id}; shift {shift.slug} already punched")

    def _ensure_within_overtime(self, worker_id: str, calendar: LocalCalendar, now: datetime) -> None:
        week_start = week_start_for(calendar.local_date(now), Weekday.MONDAY)
        start = calendar.start_of_day_utc(week_start)
        end = calendar.start_of_day_utc(week_start + timedelta(days=7))

        worked = timedelta(0)
        for p in self._punches.find_punches_in_range(worker_id, None, start, end):
            if p.time_out is not None and p.status != PunchStatus.CANCELLED:
                worked += self._calculator.elapsed(p, now=now)

        if worked > self._overtime_threshold:
            raise InvalidState("Overtime is not allowed for this job and weekly hours are already exhausted")

    def record_location(
        self,
        punch_id: str,
        position: GeoPoint,
        *,
        accuracy: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> LocationPingResult:
        now = self._now(now)
        punch = self.get_punch(punch_id)
        if not punch.is_open:
            raise InvalidState(f"Punch {punch_id} is {punch.state.value}, location pings need an open punch")

        job = self._load_job(punch.job_id)
        if not job.additional_config.tracks_location:
            return LocationPingResult(outcome=PingOutcome.FEATURE_NOT_ENABLED, punch=punch)

        sample = self._sample(job, position, accuracy, now)
        if not self._punches.append_location_sample(punch.punch_id, sample):
            raise NotFound(f"Punch {punch_id} not found")
        updated = replace(punch, location_samples=punch.location_samples + (sample,))
        return LocationPingResult(outcome=PingOutcome.RECORDED, punch=updated, sample=sample)

    def clock_out(self, punch_id: str, *, now: Optional[datetime] = None) -> Punch:
        now = self._now(now)
        punch = self.get_punch(punch_id)
        if punch.status == PunchStatus.CANCELLED:
            raise InvalidState(f"Punch {punch_id} was cancelled")
        if not punch.is_open:
            raise NotFound(f"No open punch {punch_id} to clock out")
        if now <= punch.time_in:
            raise ValidationFailed("Clock-out must be after clock-in")

        updated = self._apply(punch, {"time_out": now, "modified_at": now, "modified_by": punch.worker_id})
        logger.info("Worker %s clocked out of punch %s", punch.worker_id, punch_id)
        return updated

    def edit_times(
        self,
        punch_id: str,
        *,
        time_in: datetime,
        time_out: Optional[datetime],
        editor_id: str,
        user_note: Optional[str] = None,
        manager_note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Punch:
        now = self._now(now)
        punch = self.get_punch(punch_id)
        if punch.status != PunchStatus.PENDING:
            raise InvalidState(f"Punch {punch_id} is {punch.state.value} and can no longer be edited")
        for value in (time_in, time_out):
            if value is not None and value.tzinfo is None:
                raise ValidationError("Punch times must be timezone-aware")
        if time_in is None:
            raise ValidationError("time_in is required")
        if time_out is not None and time_out <= time_in:
            raise ValidationFailed("time_out must be after time_in")
        if time_out is None and punch.time_out is not None:
            raise ValidationFailed("A closed punch cannot be reopened")

        if editor_id == punch.worker_id:
            job = self._load_job(punch.job_id)
            if not job.additional_config.allow_manual_punches:
                raise AuthorizationError(f"Manual punch edits are disabled on job {job.job_id}")

        patch: Dict[str, Any] = {
            "time_in": ensure_utc(time_in),
            "time_out": ensure_utc(time_out) if time_out is not None else None,
            "modified_at": now,
            "modified_by": editor_id,
        }
        if user_note is not None:
            patch["user_note"] = optional_text(user_note)
        if manager_note is not None:
            patch["manager_note"] = optional_text(manager_note)

        candidate = replace(punch, **patch)
        existing = self._punches.find_overlap_candidates(punch.applicant_id, candidate.time_in, candidate.time_out)
        ensure_no_overlap(candidate, existing, exclude_id=punch.punch_id)

        return self._apply(punch, patch)

    def _decide(self, punch_id: str, status: PunchStatus, manager_id: str, manager_note: Optional[str], now: datetime) -> Punch:
        manager_id = require_non_empty(manager_id, "manager_id")
        punch = self.get_punch(punch_id)
        if punch.state != PunchState.CLOSED:
            raise InvalidState(f"Punch {punch_id} is {punch.state.value}, only closed pending punches can be decided")

        patch: Dict[str, Any] = {
            "status": status,
            "approving_manager_id": manager_id,
            "manager_note": optional_text(manager_note) or punch.manager_note,
            "modified_at": now,
            "modified_by": manager_id,
        }
        if status == PunchStatus.APPROVED:
            patch["paid_hours"] = self._calculator.paid_hours(punch, now=now)

        updated = self._apply(punch, patch)
        logger.info("Punch %s %s by manager %s", punch_id, status.value.lower(), manager_id)
        return updated

    def approve(self, punch_id: str, *, manager_id: str, manager_note: Optional[str] = None, now: Optional[datetime] = None) -> Punch:
        return self._decide(punch_id, PunchStatus.APPROVED, manager_id, manager_note, self._now(now))

    def reject(self, punch_id: str, *, manager_id: str, manager_note: Optional[str] = None, now: Optional[datetime] = None) -> Punch:
        return self._decide(punch_id, PunchStatus.REJECTED, manager_id, manager_note, self._now(now))

    def cancel(self, punch_id: str, *, worker_id: str, now: Optional[datetime] = None) -> Punch:
        now = self._now(now)
        punch = self.get_punch(punch_id)
        if punch.worker_id != worker_id:
            raise AuthorizationError("Only the worker who owns a punch can cancel it")
        if punch.status != PunchStatus.PENDING:
            raise InvalidState(f"Punch {punch_id} is {punch.state.value} and cannot be cancelled")

        return self._apply(punch, {"status": PunchStatus.CANCELLED, "modified_at": now, "modified_by": worker_id})
