from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

import pytest

from src.timecard.timecard.core.enums import PunchStatus
from src.timecard.timecard.core.exceptions import OverlapDetected
from src.timecard.timecard.jobs.model import Job
from src.timecard.timecard.leave.model import LeaveRequest
from src.timecard.timecard.punches.model import LocationSample, Punch


class InMemoryPunches:
    """Punch storage double. Mirrors the one-open-punch unique index of the MySQL schema."""

    def __init__(self, punches: Sequence[Punch] = ()):
        self._by_id: dict[str, Punch] = {p.punch_id: p for p in punches}
        self._next_id = 1
        self.writes = 0

    def all(self) -> list[Punch]:
        return list(self._by_id.values())

    def add(self, punch: Punch) -> Punch:
        self._by_id[punch.punch_id] = punch
        return punch

    def find_open_punch(self, worker_id: str, job_id: str) -> Optional[Punch]:
        for p in self._by_id.values():
            if p.worker_id == worker_id and p.job_id == job_id and p.is_open:
                return p
        return None

    def get_by_id(self, punch_id: str) -> Optional[Punch]:
        return self._by_id.get(punch_id)

    def insert_punch(self, punch: Punch) -> str:
        if punch.is_open and any(
            p.is_open and p.worker_id == punch.worker_id and p.job_id == punch.job_id for p in self._by_id.values()
        ):
            raise OverlapDetected("duplicate open punch")
        punch_id = f"p{self._next_id}"
        self._next_id += 1
        self._by_id[punch_id] = replace(punch, punch_id=punch_id)
        self.writes += 1
        return punch_id

    def update_punch(self, punch_id: str, patch) -> bool:
        punch = self._by_id.get(punch_id)
        if not punch:
            return False
        self._by_id[punch_id] = replace(punch, **patch)
        self.writes += 1
        return True

    def append_location_sample(self, punch_id: str, sample: LocationSample) -> bool:
        punch = self._by_id.get(punch_id)
        if not punch:
            return False
        self._by_id[punch_id] = replace(punch, location_samples=punch.location_samples + (sample,))
        self.writes += 1
        return True

    def find_punches_in_range(self, worker_id, job_ids, start: datetime, end: datetime) -> list[Punch]:
        return sorted(
            (
                p
                for p in self._by_id.values()
                if p.worker_id == worker_id
                and (job_ids is None or p.job_id in job_ids)
                and start <= p.time_in < end
            ),
            key=lambda p: p.time_in,
        )

    def find_overlap_candidates(self, applicant_id, time_in, time_out) -> list[Punch]:
        return [p for p in self._by_id.values() if p.applicant_id == applicant_id and p.status != PunchStatus.CANCELLED]


class InMemoryJobs:
    def __init__(self, jobs: Sequence[Job] = ()):
        self._jobs = {j.job_id: j for j in jobs}

    def add(self, job: Job) -> Job:
        self._jobs[job.job_id] = job
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def find_shifts_for_job(self, job_id: str):
        job = self._jobs.get(job_id)
        return list(job.shifts) if job else []


class InMemoryLeaves:
    def __init__(self, leaves: Sequence[LeaveRequest] = ()):
        self._leaves = list(leaves)

    def add(self, leave: LeaveRequest) -> LeaveRequest:
        self._leaves.append(leave)
        return leave

    def find_leave_requests(self, worker_id: str, start: datetime, end: datetime) -> list[LeaveRequest]:
        return [l for l in self._leaves if l.worker_id == worker_id and l.start < end and l.end >= start]


@pytest.fixture
def punches() -> InMemoryPunches:
    return InMemoryPunches()


@pytest.fixture
def jobs() -> InMemoryJobs:
    return InMemoryJobs()


@pytest.fixture
def leaves() -> InMemoryLeaves:
    return InMemoryLeaves()


@pytest.fixture
def make_stores():
    """Builds a fresh (punches, jobs, leaves) triple, one per tenant database."""

    def build():
        return InMemoryPunches(), InMemoryJobs(), InMemoryLeaves()

    return build
