from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Job, Shift


class JobRepository(Protocol):
    def get_job(self, job_id: str) -> Optional[Job]:
        """Job with its shifts loaded, or None."""

        raise NotImplementedError

    def find_shifts_for_job(self, job_id: str) -> Sequence[Shift]:
        raise NotImplementedError
