from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import LocationSample, Punch


class PunchRepository(Protocol):
    def find_open_punch(self, worker_id: str, job_id: str) -> Optional[Punch]:
        raise NotImplementedError

    def get_by_id(self, punch_id: str) -> Optional[Punch]:
        raise NotImplementedError

    def insert_punch(self, punch: Punch) -> str:
        """Persist a new punch and return its id.

        A second open punch for the same (worker, job) must raise OverlapDetected.
        """

        raise NotImplementedError

    def update_punch(self, punch_id: str, patch: Mapping[str, Any]) -> bool:
        """Apply ``patch`` (Punch field names) to one punch. False when no row matched."""

        raise NotImplementedError

    def append_location_sample(self, punch_id: str, sample: LocationSample) -> bool:
        raise NotImplementedError

    def find_punches_in_range(
        self,
        worker_id: str,
        job_ids: Optional[Sequence[str]],
        start: datetime,
        end: datetime,
    ) -> Sequence[Punch]:
        """Punches with ``start <= time_in < end``; ``job_ids`` None means all jobs."""

        raise NotImplementedError

    def find_overlap_candidates(
        self,
        applicant_id: str,
        time_in: datetime,
        time_out: Optional[datetime],
    ) -> Sequence[Punch]:
        """Non-cancelled punches of the applicant that may intersect the interval."""

        raise NotImplementedError
