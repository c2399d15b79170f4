from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..core.constants import DEFAULT_TIMEZONE
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, load_json
from .model import AdditionalConfig, Job, JobLocation, ScheduleEntry, Shift
from .repository import JobRepository


def _row_to_shift(r: Mapping[str, Any]) -> Shift:
    schedule = load_json(r.get("default_schedule"), {})
    return Shift(
        slug=r["slug"],
        shift_name=r["shift_name"],
        shift_start_date=from_db_datetime(r["shift_start_date"]),
        shift_end_date=from_db_datetime(r["shift_end_date"]),
        default_schedule={day: ScheduleEntry.from_dict(entry) for day, entry in schedule.items() if entry},
        shift_roster=tuple(str(x) for x in load_json(r.get("shift_roster"), [])),
    )


class MySQLJobRepository(JobRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, default_timezone: str = DEFAULT_TIMEZONE):
        self._conn_factory = conn_factory
        self._default_timezone = default_timezone

    def find_shifts_for_job(self, job_id: str) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT slug, shift_name, shift_start_date, shift_end_date, default_schedule, shift_roster
                FROM job_shifts
                WHERE job_id=%s
                ORDER BY position, slug
                """,
                (job_id,),
            )
            return [_row_to_shift(r) for r in fetchall(cur)]

    def get_job(self, job_id: str) -> Optional[Job]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT job_id, title, latitude, longitude, geo_fence_radius, grace_distance_feet,
                       venue_latitude, venue_longitude, timezone, additional_config
                FROM jobs
                WHERE job_id=%s
                """,
                (job_id,),
            )
            r = fetchone(cur)
        if not r:
            return None

        venue = None
        if r.get("venue_latitude") is not None or r.get("venue_longitude") is not None:
            venue = JobLocation(latitude=r.get("venue_latitude"), longitude=r.get("venue_longitude"))

        return Job(
            job_id=str(r["job_id"]),
            title=r["title"],
            location=JobLocation(
                latitude=r.get("latitude"),
                longitude=r.get("longitude"),
                geo_fence_radius=r.get("geo_fence_radius"),
                grace_distance_feet=r.get("grace_distance_feet"),
            ),
            venue_location=venue,
            timezone=r.get("timezone") or self._default_timezone,
            additional_config=AdditionalConfig.from_dict(load_json(r.get("additional_config"), {})),
            shifts=tuple(self.find_shifts_for_job(str(r["job_id"]))),
        )
