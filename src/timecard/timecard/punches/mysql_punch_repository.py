from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

import mysql.connector

from ..core.enums import PunchStatus
from ..core.exceptions import OverlapDetected, StorageUnavailable
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    from_db_datetime,
    is_duplicate_key,
    load_json,
    to_db_datetime,
)
from .model import LocationSample, Punch
from .repository import PunchRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    punch_id, worker_id, applicant_id, job_id, shift_slug, time_in, time_out,
    location_samples, status, user_note, manager_note, approving_manager_id,
    paid_hours, modified_at, modified_by
"""

# Punch field -> column for fields that may be patched.
_PATCHABLE = {
    "time_in": "time_in",
    "time_out": "time_out",
    "status": "status",
    "user_note": "user_note",
    "manager_note": "manager_note",
    "approving_manager_id": "approving_manager_id",
    "paid_hours": "paid_hours",
    "modified_at": "modified_at",
    "modified_by": "modified_by",
    "shift_slug": "shift_slug",
}


def _row_to_punch(r: Mapping[str, Any]) -> Punch:
    paid = r.get("paid_hours")
    return Punch(
        punch_id=str(r["punch_id"]),
        worker_id=str(r["worker_id"]),
        applicant_id=str(r["applicant_id"]),
        job_id=str(r["job_id"]),
        shift_slug=r.get("shift_slug"),
        time_in=from_db_datetime(r["time_in"]),
        time_out=from_db_datetime(r.get("time_out")),
        location_samples=tuple(LocationSample.from_dict(s) for s in load_json(r.get("location_samples"), [])),
        status=PunchStatus(r["status"]),
        user_note=r.get("user_note"),
        manager_note=r.get("manager_note"),
        approving_manager_id=r.get("approving_manager_id"),
        paid_hours=float(paid) if paid is not None else None,
        modified_at=from_db_datetime(r.get("modified_at")),
        modified_by=r.get("modified_by"),
    )


def _db_value(value: Any) -> Any:
    if isinstance(value, PunchStatus):
        return value.value
    if isinstance(value, datetime):
        return to_db_datetime(value)
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_open_punch(self, worker_id: str, job_id: str) -> Optional[Punch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punches
                WHERE worker_id=%s AND job_id=%s AND time_out IS NULL AND status='Pending'
                LIMIT 1
                """,
                (worker_id, job_id),
            )
            r = fetchone(cur)
            return _row_to_punch(r) if r else None

    def get_by_id(self, punch_id: str) -> Optional[Punch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM punches WHERE punch_id=%s", (punch_id,))
            r = fetchone(cur)
            return _row_to_punch(r) if r else None

    def insert_punch(self, punch: Punch) -> str:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO punches(
                        worker_id, applicant_id, job_id, shift_slug, time_in, time_out,
                        location_samples, status, user_note, modified_at, modified_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        punch.worker_id,
                        punch.applicant_id,
                        punch.job_id,
                        punch.shift_slug,
                        to_db_datetime(punch.time_in),
                        to_db_datetime(punch.time_out),
                        dump_json([s.to_dict() for s in punch.location_samples]),
                        punch.status.value,
                        punch.user_note,
                        to_db_datetime(punch.modified_at),
                        punch.modified_by,
                    ),
                )
                return str(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise OverlapDetected(
                    f"Worker {punch.worker_id} already has an open punch on job {punch.job_id}"
                ) from e
            logger.error("Punch insert rejected: %s", e)
            raise StorageUnavailable(str(e)) from e

    def update_punch(self, punch_id: str, patch: Mapping[str, Any]) -> bool:
        unknown = set(patch) - set(_PATCHABLE)
        if unknown:
            raise ValueError(f"Unsupported punch fields: {', '.join(sorted(unknown))}")
        if not patch:
            return True

        assignments = ", ".join(f"{_PATCHABLE[k]}=%s" for k in patch)
        params = [_db_value(v) for v in patch.values()]
        params.append(punch_id)

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE punches SET {assignments} WHERE punch_id=%s", tuple(params))
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise OverlapDetected(f"Punch {punch_id} would be a second open punch for its worker and job") from e
            logger.error("Punch update rejected: %s", e)
            raise StorageUnavailable(str(e)) from e

    def append_location_sample(self, punch_id: str, sample: LocationSample) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE punches
                SET location_samples=JSON_ARRAY_APPEND(COALESCE(location_samples, JSON_ARRAY()), '$', CAST(%s AS JSON))
                WHERE punch_id=%s
                """,
                (dump_json(sample.to_dict()), punch_id),
            )
            return cur.rowcount > 0

    def find_punches_in_range(
        self,
        worker_id: str,
        job_ids: Optional[Sequence[str]],
        start: datetime,
        end: datetime,
    ) -> Sequence[Punch]:
        clauses = ["worker_id=%s", "time_in >= %s", "time_in < %s"]
        params: list[object] = [worker_id, to_db_datetime(start), to_db_datetime(end)]

        if job_ids is not None:
            if not job_ids:
                return []
            clauses.append(f"job_id IN ({', '.join(['%s'] * len(job_ids))})")
            params.extend(job_ids)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM punches WHERE {where} ORDER BY time_in, punch_id", tuple(params))
            return [_row_to_punch(r) for r in fetchall(cur)]

    def find_overlap_candidates(
        self,
        applicant_id: str,
        time_in: datetime,
        time_out: Optional[datetime],
    ) -> Sequence[Punch]:
        clauses = ["applicant_id=%s", "status <> 'Cancelled'", "(time_out IS NULL OR time_out > %s)"]
        params: list[object] = [applicant_id, to_db_datetime(time_in)]
        if time_out is not None:
            clauses.append("time_in < %s")
            params.append(to_db_datetime(time_out))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM punches WHERE {where} ORDER BY time_in", tuple(params))
            return [_row_to_punch(r) for r in fetchall(cur)]
