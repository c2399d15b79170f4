from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..core.enums import PunchStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, from_db_datetime, to_db_datetime
from .model import LeaveRequest
from .repository import LeaveRepository


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_leave_requests(self, worker_id: str, start: datetime, end: datetime) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_id, worker_id, applicant_id, start_at, end_at, leave_request_type,
                       pto_hours, company_hours, status
                FROM leave_requests
                WHERE worker_id=%s AND start_at < %s AND end_at >= %s
                ORDER BY start_at
                """,
                (worker_id, to_db_datetime(end), to_db_datetime(start)),
            )
            rows = fetchall(cur)
            return [
                LeaveRequest(
                    leave_id=str(r["leave_id"]),
                    worker_id=str(r["worker_id"]),
                    applicant_id=str(r["applicant_id"]),
                    start=from_db_datetime(r["start_at"]),
                    end=from_db_datetime(r["end_at"]),
                    leave_request_type=r["leave_request_type"],
                    pto_hours=float(r.get("pto_hours") or 0),
                    company_hours=float(r.get("company_hours") or 0),
                    status=PunchStatus(r["status"]),
                )
                for r in rows
            ]
