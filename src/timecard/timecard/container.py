from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

from .core.constants import DEFAULT_CLOCK_OUT_GRACE_MINUTES, DEFAULT_OVERTIME_THRESHOLD_HOURS, DEFAULT_TIMEZONE
from .core.enums import Weekday
from .database.connection import DBConfig, DatabaseConnection
from .jobs.matcher import ShiftMatcher
from .jobs.mysql_job_repository import MySQLJobRepository
from .jobs.repository import JobRepository
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.repository import LeaveRepository
from .punches.factory import ClockInStrategyFactory
from .punches.mysql_punch_repository import MySQLPunchRepository
from .punches.repository import PunchRepository
from .punches.service import PunchLifecycleService
from .reports.aggregator import TimeAggregator
from .reports.service import ReportService
from .tenancy.resolver import TenantResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    punches_repo: PunchRepository
    jobs_repo: JobRepository
    leaves_repo: LeaveRepository

    punch_service: PunchLifecycleService
    report_service: ReportService

    conn: Optional[DatabaseConnection] = None


def wire_services(
    *,
    punches_repo: PunchRepository,
    jobs_repo: JobRepository,
    leaves_repo: LeaveRepository,
    conn: Optional[DatabaseConnection] = None,
    default_timezone: str = DEFAULT_TIMEZONE,
    week_start_day: int = Weekday.SUNDAY,
    clock_out_grace_minutes: int = DEFAULT_CLOCK_OUT_GRACE_MINUTES,
    overtime_threshold_hours: float = DEFAULT_OVERTIME_THRESHOLD_HOURS,
) -> Container:
    matcher = ShiftMatcher(clock_out_grace_minutes=clock_out_grace_minutes)
    punch_service = PunchLifecycleService(
        punches_repo,
        jobs_repo,
        matcher=matcher,
        strategy_factory=ClockInStrategyFactory(),
        overtime_threshold_hours=overtime_threshold_hours,
    )
    report_service = ReportService(
        punches_repo,
        jobs_repo,
        leaves_repo,
        aggregator=TimeAggregator(week_start_day=week_start_day),
        matcher=matcher,
        default_timezone=default_timezone,
        week_start_day=week_start_day,
    )
    return Container(
        punches_repo=punches_repo,
        jobs_repo=jobs_repo,
        leaves_repo=leaves_repo,
        punch_service=punch_service,
        report_service=report_service,
        conn=conn,
    )


def build_container(*, db_config: Mapping, database: Optional[str] = None, **settings) -> Container:
    """MySQL-backed container for one tenant database (``database`` overrides db_config)."""
    config = DBConfig.from_mapping(db_config)
    if database:
        config = config.for_database(database)
    conn = DatabaseConnection.get_instance(config)

    return wire_services(
        punches_repo=MySQLPunchRepository(conn),
        jobs_repo=MySQLJobRepository(conn, default_timezone=settings.get("default_timezone", DEFAULT_TIMEZONE)),
        leaves_repo=MySQLLeaveRepository(conn),
        conn=conn,
        **settings,
    )


class TenantContainers:
    """One container per physical database, chosen by the tenant resolver."""

    def __init__(self, resolver: TenantResolver, factory: Callable[[str], Container]):
        self._resolver = resolver
        self._factory = factory
        self._by_database: Dict[str, Container] = {}

    def for_tenant(self, tenant_key: Optional[str]) -> Container:
        database = self._resolver.resolve(tenant_key)
        container = self._by_database.get(database)
        if container is None:
            logger.info("Wiring services for tenant %s (database %s)", tenant_key, database)
            container = self._factory(database)
            self._by_database[database] = container
        return container
