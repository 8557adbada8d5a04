from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .approvals.service import ApprovalService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .common.cache import NullCache, SlotCache, TTLCache
from .common.clock import Clock, ZoneClock
from .common.datetime_utils import load_timezone
from .core.constants import DEFAULT_APP_TIMEZONE, DEFAULT_SLOT_CACHE_TTL_SECONDS, GRACE_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .payroll.calculator.proposal_calculator import SlotProposalCalculator
from .payroll.service import PayrollReportService
from .salary_logs.mysql_salary_log_repository import MySQLSalaryLogRepository
from .slots.mysql_slot_repository import MySQLSlotRepository
from .slots.service import SlotService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    clock: Clock
    slot_cache: SlotCache

    users_repo: MySQLUserRepository
    slots_repo: MySQLSlotRepository
    attendance_repo: MySQLAttendanceRepository
    salary_logs_repo: MySQLSalaryLogRepository

    auth_service: AuthService
    user_service: UserService
    slot_service: SlotService
    attendance_service: AttendanceService
    approval_service: ApprovalService
    payroll_report_service: PayrollReportService


def build_container(
    *,
    db_config: Mapping,
    timezone: str = DEFAULT_APP_TIMEZONE,
    cache_enabled: bool = True,
    cache_ttl_seconds: int = DEFAULT_SLOT_CACHE_TTL_SECONDS,
    clock: Optional[Clock] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    clock = clock or ZoneClock(load_timezone(timezone))
    slot_cache: SlotCache = TTLCache(default_ttl_seconds=cache_ttl_seconds) if cache_enabled else NullCache()

    users_repo = MySQLUserRepository(conn)
    slots_repo = MySQLSlotRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    salary_logs_repo = MySQLSalaryLogRepository(conn)

    slot_service = SlotService(slots_repo, cache=slot_cache)
    attendance_service = AttendanceService(
        attendance_repo,
        slot_service,
        users_repo,
        clock=clock,
        strategy_factory=AttendanceStrategyFactory(),
        grace_minutes=GRACE_MINUTES,
    )
    payroll_report_service = PayrollReportService(
        attendance_repo,
        users_repo,
        slot_service,
        clock=clock,
        calculator=SlotProposalCalculator(),
    )

    return Container(
        conn=conn,
        clock=clock,
        slot_cache=slot_cache,
        users_repo=users_repo,
        slots_repo=slots_repo,
        attendance_repo=attendance_repo,
        salary_logs_repo=salary_logs_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        slot_service=slot_service,
        attendance_service=attendance_service,
        approval_service=ApprovalService(attendance_repo, clock=clock),
        payroll_report_service=payroll_report_service,
    )
