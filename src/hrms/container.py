from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_COMPANY_CODE, DEFAULT_LOGIN_DECAY_MINUTES, DEFAULT_LOGIN_MAX_ATTEMPTS
from .database.connection import DBConfig, DatabaseConnection
from .employees.id_generator import EmployeeIdGenerator
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .payroll.calculator.standard_calculator import StandardSalaryCalculator
from .payroll.mysql_salary_repository import MySQLSalaryStructureRepository
from .payroll.repository import SalaryStructureRepository
from .payroll.service import PayrollService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .users.throttle import LoginThrottle


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRepository
    salary_repo: SalaryStructureRepository

    id_generator: EmployeeIdGenerator
    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService


def assemble_container(
    *,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    leaves_repo: LeaveRepository,
    salary_repo: SalaryStructureRepository,
    conn: Optional[DatabaseConnection] = None,
    company_code: str = DEFAULT_COMPANY_CODE,
    login_max_attempts: int = DEFAULT_LOGIN_MAX_ATTEMPTS,
    login_decay_minutes: int = DEFAULT_LOGIN_DECAY_MINUTES,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services on top of the given repositories (MySQL or in-memory)."""

    id_generator = EmployeeIdGenerator(users_repo, default_company_code=company_code, clock=clock)
    throttle = LoginThrottle(max_attempts=login_max_attempts, decay_minutes=login_decay_minutes, clock=clock)

    auth_service = AuthService(users_repo, id_generator, throttle=throttle, clock=clock)
    user_service = UserService(users_repo, id_generator, attendance=attendance_repo, leaves=leaves_repo, clock=clock)
    attendance_service = AttendanceService(attendance_repo, users_repo, clock=clock)
    leave_service = LeaveService(leaves_repo, clock=clock)
    payroll_service = PayrollService(salary_repo, users_repo, calculator=StandardSalaryCalculator())

    return Container(
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        salary_repo=salary_repo,
        id_generator=id_generator,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        payroll_service=payroll_service,
    )


def build_container(
    *,
    db_config: dict,
    company_code: str = DEFAULT_COMPANY_CODE,
    login_max_attempts: int = DEFAULT_LOGIN_MAX_ATTEMPTS,
    login_decay_minutes: int = DEFAULT_LOGIN_DECAY_MINUTES,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    return assemble_container(
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        salary_repo=MySQLSalaryStructureRepository(conn),
        conn=conn,
        company_code=company_code,
        login_max_attempts=login_max_attempts,
        login_decay_minutes=login_decay_minutes,
    )
