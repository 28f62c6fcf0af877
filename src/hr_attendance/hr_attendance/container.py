from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.calculator.standard_calculator import StandardWorkDurationCalculator
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock, SystemClock
from .common.locks import KeyedLock
from .core.constants import DEFAULT_HISTORY_PAGE_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import AuthService, EmployeeDirectory, EmployeeService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .reports.service import AttendanceReportService


@dataclass(frozen=True)
class Container:
    clock: Clock
    strategy_factory: AttendanceStrategyFactory

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRepository

    directory: EmployeeDirectory
    auth_service: AuthService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    report_service: AttendanceReportService
    leave_service: LeaveService


def build_services(
    *,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    leaves_repo: LeaveRepository,
    clock: Optional[Clock] = None,
    history_page_size: int = DEFAULT_HISTORY_PAGE_SIZE,
) -> Container:
    clock = clock or SystemClock()
    strategy_factory = AttendanceStrategyFactory()
    calculator = StandardWorkDurationCalculator()
    directory = EmployeeDirectory(employees_repo)

    return Container(
        clock=clock,
        strategy_factory=strategy_factory,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        directory=directory,
        auth_service=AuthService(employees_repo),
        employee_service=EmployeeService(employees_repo, clock=clock),
        attendance_service=AttendanceService(
            attendance_repo,
            directory,
            clock=clock,
            strategy_factory=strategy_factory,
            duration_calculator=calculator,
            locks=KeyedLock(),
            history_page_size=history_page_size,
        ),
        report_service=AttendanceReportService(
            attendance_repo,
            directory,
            strategy_factory=strategy_factory,
            calculator=calculator,
        ),
        leave_service=LeaveService(leaves_repo, directory, clock=clock),
    )


def build_container(*, db_config: dict, history_page_size: int = DEFAULT_HISTORY_PAGE_SIZE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        history_page_size=history_page_size,
    )
