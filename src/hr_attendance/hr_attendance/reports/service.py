from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from ..attendance.calculator.base import WorkDurationCalculator
from ..attendance.calculator.standard_calculator import StandardWorkDurationCalculator
from ..attendance.factory import AttendanceStrategyFactory
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import days_in_range, format_hours_minutes, iter_days
from ..core.constants import DEFAULT_SUMMARY_DAYS
from ..core.enums import AttendanceStatus, StatusFilter
from ..employees.model import Employee
from ..employees.service import EmployeeDirectory
from .model import (
    DailyListing,
    DailyListingRow,
    DailySnapshot,
    DayStat,
    EmployeeStat,
    EmployeeSummary,
    PeriodReport,
    SheetRow,
    StaffSheet,
)


def attendance_rate(present_days: int, total_days: int) -> float:
    if total_days <= 0:
        return 0.0
    return round(present_days / total_days * 100, 2)


def rank_employees(stats: Iterable[EmployeeStat]) -> list[EmployeeStat]:
    """Best attendance first; ties keep ascending employee id."""
    return sorted(stats, key=lambda s: (-s.attendance_rate, s.employee_id))


class AttendanceReportService:
    """Read-only statistics over attendance records.

    A day without a row, or with a row lacking check-in, counts as absent.
    Only active (non-archived) employees are counted unless one is asked for
    by id.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: EmployeeDirectory,
        *,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        calculator: Optional[WorkDurationCalculator] = None,
    ):
        self._attendance = attendance
        self._directory = directory
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = calculator or StandardWorkDurationCalculator()

    def _snapshot(self, work_date: date, employees: Sequence[Employee], records: Iterable[AttendanceRecord]) -> DailySnapshot:
        active_ids = {e.employee_id for e in employees}
        present = late = 0
        for r in records:
            if r.employee_id not in active_ids or not r.is_present:
                continue
            present += 1
            if self._factory.is_late(r):
                late += 1

        total = len(active_ids)
        return DailySnapshot(work_date=work_date, present=present, absent=total - present, late=late, total_employees=total)

    def daily_snapshot(self, work_date: date) -> DailySnapshot:
        employees = self._directory.list_active_employees()
        return self._snapshot(work_date, employees, self._attendance.find_all_for_date(work_date))

    def _employee_stat(self, employee: Employee, records: Iterable[AttendanceRecord], total_days: int) -> EmployeeStat:
        present_days = late_days = 0
        for r in records:
            if not r.is_present:
                continue
            present_days += 1
            if self._factory.is_late(r):
                late_days += 1

        return EmployeeStat(
            employee_id=employee.employee_id,
            full_name=employee.full_name,
            staff_code=employee.staff_code,
            total_days=max(total_days, 0),
            present_days=present_days,
            absent_days=max(total_days - present_days, 0),
            late_days=late_days,
            attendance_rate=attendance_rate(present_days, total_days),
        )

    def period_report(self, start: date, end: date, employee_id: Optional[int] = None) -> PeriodReport:
        active = list(self._directory.list_active_employees())
        if employee_id is not None:
            subjects = [self._directory.get(employee_id)]
        else:
            subjects = active

        if start > end:
            records: Sequence[AttendanceRecord] = []
        else:
            records = self._attendance.find_all_in_range(start, end)

        by_day: dict[date, list[AttendanceRecord]] = defaultdict(list)
        by_employee: dict[int, list[AttendanceRecord]] = defaultdict(list)
        for r in records:
            by_day[r.work_date].append(r)
            by_employee[r.employee_id].append(r)

        daily_stats = [DayStat(self._snapshot(day, active, by_day.get(day, []))) for day in iter_days(start, end)]

        total_days = days_in_range(start, end)
        employee_stats = [self._employee_stat(e, by_employee.get(e.employee_id, []), total_days) for e in subjects]

        return PeriodReport(start_date=start, end_date=end, daily_stats=daily_stats, employee_stats=employee_stats)

    def rank_employees(self, stats: Iterable[EmployeeStat]) -> list[EmployeeStat]:
        return rank_employees(stats)

    def daily_listing(
        self,
        work_date: date,
        *,
        search: str = "",
        status: StatusFilter = StatusFilter.ALL,
    ) -> DailyListing:
        employees = list(self._directory.list_active_employees())
        records = self._attendance.find_all_for_date(work_date)
        snapshot = self._snapshot(work_date, employees, records)

        by_employee = {r.employee_id: r for r in records}
        present_rows: list[DailyListingRow] = []
        absent_rows: list[DailyListingRow] = []
        for e in employees:
            if not e.matches(search):
                continue
            record = by_employee.get(e.employee_id)
            row = DailyListingRow(employee=e, record=record, status=self._factory.status_of(record))
            if row.status == AttendanceStatus.ABSENT:
                absent_rows.append(row)
            else:
                present_rows.append(row)

        present_rows.sort(key=lambda row: (row.record.check_in_time, row.employee.employee_id))

        if status == StatusFilter.PRESENT:
            rows = present_rows
        elif status == StatusFilter.LATE:
            rows = [row for row in present_rows if row.status == AttendanceStatus.LATE]
        elif status == StatusFilter.ABSENT:
            rows = absent_rows
        else:
            rows = present_rows + absent_rows

        return DailyListing(snapshot=snapshot, rows=rows)

    def staff_sheet(self, employee_id: int, *, start: Optional[date] = None, end: Optional[date] = None, today: date) -> StaffSheet:
        employee = self._directory.get(employee_id)
        end = end or today
        start = start or end - timedelta(days=DEFAULT_SUMMARY_DAYS - 1)

        records = list(self._attendance.find_by_employee_and_range(employee.employee_id, start, end, descending=True))

        rows: list[SheetRow] = []
        total_minutes = 0
        for r in records:
            duration = self._calculator.duration(r.check_in_time, r.check_out_time)
            if duration is None:
                rows.append(SheetRow(record=r, work_hours="-"))
                continue
            total_minutes += duration.minutes
            rows.append(SheetRow(record=r, work_hours=format_hours_minutes(duration.minutes)))

        stat = self._employee_stat(employee, records, days_in_range(start, end))
        average = round(total_minutes / stat.present_days / 60, 1) if stat.present_days else 0.0

        return StaffSheet(
            employee=employee,
            start_date=start,
            end_date=end,
            rows=rows,
            total_days=stat.total_days,
            present_days=stat.present_days,
            absent_days=stat.absent_days,
            late_days=stat.late_days,
            total_hours=format_hours_minutes(total_minutes),
            average_hours=f"{average:.1f}h",
        )

    def employee_summary(self, employee_id: int, today: date, days: int = DEFAULT_SUMMARY_DAYS) -> EmployeeSummary:
        employee = self._directory.get(employee_id)
        start = today - timedelta(days=max(int(days), 1) - 1)
        recent = list(self._attendance.find_by_employee_and_range(employee.employee_id, start, today, descending=True))
        today_record = next((r for r in recent if r.work_date == today), None)
        stats = self._employee_stat(employee, recent, days_in_range(start, today))
        return EmployeeSummary(today=today_record, recent=recent, stats=stats)
