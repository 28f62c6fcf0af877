from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus
from ..employees.model import Employee


@dataclass(frozen=True)
class DailySnapshot:
    """Counts for one day. present + absent == total_employees, late <= present."""

    work_date: date
    present: int
    absent: int
    late: int
    total_employees: int

    def to_dict(self) -> dict:
        return {
            "date": self.work_date.isoformat(),
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "total_employees": self.total_employees,
        }


@dataclass(frozen=True)
class DayStat:
    snapshot: DailySnapshot

    @property
    def day_name(self) -> str:
        return self.snapshot.work_date.strftime("%A")

    def to_dict(self) -> dict:
        data = self.snapshot.to_dict()
        data["day_name"] = self.day_name
        return data


@dataclass(frozen=True)
class EmployeeStat:
    employee_id: int
    full_name: str
    staff_code: str
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    attendance_rate: float

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "full_name": self.full_name,
            "staff_code": self.staff_code,
            "total_days": self.total_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "late_days": self.late_days,
            "attendance_rate": self.attendance_rate,
        }


@dataclass(frozen=True)
class PeriodReport:
    start_date: date
    end_date: date
    daily_stats: Sequence[DayStat] = field(default_factory=list)
    employee_stats: Sequence[EmployeeStat] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "daily_stats": [d.to_dict() for d in self.daily_stats],
            "employee_stats": [e.to_dict() for e in self.employee_stats],
        }


@dataclass(frozen=True)
class DailyListingRow:
    employee: Employee
    record: Optional[AttendanceRecord]
    status: AttendanceStatus

    def to_dict(self) -> dict:
        return {
            "employee": self.employee.to_public_dict(),
            "attendance": self.record.to_dict() if self.record else None,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class DailyListing:
    snapshot: DailySnapshot
    rows: Sequence[DailyListingRow]

    def to_dict(self) -> dict:
        return {"stats": self.snapshot.to_dict(), "rows": [r.to_dict() for r in self.rows]}


@dataclass(frozen=True)
class SheetRow:
    record: AttendanceRecord
    work_hours: str

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["work_hours"] = self.work_hours
        return data


@dataclass(frozen=True)
class StaffSheet:
    employee: Employee
    start_date: date
    end_date: date
    rows: Sequence[SheetRow]
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    total_hours: str
    average_hours: str

    def to_dict(self) -> dict:
        return {
            "employee": self.employee.to_public_dict(),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "rows": [r.to_dict() for r in self.rows],
            "stats": {
                "total_days": self.total_days,
                "present_days": self.present_days,
                "absent_days": self.absent_days,
                "late_days": self.late_days,
                "total_hours": self.total_hours,
                "average_hours": self.average_hours,
            },
        }


@dataclass(frozen=True)
class EmployeeSummary:
    today: Optional[AttendanceRecord]
    recent: Sequence[AttendanceRecord]
    stats: EmployeeStat

    def to_dict(self) -> dict:
        return {
            "today": self.today.to_dict() if self.today else None,
            "recent": [r.to_dict() for r in self.recent],
            "stats": self.stats.to_dict(),
        }
