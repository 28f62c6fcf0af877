from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest
from werkzeug.security import generate_password_hash

from src.hr_attendance.hr_attendance.core.enums import ArchiveState, EmployeeStatus, EmploymentType, Role
from src.hr_attendance.hr_attendance.core.exceptions import ConcurrencyConflict, NotFound
from src.hr_attendance.hr_attendance.employees.model import Employee
from src.hr_attendance.hr_attendance.employees.service import EmployeeDirectory
from src.hr_attendance.hr_attendance.leaves.model import LeaveRequest


class FakeClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def set(self, now: datetime) -> None:
        self.current = now

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class InMemoryEmployeeRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Employee] = {}

    def add(self, full_name, staff_code, *, password="secret123", role=Role.EMPLOYEE, **fields) -> Employee:
        employee = Employee(
            employee_id=self._next_id,
            full_name=full_name,
            staff_code=staff_code,
            password_hash=generate_password_hash(password),
            role=role,
            **fields,
        )
        self.rows[employee.employee_id] = employee
        self._next_id += 1
        return employee

    def get_by_id(self, employee_id):
        return self.rows.get(int(employee_id))

    def get_by_staff_code(self, staff_code):
        return next((e for e in self.rows.values() if e.staff_code == staff_code), None)

    def list_all(self, *, archived=False):
        state = ArchiveState.ARCHIVED if archived else ArchiveState.ACTIVE
        return [e for e in sorted(self.rows.values(), key=lambda e: -e.employee_id) if e.archive_state == state]

    def list_active(self):
        return [
            e
            for e in sorted(self.rows.values(), key=lambda e: e.employee_id)
            if e.is_active and e.role == Role.EMPLOYEE
        ]

    def create_employee(self, *, full_name, staff_code, password_hash, role, status, employment_type):
        employee = Employee(
            employee_id=self._next_id,
            full_name=full_name,
            staff_code=staff_code,
            password_hash=password_hash,
            role=role,
            status=status,
            employment_type=employment_type,
        )
        self.rows[employee.employee_id] = employee
        self._next_id += 1
        return employee.employee_id

    def update_employee(self, *, employee_id, full_name, staff_code, status, employment_type, password_hash=None):
        current = self.rows.get(int(employee_id))
        if not current:
            return False
        self.rows[current.employee_id] = replace(
            current,
            full_name=full_name,
            staff_code=staff_code,
            status=status,
            employment_type=employment_type,
            password_hash=password_hash or current.password_hash,
        )
        return True

    def set_archived(self, employee_id, *, archived_at):
        current = self.rows.get(int(employee_id))
        if not current:
            return False
        state = ArchiveState.ARCHIVED if archived_at else ArchiveState.ACTIVE
        self.rows[current.employee_id] = replace(current, archive_state=state, archived_at=archived_at)
        return True

    def delete_by_id(self, employee_id):
        return self.rows.pop(int(employee_id), None) is not None


class InMemoryAttendanceRepo:
    """Enforces the (employee_id, work_date) unique key like the real table."""

    def __init__(self):
        self._next_id = 1
        self._guard = threading.Lock()
        self.rows: dict[int, object] = {}
        self.insert_attempts = 0

    def _key_taken(self, employee_id, work_date):
        return any(r.employee_id == employee_id and r.work_date == work_date for r in self.rows.values())

    def find_by_id(self, attendance_id):
        return self.rows.get(int(attendance_id))

    def find_by_employee_and_date(self, employee_id, work_date):
        return next(
            (r for r in self.rows.values() if r.employee_id == int(employee_id) and r.work_date == work_date),
            None,
        )

    def find_by_employee_and_range(self, employee_id, start_date, end_date, *, descending=False):
        rows = [
            r
            for r in self.rows.values()
            if r.employee_id == int(employee_id) and start_date <= r.work_date <= end_date
        ]
        return sorted(rows, key=lambda r: r.work_date, reverse=descending)

    def find_all_for_date(self, work_date):
        return sorted((r for r in self.rows.values() if r.work_date == work_date), key=lambda r: r.employee_id)

    def find_all_in_range(self, start_date, end_date):
        rows = [r for r in self.rows.values() if start_date <= r.work_date <= end_date]
        return sorted(rows, key=lambda r: (r.work_date, r.employee_id))

    def list_history(self, employee_id, *, limit, offset=0):
        rows = sorted(
            (r for r in self.rows.values() if r.employee_id == int(employee_id)),
            key=lambda r: r.work_date,
            reverse=True,
        )
        return rows[offset : offset + limit]

    def count_for_employee(self, employee_id):
        return sum(1 for r in self.rows.values() if r.employee_id == int(employee_id))

    def upsert(self, record):
        with self._guard:
            if record.attendance_id is None:
                self.insert_attempts += 1
                if self._key_taken(record.employee_id, record.work_date):
                    raise ConcurrencyConflict("duplicate (employee_id, work_date)")
                saved = replace(record, attendance_id=self._next_id)
                self._next_id += 1
            else:
                if record.attendance_id not in self.rows:
                    raise NotFound("Attendance record not found")
                saved = record
            self.rows[saved.attendance_id] = saved
            return saved


class InMemoryLeaveRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, LeaveRequest] = {}

    def get_by_id(self, leave_id):
        return self.rows.get(int(leave_id))

    def create(self, *, employee_id, start_date, end_date, leave_type, status, reason, notes, approver_id, approved_at, created_at):
        leave = LeaveRequest(
            leave_id=self._next_id,
            employee_id=int(employee_id),
            start_date=start_date,
            end_date=end_date,
            leave_type=leave_type,
            status=status,
            reason=reason,
            created_at=created_at,
            notes=notes,
            approver_id=approver_id,
            approved_at=approved_at,
        )
        self.rows[leave.leave_id] = leave
        self._next_id += 1
        return leave.leave_id

    def update(self, leave):
        if leave.leave_id not in self.rows:
            return False
        self.rows[leave.leave_id] = leave
        return True

    def delete_by_id(self, leave_id):
        return self.rows.pop(int(leave_id), None) is not None

    def list_for_employee(self, employee_id, *, start_date=None, end_date=None):
        rows = [
            l
            for l in self.rows.values()
            if l.employee_id == int(employee_id)
            and (start_date is None or l.start_date >= start_date)
            and (end_date is None or l.end_date <= end_date)
        ]
        return sorted(rows, key=lambda l: (l.created_at, l.leave_id), reverse=True)

    def list_all(self, *, status=None):
        rows = [l for l in self.rows.values() if status is None or l.status == status]
        return sorted(rows, key=lambda l: (l.created_at, l.leave_id), reverse=True)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 8, 30, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def employees_repo() -> InMemoryEmployeeRepo:
    return InMemoryEmployeeRepo()


@pytest.fixture
def attendance_repo() -> InMemoryAttendanceRepo:
    return InMemoryAttendanceRepo()


@pytest.fixture
def leaves_repo() -> InMemoryLeaveRepo:
    return InMemoryLeaveRepo()


@pytest.fixture
def directory(employees_repo) -> EmployeeDirectory:
    return EmployeeDirectory(employees_repo)


@pytest.fixture
def staff(employees_repo):
    """One admin and two active employees."""
    admin = employees_repo.add("Admin Demo", "ADMIN001", password="admin123", role=Role.ADMIN)
    alice = employees_repo.add("Alice Nguyen", "EMP001", password="alice123")
    bob = employees_repo.add("Bob Tran", "EMP002", password="bob12345", employment_type=EmploymentType.STUDENT)
    return {"admin": admin, "alice": alice, "bob": bob}


@pytest.fixture
def inactive_employee(employees_repo):
    return employees_repo.add("Ivy Inactive", "EMP900", status=EmployeeStatus.INACTIVE)
