from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Keyed storage for AttendanceRecord, unique per (employee_id, work_date).

    Lookups return None when nothing matches. Ordering of range queries is
    chosen by the caller.
    """

    def find_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_by_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_by_employee_and_range(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        *,
        descending: bool = False,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def find_all_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def find_all_in_range(self, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_history(self, employee_id: int, *, limit: int, offset: int = 0) -> Sequence[AttendanceRecord]:
        """Newest work_date first."""

        raise NotImplementedError

    def count_for_employee(self, employee_id: int) -> int:
        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert when attendance_id is None, otherwise update by id.

        Raises ConcurrencyConflict if an insert hits an existing
        (employee_id, work_date) row.
        """

        raise NotImplementedError
