from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        leave_type: LeaveType,
        status: LeaveStatus,
        reason: str,
        notes: Optional[str],
        approver_id: Optional[int],
        approved_at: Optional[datetime],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def update(self, leave: LeaveRequest) -> bool:
        raise NotImplementedError

    def delete_by_id(self, leave_id: int) -> bool:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveRequest]:
        """Newest first. start_date bounds start_date, end_date bounds end_date."""

        raise NotImplementedError

    def list_all(self, *, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        raise NotImplementedError
