from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    leave_id: int
    employee_id: int
    start_date: date
    end_date: date
    leave_type: LeaveType
    status: LeaveStatus
    reason: str
    created_at: datetime
    notes: Optional[str] = None
    approver_id: Optional[int] = None
    approved_at: Optional[datetime] = None

    @property
    def days(self) -> int:
        """Inclusive day count."""
        return (self.end_date - self.start_date).days + 1

    @property
    def is_pending(self) -> bool:
        return self.status == LeaveStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "leave_id": self.leave_id,
            "employee_id": self.employee_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "days": self.days,
            "leave_type": self.leave_type.value,
            "status": self.status.value,
            "reason": self.reason,
            "notes": self.notes,
            "approver_id": self.approver_id,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "created_at": self.created_at.isoformat(),
        }
