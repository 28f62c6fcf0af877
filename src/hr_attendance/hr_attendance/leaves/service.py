from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, SystemClock
from ..common.validators import optional_text, require_max_length, require_min_length, require_non_empty
from ..core.constants import MAX_LEAVE_NOTES_LENGTH, MAX_LEAVE_REASON_LENGTH, MIN_LEAVE_REASON_LENGTH
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, NotFound, StateConflict, ValidationError
from ..employees.service import EmployeeDirectory
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveCounts:
    total: int
    pending: int
    approved: int
    rejected: int
    cancelled: int
    approved_days: int

    @classmethod
    def of(cls, leaves: Sequence[LeaveRequest]) -> "LeaveCounts":
        by_status = Counter(l.status for l in leaves)
        return cls(
            total=len(leaves),
            pending=by_status[LeaveStatus.PENDING],
            approved=by_status[LeaveStatus.APPROVED],
            rejected=by_status[LeaveStatus.REJECTED],
            cancelled=by_status[LeaveStatus.CANCELLED],
            approved_days=sum(l.days for l in leaves if l.status == LeaveStatus.APPROVED),
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "pending": self.pending,
            "approved": self.approved,
            "rejected": self.rejected,
            "cancelled": self.cancelled,
            "total_days": self.approved_days,
        }


@dataclass(frozen=True)
class LeaveHistory:
    leaves: Sequence[LeaveRequest]
    counts: LeaveCounts

    def to_dict(self) -> dict:
        return {"leaves": [l.to_dict() for l in self.leaves], "stats": self.counts.to_dict()}


class LeaveService:
    """Leave request workflow: pending -> approved | rejected | cancelled."""

    def __init__(self, leaves: LeaveRepository, directory: EmployeeDirectory, *, clock: Optional[Clock] = None):
        self._leaves = leaves
        self._directory = directory
        self._clock = clock or SystemClock()

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

    def get(self, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get_by_id(int(leave_id))
        if not leave:
            raise NotFound("Leave request not found")
        return leave

    @staticmethod
    def _check_range(start_date: date, end_date: date) -> None:
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")

    def _approval_stamp(self, status: LeaveStatus, approver_id: int, previous: Optional[LeaveRequest] = None):
        if status != LeaveStatus.APPROVED:
            return None, None
        if previous and previous.status == LeaveStatus.APPROVED:
            return previous.approver_id, previous.approved_at
        return int(approver_id), self._clock.now()

    def submit(
        self,
        *,
        current_role: Role,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> LeaveRequest:
        if current_role != Role.EMPLOYEE:
            raise AuthorizationError("Only employees can submit leave requests")

        reason = require_non_empty(reason, "Reason")
        require_min_length(reason, "Reason", MIN_LEAVE_REASON_LENGTH)
        require_max_length(reason, "Reason", MAX_LEAVE_REASON_LENGTH)
        if start_date < self._clock.today():
            raise ValidationError("Start date cannot be in the past")
        self._check_range(start_date, end_date)

        leave_id = self._leaves.create(
            employee_id=int(employee_id),
            start_date=start_date,
            end_date=end_date,
            leave_type=leave_type,
            status=LeaveStatus.PENDING,
            reason=reason,
            notes=None,
            approver_id=None,
            approved_at=None,
            created_at=self._clock.now(),
        )
        logger.info("Employee %s submitted leave %s (%s to %s)", employee_id, leave_id, start_date, end_date)
        return self.get(leave_id)

    def create_for_employee(
        self,
        *,
        current_role: Role,
        approver_id: int,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        status: LeaveStatus = LeaveStatus.PENDING,
        notes: Optional[str] = None,
    ) -> LeaveRequest:
        self._require_admin(current_role)
        self._directory.get(employee_id)
        reason = require_non_empty(reason, "Reason")
        require_max_length(reason, "Reason", MAX_LEAVE_REASON_LENGTH)
        notes = optional_text(notes, "Notes", MAX_LEAVE_NOTES_LENGTH)
        self._check_range(start_date, end_date)

        stamped_by, stamped_at = self._approval_stamp(status, approver_id)
        leave_id = self._leaves.create(
            employee_id=int(employee_id),
            start_date=start_date,
            end_date=end_date,
            leave_type=leave_type,
            status=status,
            reason=reason,
            notes=notes,
            approver_id=stamped_by,
            approved_at=stamped_at,
            created_at=self._clock.now(),
        )
        logger.info("Admin %s created leave %s for employee %s as %s", approver_id, leave_id, employee_id, status.value)
        return self.get(leave_id)

    def update(
        self,
        *,
        current_role: Role,
        approver_id: int,
        leave_id: int,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        status: LeaveStatus,
        notes: Optional[str] = None,
    ) -> LeaveRequest:
        self._require_admin(current_role)
        leave = self.get(leave_id)
        self._directory.get(employee_id)
        reason = require_non_empty(reason, "Reason")
        require_max_length(reason, "Reason", MAX_LEAVE_REASON_LENGTH)
        notes = optional_text(notes, "Notes", MAX_LEAVE_NOTES_LENGTH)
        self._check_range(start_date, end_date)

        stamped_by, stamped_at = self._approval_stamp(status, approver_id, previous=leave)
        updated = replace(
            leave,
            employee_id=int(employee_id),
            start_date=start_date,
            end_date=end_date,
            leave_type=leave_type,
            status=status,
            reason=reason,
            notes=notes,
            approver_id=stamped_by,
            approved_at=stamped_at,
        )
        self._leaves.update(updated)
        logger.info("Admin %s updated leave %s (%s)", approver_id, leave.leave_id, status.value)
        return updated

    def _decide(self, *, current_role: Role, approver_id: int, leave_id: int, status: LeaveStatus) -> LeaveRequest:
        self._require_admin(current_role)
        leave = self.get(leave_id)
        if not leave.is_pending:
            logger.warning("Rejected %s of leave %s: already %s", status.value, leave.leave_id, leave.status.value)
            raise StateConflict(f"Leave request is already {leave.status.value}")

        stamped_by, stamped_at = self._approval_stamp(status, approver_id)
        decided = replace(leave, status=status, approver_id=stamped_by, approved_at=stamped_at)
        self._leaves.update(decided)
        logger.info("Admin %s set leave %s to %s", approver_id, leave.leave_id, status.value)
        return decided

    def approve(self, *, current_role: Role, approver_id: int, leave_id: int) -> LeaveRequest:
        return self._decide(current_role=current_role, approver_id=approver_id, leave_id=leave_id, status=LeaveStatus.APPROVED)

    def reject(self, *, current_role: Role, approver_id: int, leave_id: int) -> LeaveRequest:
        return self._decide(current_role=current_role, approver_id=approver_id, leave_id=leave_id, status=LeaveStatus.REJECTED)

    def cancel(self, *, current_role: Role, approver_id: int, leave_id: int) -> LeaveRequest:
        return self._decide(current_role=current_role, approver_id=approver_id, leave_id=leave_id, status=LeaveStatus.CANCELLED)

    def delete_own_pending(self, *, employee_id: int, leave_id: int) -> None:
        leave = self._leaves.get_by_id(int(leave_id))
        if not leave or leave.employee_id != int(employee_id):
            raise NotFound("Leave request not found")
        if not leave.is_pending:
            raise StateConflict("Only pending leave requests can be deleted")

        self._leaves.delete_by_id(leave.leave_id)
        logger.info("Employee %s deleted pending leave %s", employee_id, leave.leave_id)

    def delete(self, *, current_role: Role, leave_id: int) -> None:
        self._require_admin(current_role)
        leave = self.get(leave_id)
        self._leaves.delete_by_id(leave.leave_id)
        logger.info("Admin deleted leave %s", leave.leave_id)

    def history(self, employee_id: int) -> LeaveHistory:
        leaves = list(self._leaves.list_for_employee(int(employee_id)))
        return LeaveHistory(leaves=leaves, counts=LeaveCounts.of(leaves))

    def leave_report(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> LeaveHistory:
        self._directory.get(employee_id)
        leaves = list(self._leaves.list_for_employee(int(employee_id), start_date=start_date, end_date=end_date))
        return LeaveHistory(leaves=leaves, counts=LeaveCounts.of(leaves))

    def list_all(self) -> dict:
        """All requests grouped by status, with counts."""
        leaves = list(self._leaves.list_all())
        grouped: dict[str, list[LeaveRequest]] = {s.value: [] for s in LeaveStatus}
        for leave in leaves:
            grouped[leave.status.value].append(leave)
        return {"groups": grouped, "counts": LeaveCounts.of(leaves)}
