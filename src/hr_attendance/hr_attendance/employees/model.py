from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ArchiveState, EmployeeStatus, EmploymentType, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: a staff member.

    Plain data object, no database access. `staff_code` is the
    human-readable ID used for login.
    """

    employee_id: int
    full_name: str
    staff_code: str
    password_hash: str
    role: Role = Role.EMPLOYEE
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    employment_type: EmploymentType = EmploymentType.EMPLOYEE
    archive_state: ArchiveState = ArchiveState.ACTIVE
    archived_at: Optional[datetime] = None

    @property
    def is_archived(self) -> bool:
        return self.archive_state == ArchiveState.ARCHIVED

    @property
    def is_active(self) -> bool:
        """Counts towards attendance statistics."""
        return self.status == EmployeeStatus.ACTIVE and not self.is_archived

    def matches(self, search: str) -> bool:
        needle = (search or "").strip().lower()
        if not needle:
            return True
        return needle in self.full_name.lower() or needle in self.staff_code.lower()

    def to_public_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "full_name": self.full_name,
            "staff_code": self.staff_code,
            "role": self.role.value,
            "status": self.status.value,
            "employment_type": self.employment_type.value,
            "archived": self.is_archived,
            "archived_at": self.archived_at.isoformat() if self.archived_at else None,
        }
