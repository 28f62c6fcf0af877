from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EmployeeStatus, EmploymentType, Role
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_staff_code(self, staff_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self, *, archived: bool = False) -> Sequence[Employee]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Employee]:
        """Non-admin staff with active status and not archived, ordered by employee_id."""

        raise NotImplementedError

    def create_employee(
        self,
        *,
        full_name: str,
        staff_code: str,
        password_hash: str,
        role: Role,
        status: EmployeeStatus,
        employment_type: EmploymentType,
    ) -> int:
        raise NotImplementedError

    def update_employee(
        self,
        *,
        employee_id: int,
        full_name: str,
        staff_code: str,
        status: EmployeeStatus,
        employment_type: EmploymentType,
        password_hash: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def set_archived(self, employee_id: int, *, archived_at: Optional[datetime]) -> bool:
        """Archive when archived_at is given, restore when it is None."""

        raise NotImplementedError

    def delete_by_id(self, employee_id: int) -> bool:
        raise NotImplementedError
