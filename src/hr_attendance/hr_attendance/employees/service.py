from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import Clock, SystemClock
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import EmployeeStatus, EmploymentType, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFound, StateConflict, ValidationError
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    employee_id: int
    full_name: str
    staff_code: str
    role: Role


class EmployeeDirectory:
    """Read side of the staff records used by attendance and reports."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFound("Employee not found")
        return employee

    def is_active(self, employee_id: int) -> bool:
        employee = self._employees.get_by_id(int(employee_id))
        return bool(employee and employee.is_active)

    def list_active_employees(self) -> Sequence[Employee]:
        return list(self._employees.list_active())


class AuthService:
    """Use case: authenticate an employee or admin (login)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def authenticate(self, staff_code: str, password: str) -> SessionUser:
        employee = self._employees.get_by_staff_code((staff_code or "").strip())
        if not employee or not employee.is_active:
            raise AuthenticationError("Invalid staff ID or password")

        try:
            ok = check_password_hash(employee.password_hash, password or "")
        except ValueError:
            # placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.warning("Failed login for staff code %s", employee.staff_code)
            raise AuthenticationError("Invalid staff ID or password")

        return SessionUser(
            employee_id=employee.employee_id,
            full_name=employee.full_name,
            staff_code=employee.staff_code,
            role=employee.role,
        )


class EmployeeService:
    """Use case: manage staff records (admin)."""

    def __init__(self, employees: EmployeeRepository, *, clock: Optional[Clock] = None):
        self._employees = employees
        self._clock = clock or SystemClock()

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

    def _get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFound("Employee not found")
        return employee

    def list_employees(self, *, archived: bool = False) -> Sequence[Employee]:
        return self._employees.list_all(archived=archived)

    def get_employee(self, employee_id: int) -> Employee:
        return self._get(employee_id)

    def create_employee(
        self,
        *,
        current_role: Role,
        full_name: str,
        staff_code: str,
        password: str,
        status: EmployeeStatus = EmployeeStatus.ACTIVE,
        employment_type: EmploymentType = EmploymentType.EMPLOYEE,
    ) -> int:
        self._require_admin(current_role)
        full_name = require_non_empty(full_name, "Full name")
        staff_code = require_non_empty(staff_code, "Staff ID")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._employees.get_by_staff_code(staff_code):
            raise ValidationError("Staff ID already exists")

        employee_id = self._employees.create_employee(
            full_name=full_name,
            staff_code=staff_code,
            password_hash=generate_password_hash(password),
            role=Role.EMPLOYEE,
            status=status,
            employment_type=employment_type,
        )
        logger.info("Created employee %s (%s)", employee_id, staff_code)
        return employee_id

    def update_employee(
        self,
        *,
        current_role: Role,
        employee_id: int,
        full_name: str,
        staff_code: str,
        status: EmployeeStatus,
        employment_type: EmploymentType,
        password: str = "",
    ) -> None:
        self._require_admin(current_role)
        self._get(employee_id)
        full_name = require_non_empty(full_name, "Full name")
        staff_code = require_non_empty(staff_code, "Staff ID")

        other = self._employees.get_by_staff_code(staff_code)
        if other and other.employee_id != int(employee_id):
            raise ValidationError("Staff ID already exists")

        password_hash = None
        if password:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            password_hash = generate_password_hash(password)

        self._employees.update_employee(
            employee_id=int(employee_id),
            full_name=full_name,
            staff_code=staff_code,
            status=status,
            employment_type=employment_type,
            password_hash=password_hash,
        )

    def archive(self, *, current_role: Role, employee_id: int) -> None:
        self._require_admin(current_role)
        employee = self._get(employee_id)
        if employee.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be archived")
        if employee.is_archived:
            raise StateConflict("Employee is already archived")

        self._employees.set_archived(employee.employee_id, archived_at=self._clock.now())
        logger.info("Archived employee %s", employee.employee_id)

    def restore(self, *, current_role: Role, employee_id: int) -> None:
        self._require_admin(current_role)
        employee = self._get(employee_id)
        if not employee.is_archived:
            raise StateConflict("Employee is not archived")

        self._employees.set_archived(employee.employee_id, archived_at=None)
        logger.info("Restored employee %s", employee.employee_id)

    def delete_permanently(self, *, current_role: Role, employee_id: int) -> None:
        self._require_admin(current_role)
        employee = self._get(employee_id)
        if not employee.is_archived:
            raise StateConflict("Archive the employee before deleting permanently")

        if not self._employees.delete_by_id(employee.employee_id):
            raise NotFound("Employee not found")
        logger.info("Permanently deleted employee %s", employee.employee_id)
