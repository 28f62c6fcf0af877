from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import ArchiveState, EmployeeStatus, EmploymentType, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, full_name, staff_code, password_hash, role,
    status, employment_type, archive_state, archived_at
"""


def _to_employee(row: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        full_name=row["full_name"],
        staff_code=row["staff_code"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        status=EmployeeStatus(row["status"]),
        employment_type=EmploymentType(row["employment_type"]),
        archive_state=ArchiveState(row["archive_state"]),
        archived_at=row.get("archived_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_staff_code(self, staff_code: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE staff_code=%s", (staff_code,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_all(self, *, archived: bool = False) -> Sequence[Employee]:
        state = ArchiveState.ARCHIVED if archived else ArchiveState.ACTIVE
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE archive_state=%s ORDER BY employee_id DESC",
                (state.value,),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employees
                WHERE role=%s AND status=%s AND archive_state=%s
                ORDER BY employee_id ASC
                """,
                (Role.EMPLOYEE.value, EmployeeStatus.ACTIVE.value, ArchiveState.ACTIVE.value),
            )
            return [_to_employee(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(full_name, staff_code, password_hash, role, status, employment_type, archive_state)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    full_name,
                    staff_code,
                    password_hash,
                    role.value,
                    status.value,
                    employment_type.value,
                    ArchiveState.ACTIVE.value,
                ),
            )
            return int(cur.lastrowid)

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
        sets = ["full_name=%s", "staff_code=%s", "status=%s", "employment_type=%s"]
        params: list[object] = [full_name, staff_code, status.value, employment_type.value]
        if password_hash:
            sets.append("password_hash=%s")
            params.append(password_hash)
        params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE employees SET {', '.join(sets)} WHERE employee_id=%s", tuple(params))
            return cur.rowcount > 0

    def set_archived(self, employee_id: int, *, archived_at: Optional[datetime]) -> bool:
        state = ArchiveState.ARCHIVED if archived_at else ArchiveState.ACTIVE
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET archive_state=%s, archived_at=%s WHERE employee_id=%s",
                (state.value, archived_at, int(employee_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0
