from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    leave_id, employee_id, start_date, end_date, leave_type, status,
    reason, notes, approver_id, approved_at, created_at
"""


def _to_leave(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        leave_type=LeaveType(r["leave_type"]),
        status=LeaveStatus(r["status"]),
        reason=r["reason"],
        created_at=r["created_at"],
        notes=r.get("notes"),
        approver_id=int(r["approver_id"]) if r.get("approver_id") is not None else None,
        approved_at=r.get("approved_at"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, start_date, end_date, days, leave_type, status,
                    reason, notes, approver_id, approved_at, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    start_date,
                    end_date,
                    (end_date - start_date).days + 1,
                    leave_type.value,
                    status.value,
                    reason,
                    notes,
                    approver_id,
                    approved_at,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def update(self, leave: LeaveRequest) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET employee_id=%s, start_date=%s, end_date=%s, days=%s, leave_type=%s, status=%s,
                    reason=%s, notes=%s, approver_id=%s, approved_at=%s
                WHERE leave_id=%s
                """,
                (
                    leave.employee_id,
                    leave.start_date,
                    leave.end_date,
                    leave.days,
                    leave.leave_type.value,
                    leave.status.value,
                    leave.reason,
                    leave.notes,
                    leave.approver_id,
                    leave.approved_at,
                    leave.leave_id,
                ),
            )
            return cur.rowcount > 0

    def delete_by_id(self, leave_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM leave_requests WHERE leave_id=%s", (int(leave_id),))
            return cur.rowcount > 0

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveRequest]:
        where = ["employee_id=%s"]
        params: list = [int(employee_id)]
        if start_date:
            where.append("start_date >= %s")
            params.append(start_date)
        if end_date:
            where.append("end_date <= %s")
            params.append(end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {' AND '.join(where)}
                ORDER BY created_at DESC, leave_id DESC
                """,
                tuple(params),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_all(self, *, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            if status:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM leave_requests WHERE status=%s ORDER BY created_at DESC, leave_id DESC",
                    (status.value,),
                )
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM leave_requests ORDER BY created_at DESC, leave_id DESC")
            return [_to_leave(r) for r in fetchall(cur)]
