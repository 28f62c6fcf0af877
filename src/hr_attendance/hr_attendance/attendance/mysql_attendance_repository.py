from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConcurrencyConflict, NotFound
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, GeoLocation
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date,
    check_in_time, check_in_latitude, check_in_longitude, check_in_address,
    check_out_time, check_out_latitude, check_out_longitude, check_out_address,
    notes
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_in_location=GeoLocation.from_columns(
            r.get("check_in_latitude"), r.get("check_in_longitude"), r.get("check_in_address")
        ),
        check_out_time=r.get("check_out_time"),
        check_out_location=GeoLocation.from_columns(
            r.get("check_out_latitude"), r.get("check_out_longitude"), r.get("check_out_address")
        ),
        notes=r.get("notes"),
    )


def _location_params(location: Optional[GeoLocation]) -> tuple:
    if location is None:
        return (None, None, None)
    return (location.latitude, location.longitude, location.address)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_by_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_by_employee_and_range(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        *,
        descending: bool = False,
    ) -> Sequence[AttendanceRecord]:
        order = "DESC" if descending else "ASC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date {order}
                """,
                (int(employee_id), start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def find_all_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE work_date=%s
                ORDER BY employee_id ASC
                """,
                (work_date,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def find_all_in_range(self, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, employee_id ASC
                """,
                (start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_history(self, employee_id: int, *, limit: int, offset: int = 0) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s
                ORDER BY work_date DESC
                LIMIT %s OFFSET %s
                """,
                (int(employee_id), int(limit), int(offset)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_for_employee(self, employee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        if record.attendance_id is None:
            return self._insert(record)
        return self._update(record)

    def _insert(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date,
                        check_in_time, check_in_latitude, check_in_longitude, check_in_address,
                        check_out_time, check_out_latitude, check_out_longitude, check_out_address,
                        notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.employee_id,
                        record.work_date,
                        record.check_in_time,
                        *_location_params(record.check_in_location),
                        record.check_out_time,
                        *_location_params(record.check_out_location),
                        record.notes,
                    ),
                )
                new_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ConcurrencyConflict(
                    f"Attendance for employee {record.employee_id} on {record.work_date} already exists"
                ) from e
            raise
        return replace(record, attendance_id=new_id)

    def _update(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_in_latitude=%s, check_in_longitude=%s, check_in_address=%s,
                    check_out_time=%s, check_out_latitude=%s, check_out_longitude=%s, check_out_address=%s,
                    notes=%s
                WHERE attendance_id=%s
                """,
                (
                    record.check_in_time,
                    *_location_params(record.check_in_location),
                    record.check_out_time,
                    *_location_params(record.check_out_location),
                    record.notes,
                    int(record.attendance_id),
                ),
            )
            if cur.rowcount == 0 and not self._exists(cur, int(record.attendance_id)):
                raise NotFound("Attendance record not found")
        return record

    @staticmethod
    def _exists(cur, attendance_id: int) -> bool:
        # rowcount is 0 for an unchanged row as well
        cur.execute("SELECT 1 AS x FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
        return fetchone(cur) is not None
