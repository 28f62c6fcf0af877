from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, SystemClock
from ..common.locks import KeyedLock
from ..common.validators import optional_text, require_non_empty, require_max_length, require_number_in_range
from ..core.constants import DEFAULT_HISTORY_PAGE_SIZE, MAX_ADDRESS_LENGTH, MAX_NOTES_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConcurrencyConflict, NotFound, StateConflict, ValidationError
from ..employees.service import EmployeeDirectory
from .calculator.base import WorkDuration, WorkDurationCalculator
from .calculator.standard_calculator import StandardWorkDurationCalculator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, GeoLocation
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

ALREADY_CHECKED_IN = "Already checked in today"
ALREADY_CHECKED_OUT = "Already checked out today"
MUST_CHECK_IN_FIRST = "Must check in first"


@dataclass(frozen=True)
class CheckOutResult:
    record: AttendanceRecord
    duration: Optional[WorkDuration]

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["work_hours"] = self.duration.hours if self.duration else None
        data["duration_anomaly"] = bool(self.duration and self.duration.anomaly)
        return data


@dataclass(frozen=True)
class Page:
    items: Sequence[AttendanceRecord]
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return (self.total + self.per_page - 1) // self.per_page

    @property
    def has_next(self) -> bool:
        return self.page < self.pages


def build_location(latitude, longitude, address) -> GeoLocation:
    """Validate raw client input into a GeoLocation."""
    lat = require_number_in_range(latitude, "Latitude", -90, 90)
    lng = require_number_in_range(longitude, "Longitude", -180, 180)
    addr = require_non_empty(address, "Address")
    require_max_length(addr, "Address", MAX_ADDRESS_LENGTH)
    return GeoLocation(latitude=lat, longitude=lng, address=addr)


class AttendanceService:
    """Daily check-in/check-out lifecycle for one employee and one date.

    NO_RECORD -> check_in -> CHECKED_IN -> check_out -> COMPLETE. Every
    read-check-write runs under a per-(employee, date) lock; the storage
    unique key covers writers in other processes.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: EmployeeDirectory,
        *,
        clock: Optional[Clock] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        duration_calculator: Optional[WorkDurationCalculator] = None,
        locks: Optional[KeyedLock] = None,
        history_page_size: int = DEFAULT_HISTORY_PAGE_SIZE,
    ):
        self._attendance = attendance
        self._directory = directory
        self._clock = clock or SystemClock()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = duration_calculator or StandardWorkDurationCalculator()
        self._locks = locks or KeyedLock()
        self._history_page_size = int(history_page_size)

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

    def _require_active(self, employee_id: int) -> None:
        employee = self._directory.get(employee_id)
        if not employee.is_active:
            raise ValidationError("Employee is not active")

    def check_in(
        self,
        employee_id: int,
        *,
        latitude,
        longitude,
        address: str,
        notes: Optional[str] = None,
        work_date: Optional[date] = None,
    ) -> AttendanceRecord:
        location = build_location(latitude, longitude, address)
        notes = optional_text(notes, "Notes", MAX_NOTES_LENGTH)
        employee_id = int(employee_id)
        self._require_active(employee_id)

        now = self._clock.now().replace(microsecond=0)
        day = work_date or now.date()

        with self._locks.hold((employee_id, day)):
            existing = self._attendance.find_by_employee_and_date(employee_id, day)
            if existing and existing.check_in_time is not None:
                logger.warning("Rejected check-in for employee %s on %s: already checked in", employee_id, day)
                raise StateConflict(ALREADY_CHECKED_IN)

            saved = self._save_check_in(existing, employee_id, day, now, location, notes)

        decision = self._factory.decide(saved.check_in_time)
        logger.info("Employee %s checked in on %s at %s (%s)", employee_id, day, now.time(), decision.status.value)
        return saved

    def _save_check_in(self, existing, employee_id, day, now, location, notes) -> AttendanceRecord:
        if existing is None:
            record = AttendanceRecord(
                attendance_id=None,
                employee_id=employee_id,
                work_date=day,
                check_in_time=now,
                check_in_location=location,
                notes=notes,
            )
        else:
            # pre-seeded row without a check-in is filled in place
            record = replace(
                existing,
                check_in_time=now,
                check_in_location=location,
                notes=notes if notes is not None else existing.notes,
            )

        try:
            return self._attendance.upsert(record)
        except ConcurrencyConflict:
            winner = self._attendance.find_by_employee_and_date(employee_id, day)
            if winner is None or winner.check_in_time is not None:
                logger.warning("Concurrent check-in for employee %s on %s lost the race", employee_id, day)
                raise StateConflict(ALREADY_CHECKED_IN)
            # the winner was an empty placeholder row
            return self._attendance.upsert(
                replace(
                    winner,
                    check_in_time=now,
                    check_in_location=location,
                    notes=notes if notes is not None else winner.notes,
                )
            )

    def check_out(
        self,
        employee_id: int,
        *,
        latitude,
        longitude,
        address: str,
        notes: Optional[str] = None,
        work_date: Optional[date] = None,
    ) -> CheckOutResult:
        location = build_location(latitude, longitude, address)
        notes = optional_text(notes, "Notes", MAX_NOTES_LENGTH)
        employee_id = int(employee_id)

        now = self._clock.now().replace(microsecond=0)
        day = work_date or now.date()

        with self._locks.hold((employee_id, day)):
            existing = self._attendance.find_by_employee_and_date(employee_id, day)
            if existing is None or existing.check_in_time is None:
                logger.warning("Rejected check-out for employee %s on %s: no check-in", employee_id, day)
                raise StateConflict(MUST_CHECK_IN_FIRST)
            if existing.check_out_time is not None:
                logger.warning("Rejected check-out for employee %s on %s: already checked out", employee_id, day)
                raise StateConflict(ALREADY_CHECKED_OUT)

            saved = self._attendance.upsert(
                replace(
                    existing,
                    check_out_time=now,
                    check_out_location=location,
                    notes=notes if notes is not None else existing.notes,
                )
            )

        duration = self._calculator.duration(saved.check_in_time, saved.check_out_time)
        if duration and duration.anomaly:
            logger.warning(
                "Check-out before check-in for employee %s on %s (%s < %s)",
                employee_id,
                day,
                saved.check_out_time,
                saved.check_in_time,
            )
        logger.info("Employee %s checked out on %s at %s", employee_id, day, now.time())
        return CheckOutResult(record=saved, duration=duration)

    def get_today(self, employee_id: int) -> AttendanceRecord:
        record = self._attendance.find_by_employee_and_date(int(employee_id), self._clock.today())
        if not record:
            raise NotFound("No attendance record for today")
        return record

    def get_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.find_by_id(int(attendance_id))
        if not record:
            raise NotFound("Attendance record not found")
        return record

    def history(self, employee_id: int, *, page: int = 1, per_page: Optional[int] = None) -> Page:
        per_page = int(per_page or self._history_page_size)
        page = max(int(page or 1), 1)
        total = self._attendance.count_for_employee(int(employee_id))
        items = self._attendance.list_history(int(employee_id), limit=per_page, offset=(page - 1) * per_page)
        return Page(items=list(items), page=page, per_page=per_page, total=total)

    def duration_of(self, record: AttendanceRecord) -> Optional[WorkDuration]:
        return self._calculator.duration(record.check_in_time, record.check_out_time)

    def prepare_day(self, *, current_role: Role, work_date: Optional[date] = None) -> int:
        """Create empty rows for active employees that have none on work_date."""
        self._require_admin(current_role)
        day = work_date or self._clock.today()
        created = 0
        for employee in self._directory.list_active_employees():
            with self._locks.hold((employee.employee_id, day)):
                if self._attendance.find_by_employee_and_date(employee.employee_id, day):
                    continue
                try:
                    self._attendance.upsert(
                        AttendanceRecord(attendance_id=None, employee_id=employee.employee_id, work_date=day)
                    )
                except ConcurrencyConflict:
                    continue
                created += 1

        logger.info("Prepared %s attendance rows for %s", created, day)
        return created

    def correct_record(
        self,
        *,
        current_role: Role,
        attendance_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        work_date: Optional[date] = None,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Admin manual edit or create. Skips the state machine, keeps the ordering rules."""
        self._require_admin(current_role)
        notes = optional_text(notes, "Notes", MAX_NOTES_LENGTH)

        if check_out_time is not None and check_in_time is None:
            raise ValidationError("Check-out time requires a check-in time")
        if check_in_time is not None and check_out_time is not None and check_out_time < check_in_time:
            raise ValidationError("Check-out time cannot be before check-in time")

        if attendance_id is not None:
            located = self.get_record(attendance_id)
            employee_id, day = located.employee_id, located.work_date
        else:
            if employee_id is None or work_date is None:
                raise ValidationError("Employee and date are required")
            self._directory.get(employee_id)
            employee_id, day = int(employee_id), work_date

        with self._locks.hold((employee_id, day)):
            if attendance_id is not None:
                existing = self.get_record(attendance_id)
            else:
                existing = self._attendance.find_by_employee_and_date(employee_id, day)
            base = existing or AttendanceRecord(attendance_id=None, employee_id=employee_id, work_date=day)
            record = replace(
                base,
                check_in_time=check_in_time,
                check_in_location=base.check_in_location if check_in_time else None,
                check_out_time=check_out_time,
                check_out_location=base.check_out_location if check_out_time else None,
                notes=notes,
            )
            try:
                saved = self._attendance.upsert(record)
            except ConcurrencyConflict:
                raise StateConflict("Attendance record was created concurrently, reload and retry")

        logger.info("Admin corrected attendance %s for employee %s on %s", saved.attendance_id, employee_id, day)
        return saved
