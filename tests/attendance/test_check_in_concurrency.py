from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime

import pytest

from src.hr_attendance.hr_attendance.attendance.model import AttendanceRecord
from src.hr_attendance.hr_attendance.attendance.service import AttendanceService
from src.hr_attendance.hr_attendance.common.locks import KeyedLock
from src.hr_attendance.hr_attendance.core.enums import Role
from src.hr_attendance.hr_attendance.core.exceptions import StateConflict

OFFICE = {"latitude": 10.0, "longitude": 106.0, "address": "Head office"}


def _race(targets):
    barrier = threading.Barrier(len(targets))
    results = []
    lock = threading.Lock()

    def run(fn):
        barrier.wait()
        try:
            value = fn()
        except Exception as e:  # collected and asserted by the test
            value = e
        with lock:
            results.append(value)

    threads = [threading.Thread(target=run, args=(fn,)) for fn in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def test_concurrent_check_ins_create_exactly_one_record(attendance_repo, directory, clock, staff, fixed_now):
    service = AttendanceService(attendance_repo, directory, clock=clock)
    e = staff["alice"].employee_id

    results = _race([lambda: service.check_in(e, **OFFICE) for _ in range(8)])

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 7
    assert all(isinstance(f, StateConflict) for f in failures)
    assert attendance_repo.count_for_employee(e) == 1


class RacingAttendanceRepo:
    """Another process inserts the row between our read and our write."""

    def __init__(self, inner, *, winner_factory):
        self._inner = inner
        self._winner_factory = winner_factory
        self._raced = False

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def find_by_employee_and_date(self, employee_id, work_date):
        found = self._inner.find_by_employee_and_date(employee_id, work_date)
        if not self._raced:
            self._raced = True
            self._inner.upsert(self._winner_factory(employee_id, work_date))
        return found


def test_duplicate_insert_from_other_process_surfaces_as_state_conflict(attendance_repo, directory, clock, staff, fixed_now):
    repo = RacingAttendanceRepo(
        attendance_repo,
        winner_factory=lambda emp, day: AttendanceRecord(
            attendance_id=None, employee_id=emp, work_date=day, check_in_time=fixed_now.replace(minute=0)
        ),
    )
    service = AttendanceService(repo, directory, clock=clock, locks=KeyedLock())

    with pytest.raises(StateConflict, match="Already checked in"):
        service.check_in(staff["alice"].employee_id, **OFFICE)

    winner = attendance_repo.find_by_employee_and_date(staff["alice"].employee_id, fixed_now.date())
    assert winner.check_in_time == fixed_now.replace(minute=0)


def test_racing_placeholder_row_is_filled_instead_of_rejected(attendance_repo, directory, clock, staff, fixed_now):
    repo = RacingAttendanceRepo(
        attendance_repo,
        winner_factory=lambda emp, day: AttendanceRecord(attendance_id=None, employee_id=emp, work_date=day),
    )
    service = AttendanceService(repo, directory, clock=clock)

    record = service.check_in(staff["alice"].employee_id, **OFFICE)

    assert record.check_in_time == fixed_now
    assert attendance_repo.count_for_employee(staff["alice"].employee_id) == 1


def test_prepare_day_racing_check_in_keeps_single_row(attendance_repo, directory, clock, staff, fixed_now):
    service = AttendanceService(attendance_repo, directory, clock=clock)
    e = staff["alice"].employee_id

    _race([lambda: service.check_in(e, **OFFICE), lambda: service.prepare_day(current_role=Role.ADMIN)])

    assert attendance_repo.count_for_employee(e) == 1
    assert attendance_repo.find_by_employee_and_date(e, fixed_now.date()).check_in_time == fixed_now


def test_keyed_lock_releases_entries():
    locks = KeyedLock()
    with locks.hold((1, "2026-03-02")):
        assert len(locks) == 1
    assert len(locks) == 0


class InterleavingLock(KeyedLock):
    """Runs `before` once, right before the first key is acquired."""

    def __init__(self, before):
        super().__init__()
        self._before = before

    @contextmanager
    def hold(self, key):
        before, self._before = self._before, None
        if before is not None:
            before()
        with super().hold(key):
            yield


def test_correction_sees_check_out_that_lands_before_the_lock(attendance_repo, directory, clock, staff):
    e = staff["alice"].employee_id
    plain = AttendanceService(attendance_repo, directory, clock=clock)
    record = plain.check_in(e, **OFFICE)
    clock.advance(hours=8)
    racing = AttendanceService(
        attendance_repo,
        directory,
        clock=clock,
        locks=InterleavingLock(lambda: plain.check_out(e, latitude=11.0, longitude=107.0, address="Client site")),
    )

    corrected = racing.correct_record(
        current_role=Role.ADMIN,
        attendance_id=record.attendance_id,
        check_in_time=datetime(2026, 3, 2, 8, 0),
        check_out_time=datetime(2026, 3, 2, 17, 0),
    )

    assert corrected.check_out_location is not None
    assert corrected.check_out_location.address == "Client site"
