from __future__ import annotations

from datetime import date, datetime

import pytest

from src.hr_attendance.hr_attendance.core.enums import LeaveStatus, LeaveType, Role
from src.hr_attendance.hr_attendance.core.exceptions import AuthorizationError, NotFound, StateConflict, ValidationError
from src.hr_attendance.hr_attendance.leaves.service import LeaveService

REASON = "Family event out of town"


@pytest.fixture
def service(leaves_repo, directory, clock):
    return LeaveService(leaves_repo, directory, clock=clock)


def _submit(service, employee, **overrides):
    fields = dict(
        current_role=Role.EMPLOYEE,
        employee_id=employee.employee_id,
        leave_type=LeaveType.VACATION,
        start_date=date(2026, 3, 10),
        end_date=date(2026, 3, 12),
        reason=REASON,
    )
    fields.update(overrides)
    return service.submit(**fields)


def test_submit_creates_pending_with_inclusive_days(service, staff, fixed_now):
    leave = _submit(service, staff["alice"])

    assert leave.status == LeaveStatus.PENDING
    assert leave.days == 3
    assert leave.approver_id is None
    assert leave.created_at == fixed_now


def test_single_day_leave_counts_one_day(service, staff):
    leave = _submit(service, staff["alice"], start_date=date(2026, 3, 2), end_date=date(2026, 3, 2))

    assert leave.days == 1


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"start_date": date(2026, 3, 1)}, "past"),
        ({"end_date": date(2026, 3, 9)}, "End date"),
        ({"reason": "too short"}, "at least 10"),
        ({"reason": "x" * 1001}, "at most 1000"),
        ({"reason": "  "}, "required"),
    ],
)
def test_submit_validation(service, staff, overrides, message):
    with pytest.raises(ValidationError, match=message):
        _submit(service, staff["alice"], **overrides)


def test_submit_is_for_employees_only(service, staff):
    with pytest.raises(AuthorizationError):
        _submit(service, staff["admin"], current_role=Role.ADMIN)


def test_approve_stamps_approver_and_time(service, staff, clock):
    leave = _submit(service, staff["alice"])
    clock.set(datetime(2026, 3, 3, 10, 0))

    approved = service.approve(current_role=Role.ADMIN, approver_id=staff["admin"].employee_id, leave_id=leave.leave_id)

    assert approved.status == LeaveStatus.APPROVED
    assert approved.approver_id == staff["admin"].employee_id
    assert approved.approved_at == datetime(2026, 3, 3, 10, 0)
    assert service.get(leave.leave_id) == approved


@pytest.mark.parametrize("action, status", [("reject", LeaveStatus.REJECTED), ("cancel", LeaveStatus.CANCELLED)])
def test_reject_and_cancel_do_not_stamp(service, staff, action, status):
    leave = _submit(service, staff["alice"])

    decided = getattr(service, action)(current_role=Role.ADMIN, approver_id=staff["admin"].employee_id, leave_id=leave.leave_id)

    assert decided.status == status
    assert decided.approver_id is None
    assert decided.approved_at is None


def test_decisions_only_from_pending(service, staff):
    leave = _submit(service, staff["alice"])
    admin_id = staff["admin"].employee_id
    service.reject(current_role=Role.ADMIN, approver_id=admin_id, leave_id=leave.leave_id)

    with pytest.raises(StateConflict, match="already rejected"):
        service.approve(current_role=Role.ADMIN, approver_id=admin_id, leave_id=leave.leave_id)


def test_decisions_require_admin_and_existing_leave(service, staff):
    leave = _submit(service, staff["alice"])

    with pytest.raises(AuthorizationError):
        service.approve(current_role=Role.EMPLOYEE, approver_id=staff["alice"].employee_id, leave_id=leave.leave_id)
    with pytest.raises(NotFound):
        service.approve(current_role=Role.ADMIN, approver_id=staff["admin"].employee_id, leave_id=404)


def test_update_to_non_approved_clears_stamp(service, staff):
    admin_id = staff["admin"].employee_id
    leave = _submit(service, staff["alice"])
    service.approve(current_role=Role.ADMIN, approver_id=admin_id, leave_id=leave.leave_id)

    updated = service.update(
        current_role=Role.ADMIN,
        approver_id=admin_id,
        leave_id=leave.leave_id,
        employee_id=staff["alice"].employee_id,
        leave_type=LeaveType.SICK,
        start_date=date(2026, 3, 10),
        end_date=date(2026, 3, 15),
        reason="Flu",
        status=LeaveStatus.PENDING,
    )

    assert updated.status == LeaveStatus.PENDING
    assert updated.approver_id is None
    assert updated.approved_at is None
    assert updated.days == 6


def test_update_keeps_existing_approval_stamp(service, staff, clock, fixed_now):
    admin_id = staff["admin"].employee_id
    leave = _submit(service, staff["alice"])
    approved = service.approve(current_role=Role.ADMIN, approver_id=admin_id, leave_id=leave.leave_id)
    clock.advance(days=1)

    updated = service.update(
        current_role=Role.ADMIN,
        approver_id=admin_id,
        leave_id=leave.leave_id,
        employee_id=staff["alice"].employee_id,
        leave_type=LeaveType.VACATION,
        start_date=date(2026, 3, 10),
        end_date=date(2026, 3, 11),
        reason=REASON,
        status=LeaveStatus.APPROVED,
        notes="shortened",
    )

    assert updated.approved_at == approved.approved_at == fixed_now
    assert updated.notes == "shortened"


def test_admin_create_approved_is_stamped(service, staff, fixed_now):
    leave = service.create_for_employee(
        current_role=Role.ADMIN,
        approver_id=staff["admin"].employee_id,
        employee_id=staff["bob"].employee_id,
        leave_type=LeaveType.UNPAID,
        start_date=date(2026, 2, 20),
        end_date=date(2026, 2, 21),
        reason="Backfilled",
        status=LeaveStatus.APPROVED,
    )

    assert leave.approver_id == staff["admin"].employee_id
    assert leave.approved_at == fixed_now


def test_owner_deletes_only_pending(service, staff):
    admin_id = staff["admin"].employee_id
    pending = _submit(service, staff["alice"])
    decided = _submit(service, staff["alice"])
    service.approve(current_role=Role.ADMIN, approver_id=admin_id, leave_id=decided.leave_id)

    service.delete_own_pending(employee_id=staff["alice"].employee_id, leave_id=pending.leave_id)

    with pytest.raises(NotFound):
        service.get(pending.leave_id)
    with pytest.raises(StateConflict):
        service.delete_own_pending(employee_id=staff["alice"].employee_id, leave_id=decided.leave_id)


def test_cannot_delete_someone_elses_leave(service, staff):
    leave = _submit(service, staff["alice"])

    with pytest.raises(NotFound):
        service.delete_own_pending(employee_id=staff["bob"].employee_id, leave_id=leave.leave_id)


def test_history_and_report_counts(service, staff):
    admin_id = staff["admin"].employee_id
    alice = staff["alice"]
    a = _submit(service, alice, start_date=date(2026, 3, 10), end_date=date(2026, 3, 12))
    b = _submit(service, alice, start_date=date(2026, 4, 1), end_date=date(2026, 4, 1))
    _submit(service, alice, start_date=date(2026, 5, 4), end_date=date(2026, 5, 8))
    service.approve(current_role=Role.ADMIN, approver_id=admin_id, leave_id=a.leave_id)
    service.reject(current_role=Role.ADMIN, approver_id=admin_id, leave_id=b.leave_id)

    counts = service.history(alice.employee_id).counts
    assert (counts.total, counts.pending, counts.approved, counts.rejected) == (3, 1, 1, 1)
    assert counts.approved_days == 3

    report = service.leave_report(alice.employee_id, start_date=date(2026, 4, 1))
    assert [l.leave_id for l in report.leaves] == [3, 2]


def test_list_all_groups_by_status(service, staff):
    leave = _submit(service, staff["alice"])
    _submit(service, staff["bob"])
    service.cancel(current_role=Role.ADMIN, approver_id=staff["admin"].employee_id, leave_id=leave.leave_id)

    data = service.list_all()

    assert len(data["groups"]["pending"]) == 1
    assert len(data["groups"]["cancelled"]) == 1
    assert data["groups"]["approved"] == []
    assert data["counts"].total == 2
