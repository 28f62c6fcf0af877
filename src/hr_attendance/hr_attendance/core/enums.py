from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class EmploymentType(str, Enum):
    EMPLOYEE = "employee"
    STUDENT = "student"


class ArchiveState(str, Enum):
    """Soft-delete state. Archived employees are hidden but restorable."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class AttendanceStatus(str, Enum):
    """Derived status of one employee on one day."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class AttendanceState(str, Enum):
    """Daily check-in/check-out lifecycle."""

    NO_RECORD = "no_record"
    CHECKED_IN = "checked_in"
    COMPLETE = "complete"


class StatusFilter(str, Enum):
    """Filter for the admin daily listing."""

    ALL = "all"
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class LeaveType(str, Enum):
    VACATION = "vacation"
    SICK = "sick"
    PERSONAL = "personal"
    UNPAID = "unpaid"


class LeaveStatus(str, Enum):
    """Leave request workflow status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
