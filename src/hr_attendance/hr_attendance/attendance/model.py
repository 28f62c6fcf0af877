from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceState


@dataclass(frozen=True)
class GeoLocation:
    """Client-supplied position. The address is opaque text."""

    latitude: float
    longitude: float
    address: str

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude, "address": self.address}

    @classmethod
    def from_columns(cls, latitude, longitude, address) -> Optional["GeoLocation"]:
        if latitude is None or longitude is None:
            return None
        return cls(latitude=float(latitude), longitude=float(longitude), address=address or "")


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee on one calendar day.

    A row without check_in_time is an "expected absent" placeholder.
    """

    attendance_id: Optional[int]
    employee_id: int
    work_date: date
    check_in_time: Optional[datetime] = None
    check_in_location: Optional[GeoLocation] = None
    check_out_time: Optional[datetime] = None
    check_out_location: Optional[GeoLocation] = None
    notes: Optional[str] = None

    @property
    def state(self) -> AttendanceState:
        if self.check_in_time is None:
            return AttendanceState.NO_RECORD
        if self.check_out_time is None:
            return AttendanceState.CHECKED_IN
        return AttendanceState.COMPLETE

    @property
    def is_present(self) -> bool:
        return self.check_in_time is not None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "work_date": self.work_date.isoformat(),
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_in_location": self.check_in_location.to_dict() if self.check_in_location else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "check_out_location": self.check_out_location.to_dict() if self.check_out_location else None,
            "notes": self.notes,
            "state": self.state.value,
        }
