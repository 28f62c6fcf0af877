from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Check-in strictly after the cutoff."""

    def __init__(self, cutoff: time):
        self._cutoff = cutoff

    def decide(self, *, check_in_time: Optional[datetime]) -> StatusDecision:
        note = None
        if check_in_time is not None:
            cutoff_at = datetime.combine(check_in_time.date(), self._cutoff)
            late_minutes = int((check_in_time - cutoff_at).total_seconds() // 60)
            note = f"Late by {late_minutes} min"
        return StatusDecision(status=AttendanceStatus.LATE, note=note)
