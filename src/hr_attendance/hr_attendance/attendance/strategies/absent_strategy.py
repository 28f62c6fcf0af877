from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """No check-in recorded. Never late."""

    def decide(self, *, check_in_time: Optional[datetime]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)
