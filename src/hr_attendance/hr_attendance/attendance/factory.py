from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ..core.constants import LATE_CUTOFF
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy, StatusDecision
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the status strategy for a check-in time."""

    cutoff: time = LATE_CUTOFF

    def for_check_in(self, check_in_time: Optional[datetime]) -> AttendanceStrategy:
        if check_in_time is None:
            return AbsentStrategy()
        # strictly after: 09:00:00 is on time, 09:00:01 is late
        if check_in_time.time() > self.cutoff:
            return LateStrategy(self.cutoff)
        return PresentStrategy()

    def decide(self, check_in_time: Optional[datetime]) -> StatusDecision:
        return self.for_check_in(check_in_time).decide(check_in_time=check_in_time)

    def status_of(self, record: Optional[AttendanceRecord]) -> AttendanceStatus:
        if record is None:
            return AttendanceStatus.ABSENT
        return self.decide(record.check_in_time).status

    def is_late(self, record: Optional[AttendanceRecord]) -> bool:
        return self.status_of(record) == AttendanceStatus.LATE
