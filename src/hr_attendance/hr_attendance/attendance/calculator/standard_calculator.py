from __future__ import annotations

from datetime import datetime
from typing import Optional

from .base import WorkDuration, WorkDurationCalculator


class StandardWorkDurationCalculator(WorkDurationCalculator):
    """Standard rule: out - in as one real-valued difference, in hours.

    A checkout earlier than the check-in (clock skew, manual entry) is
    clamped to zero and flagged instead of going negative.
    """

    def duration(self, check_in_time: Optional[datetime], check_out_time: Optional[datetime]) -> Optional[WorkDuration]:
        if not check_in_time or not check_out_time:
            return None
        seconds = (check_out_time - check_in_time).total_seconds()
        if seconds < 0:
            return WorkDuration(hours=0.0, anomaly=True)
        return WorkDuration(hours=seconds / 3600)
