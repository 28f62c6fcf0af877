from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class WorkDuration:
    hours: float
    anomaly: bool = False

    @property
    def minutes(self) -> int:
        return int(round(self.hours * 60))


class WorkDurationCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def duration(self, check_in_time: Optional[datetime], check_out_time: Optional[datetime]) -> Optional[WorkDuration]:
        raise NotImplementedError
