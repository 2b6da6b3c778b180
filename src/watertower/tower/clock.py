from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional


VIRTUAL_EPOCH = datetime(2025, 1, 1, 0, 0, 0)


@dataclass
class SimulationClock:
    """Virtual time. Moves only when `advance()` is called, never with the wall clock."""

    current_time: datetime = field(default_factory=lambda: VIRTUAL_EPOCH)
    step_minutes: int = 10

    def advance(self, ticks: int = 1) -> datetime:
        self.current_time += timedelta(minutes=self.step_minutes * ticks)
        return self.current_time

    def minutes_since(self, since: Optional[datetime]) -> float:
        if since is None:
            return 0.0
        return (self.current_time - since).total_seconds() / 60.0

    def hhmm(self) -> str:
        return self.current_time.strftime("%H:%M")
