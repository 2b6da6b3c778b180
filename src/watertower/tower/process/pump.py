# src/watertower/tower/process/pump.py
from __future__ import annotations

from typing import Iterable

from ..state import PumpState


class PumpProcess:
    """
    Pump actuator rules (no guards).
    Who may toggle and when is decided by the controller / simulator.
    """

    @staticmethod
    def toggle(p: PumpState) -> None:
        p.active = not p.active

    @staticmethod
    def output_lph(p: PumpState) -> int:
        return p.flow_lph if p.active else 0

    def total_output_lph(self, pumps: Iterable[PumpState]) -> int:
        return sum(self.output_lph(p) for p in pumps)
