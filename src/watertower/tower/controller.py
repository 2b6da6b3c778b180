# tower/controller.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .clock import SimulationClock
from .process.pump import PumpProcess
from .state import SimulationState


@dataclass
class ControllerConfig:
    # =========================
    # Electric pump thermal cycle (virtual minutes)
    # =========================
    overheat_after_min: float = 180.0   # continuous running before forced stop
    cooldown_min: float = 60.0          # rest after overheat before READY again

    def __post_init__(self) -> None:
        if self.overheat_after_min <= 0 or self.cooldown_min < 0:
            raise ValueError("overheat_after_min must be positive and cooldown_min non-negative")


class ElectricPumpController:
    """
    Overheat/cooldown timing layered on top of the electric PumpState.
    - Toggling is allowed only in READY.
    - OVERHEATED always means the pump is off.
    """

    def __init__(self, cfg: ControllerConfig | None = None):
        self.cfg = cfg or ControllerConfig()

    def toggle(self, s: SimulationState, clock: SimulationClock) -> bool:
        if s.electric_ctl.mode != "READY":
            return False

        PumpProcess.toggle(s.electric)
        if s.electric.active:
            s.electric_ctl.active_since = clock.current_time
        return True

    def evaluate(self, s: SimulationState, clock: SimulationClock) -> Optional[str]:
        ctl = s.electric_ctl

        if s.electric.active and ctl.mode == "READY":
            if clock.minutes_since(ctl.active_since) >= self.cfg.overheat_after_min:
                s.electric.active = False
                ctl.mode = "OVERHEATED"
                ctl.overheated_since = clock.current_time
                return "overheated"

        if ctl.mode == "OVERHEATED":
            if clock.minutes_since(ctl.overheated_since) >= self.cfg.cooldown_min:
                ctl.mode = "READY"
                return "cooled_down"

        return None


class TowerController:
    """
    Auto rules, evaluated after the water balance of the tick:
    - tower empty and mechanical off -> both pumps on, waiting flag raised
    - tower full and mechanical on  -> both pumps off, waiting flag cleared
    The electric pump only follows while READY (OVERHEATED keeps it off).
    - electric pump overheat/cooldown timers
    """

    def __init__(self, cfg: ControllerConfig | None = None):
        self.cfg = cfg or ControllerConfig()
        self.electric = ElectricPumpController(self.cfg)

    # ======================================================
    # MAIN ENTRY
    # ======================================================
    def compute(self, s: SimulationState, clock: SimulationClock) -> List[str]:
        events: List[str] = []

        if self._auto_start(s, clock):
            events.append("auto_start")
        if self._auto_stop(s, clock):
            events.append("auto_stop")

        thermal = self.electric.evaluate(s, clock)
        if thermal:
            events.append(thermal)

        return events

    # ======================================================
    # Auto start / stop (both pumps move together)
    # ======================================================
    def _auto_start(self, s: SimulationState, clock: SimulationClock) -> bool:
        if s.tower.level_liters > 0 or s.mechanical.active:
            return False

        PumpProcess.toggle(s.mechanical)
        if not s.electric.active:
            self.electric.toggle(s, clock)
        s.waiting_for_water = True
        return True

    def _auto_stop(self, s: SimulationState, clock: SimulationClock) -> bool:
        if s.tower.level_liters < s.tower.capacity_liters or not s.mechanical.active:
            return False

        PumpProcess.toggle(s.mechanical)
        if s.electric.active:
            self.electric.toggle(s, clock)
        s.waiting_for_water = False
        return True
