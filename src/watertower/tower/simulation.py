# tower/simulation.py
from __future__ import annotations

from typing import Optional

from ..utils import log
from .clock import SimulationClock
from .controller import ControllerConfig, TowerController
from .process import TowerProcess
from .process.pump import PumpProcess
from .state import SimulationSnapshot, SimulationState, TowerConfig


class TowerSimulator:
    """
    Owns the whole simulation state and exposes:
    - step(): one water-balance + control evaluation (no clock movement)
    - advance_clock(): one virtual clock tick
    - tick(): advance_clock() then step(), the deterministic pairing used headless
    - toggle_pump(which): manual control
    - snapshot(): read-only view for display layers
    """

    def __init__(
        self,
        cfg: TowerConfig | None = None,
        controller_cfg: ControllerConfig | None = None,
        state: Optional[SimulationState] = None,
        clock: Optional[SimulationClock] = None,
        verbose: bool = True,
    ):
        self.cfg = cfg or TowerConfig()
        self.state = state or SimulationState.from_config(self.cfg)
        self.clock = clock or SimulationClock(step_minutes=self.cfg.tick_minutes)
        self.controller = TowerController(controller_cfg)
        self.process = TowerProcess(ticks_per_hour=self.cfg.ticks_per_hour)
        self.verbose = verbose

    def step(self) -> SimulationSnapshot:
        s = self.state
        s.tick_n += 1

        # 1) Water balance for the tick
        self.process.step(s)

        # 2) Auto start/stop on the fresh level, then electric pump timers
        for event in self.controller.compute(s, self.clock):
            self._log_event(event)

        return self.snapshot()

    def advance_clock(self) -> None:
        self.clock.advance()

    def tick(self) -> SimulationSnapshot:
        self.advance_clock()
        return self.step()

    def run_ticks(self, n: int) -> SimulationSnapshot:
        snap = self.snapshot()
        for _ in range(n):
            snap = self.tick()
        return snap

    # ======================================================
    # Manual control
    # ======================================================
    def toggle_pump(self, which: str) -> bool:
        pump = self.state.pump(which)

        if which == "mechanical":
            PumpProcess.toggle(pump)
            changed = True
        else:
            changed = self.controller.electric.toggle(self.state, self.clock)

        if self.verbose:
            if changed:
                log(f"[SIM] manual toggle {which} -> {'ON' if pump.active else 'OFF'}")
            else:
                log(f"[SIM] manual toggle {which} ignored ({self.state.electric_ctl.mode})")
        return changed

    def snapshot(self) -> SimulationSnapshot:
        s = self.state
        return SimulationSnapshot(
            tower_status=s.tower.status,
            level_liters=s.tower.level_liters,
            capacity_liters=s.tower.capacity_liters,
            mechanical_active=s.mechanical.active,
            electric_active=s.electric.active,
            electric_mode=s.electric_ctl.mode,
            waiting_for_water=s.waiting_for_water,
            sim_time=self.clock.current_time,
        )

    def _log_event(self, event: str) -> None:
        if not self.verbose:
            return
        s = self.state
        at = self.clock.hhmm()
        if event == "auto_start":
            log(f"[SIM] {at} tower empty, pumps started (electric={'ON' if s.electric.active else 'OFF'})")
        elif event == "auto_stop":
            log(f"[SIM] {at} tower full ({s.tower.level_liters} L), pumps stopped")
        elif event == "overheated":
            log(f"[SIM] {at} electric pump overheated, forced OFF")
        elif event == "cooled_down":
            log(f"[SIM] {at} electric pump cooled down, READY")
