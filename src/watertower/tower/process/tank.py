# src/watertower/tower/process/tank.py
from __future__ import annotations

from ..state import TowerState, clamp


class TankProcess:
    def __init__(self, ticks_per_hour: int = 6):
        self.ticks_per_hour = ticks_per_hour

    def step(self, tower: TowerState, inflow_lph: int, consumption_lph: int) -> None:
        net_flow = inflow_lph - consumption_lph

        if net_flow == 0:
            # balanced tick: level and status untouched
            return

        if net_flow > 0:
            # net already subtracted demand, add it back to get gross pump output
            self.add_water(tower, (net_flow + consumption_lph) // self.ticks_per_hour)
        else:
            self.remove_water(tower, -net_flow // self.ticks_per_hour)

    @staticmethod
    def add_water(tower: TowerState, amount: int) -> None:
        tower.level_liters = clamp(tower.level_liters + amount, 0, tower.capacity_liters)
        tower.status = "FULL" if tower.level_liters >= tower.capacity_liters else "FILLING"

    @staticmethod
    def remove_water(tower: TowerState, amount: int) -> None:
        tower.level_liters = clamp(tower.level_liters - amount, 0, tower.capacity_liters)
        tower.status = "EMPTY" if tower.level_liters == 0 else "DESCENDING"
