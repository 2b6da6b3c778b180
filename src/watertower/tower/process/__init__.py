from ..state import SimulationState
from .pump import PumpProcess
from .tank import TankProcess


class TowerProcess:
    def __init__(self, ticks_per_hour: int = 6):
        self.pumps = PumpProcess()
        self.tank = TankProcess(ticks_per_hour=ticks_per_hour)

    def step(self, s: SimulationState) -> None:
        inflow = self.pumps.total_output_lph((s.mechanical, s.electric))
        self.tank.step(s.tower, inflow, s.total_consumption_lph)
