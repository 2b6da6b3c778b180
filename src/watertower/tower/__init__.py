from .clock import SimulationClock, VIRTUAL_EPOCH
from .controller import ControllerConfig, ElectricPumpController, TowerController
from .simulation import TowerSimulator
from .state import (
    ConsumerState,
    ElectricPumpState,
    PumpState,
    SimulationSnapshot,
    SimulationState,
    TowerConfig,
    TowerState,
)

__all__ = [
    "ConsumerState",
    "ControllerConfig",
    "ElectricPumpController",
    "ElectricPumpState",
    "PumpState",
    "SimulationClock",
    "SimulationSnapshot",
    "SimulationState",
    "TowerConfig",
    "TowerController",
    "TowerSimulator",
    "TowerState",
    "VIRTUAL_EPOCH",
]
