from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional


TowerStatus = Literal["FULL", "EMPTY", "FILLING", "DESCENDING"]
ElectricMode = Literal["READY", "OVERHEATED"]

PUMP_NAMES = ("mechanical", "electric")


# default clamp function
def clamp(x: int, lo: int, hi: int) -> int:
    return lo if x < lo else hi if x > hi else x


@dataclass
class TowerConfig:
    capacity_liters: int = 1000
    initial_level_liters: int = 50

    mechanical_flow_lph: int = 80
    electric_flow_lph: int = 80

    consumers_lph: List[int] = field(default_factory=lambda: [25, 20])

    # one tick = 10 virtual minutes -> rates per hour are divided by 6
    tick_minutes: int = 10

    def __post_init__(self) -> None:
        if self.capacity_liters <= 0:
            raise ValueError(f"capacity_liters must be positive, got {self.capacity_liters}")
        if not 0 <= self.initial_level_liters <= self.capacity_liters:
            raise ValueError(
                f"initial_level_liters must be within 0..{self.capacity_liters}, "
                f"got {self.initial_level_liters}"
            )
        if self.mechanical_flow_lph < 0 or self.electric_flow_lph < 0:
            raise ValueError("pump flow rates must be non-negative")
        if any(rate < 0 for rate in self.consumers_lph):
            raise ValueError("consumer rates must be non-negative")
        if self.tick_minutes <= 0 or 60 % self.tick_minutes != 0:
            raise ValueError(f"tick_minutes must divide an hour, got {self.tick_minutes}")

    @property
    def ticks_per_hour(self) -> int:
        return 60 // self.tick_minutes


@dataclass
class TowerState:
    capacity_liters: int = 1000
    level_liters: int = 50
    status: TowerStatus = "DESCENDING"


@dataclass
class PumpState:
    flow_lph: int = 80
    active: bool = False


@dataclass
class ElectricPumpState:
    mode: ElectricMode = "READY"
    active_since: Optional[datetime] = None
    overheated_since: Optional[datetime] = None


@dataclass(frozen=True)
class ConsumerState:
    consumption_lph: int


@dataclass
class SimulationState:
    tower: TowerState = field(default_factory=TowerState)

    # pumps
    mechanical: PumpState = field(default_factory=PumpState)
    electric: PumpState = field(default_factory=PumpState)
    electric_ctl: ElectricPumpState = field(default_factory=ElectricPumpState)

    consumers: List[ConsumerState] = field(default_factory=list)
    total_consumption_lph: int = 0  # summed once at build time

    # "where is my water?" flag for display
    waiting_for_water: bool = False

    tick_n: int = 0

    @classmethod
    def from_config(cls, cfg: TowerConfig) -> "SimulationState":
        consumers = [ConsumerState(rate) for rate in cfg.consumers_lph]
        return cls(
            tower=TowerState(
                capacity_liters=cfg.capacity_liters,
                level_liters=cfg.initial_level_liters,
            ),
            mechanical=PumpState(flow_lph=cfg.mechanical_flow_lph),
            electric=PumpState(flow_lph=cfg.electric_flow_lph),
            consumers=consumers,
            total_consumption_lph=sum(c.consumption_lph for c in consumers),
        )

    def pump(self, which: str) -> PumpState:
        if which == "mechanical":
            return self.mechanical
        if which == "electric":
            return self.electric
        raise ValueError(f"unknown pump {which!r}, expected one of {PUMP_NAMES}")


@dataclass(frozen=True)
class SimulationSnapshot:
    tower_status: TowerStatus
    level_liters: int
    capacity_liters: int
    mechanical_active: bool
    electric_active: bool
    electric_mode: ElectricMode
    waiting_for_water: bool
    sim_time: datetime

    @property
    def level_pct(self) -> float:
        return 100.0 * self.level_liters / self.capacity_liters

    def to_dict(self) -> dict:
        return {
            "tower_status": self.tower_status,
            "level_liters": self.level_liters,
            "capacity_liters": self.capacity_liters,
            "level_pct": round(self.level_pct, 2),
            "mechanical_active": self.mechanical_active,
            "electric_active": self.electric_active,
            "electric_mode": self.electric_mode,
            "waiting_for_water": self.waiting_for_water,
            "sim_time": self.sim_time.isoformat(),
        }
