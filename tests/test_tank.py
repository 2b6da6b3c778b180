"""
Tests for the tower fill/drain rules.
"""
import pytest

from watertower.tower.process.tank import TankProcess
from watertower.tower.state import TowerState


class TestTankProcess:

    @pytest.fixture
    def tower(self):
        return TowerState(capacity_liters=1000, level_liters=50)

    def test_initial_state(self, tower):
        assert tower.level_liters == 50
        assert tower.status == "DESCENDING"

    def test_add_water_fills(self, tower):
        TankProcess.add_water(tower, 13)
        assert tower.level_liters == 63
        assert tower.status == "FILLING"

    def test_add_water_clamps_at_capacity(self, tower):
        TankProcess.add_water(tower, 5000)
        assert tower.level_liters == 1000
        assert tower.status == "FULL"

    def test_remove_water_clamps_at_zero(self, tower):
        TankProcess.remove_water(tower, 70)
        assert tower.level_liters == 0
        assert tower.status == "EMPTY"

    def test_remove_water_descends(self, tower):
        TankProcess.remove_water(tower, 7)
        assert tower.level_liters == 43
        assert tower.status == "DESCENDING"

    def test_gross_inflow_when_net_positive(self, tower):
        # 80 in, 45 out -> net 35 > 0 -> gains (35 + 45) // 6
        TankProcess(ticks_per_hour=6).step(tower, inflow_lph=80, consumption_lph=45)
        assert tower.level_liters == 63

    def test_loss_is_truncated(self, tower):
        TankProcess(ticks_per_hour=6).step(tower, inflow_lph=0, consumption_lph=45)
        assert tower.level_liters == 43

    def test_zero_net_flow_keeps_status(self, tower):
        TankProcess.add_water(tower, 10)
        TankProcess(ticks_per_hour=6).step(tower, inflow_lph=45, consumption_lph=45)
        assert tower.level_liters == 60
        assert tower.status == "FILLING"

    def test_small_drain_still_descends(self):
        tower = TowerState(capacity_liters=1000, level_liters=500, status="FILLING")
        # net -5 L/h truncates to 0 L per tick, still a drain
        TankProcess(ticks_per_hour=6).step(tower, inflow_lph=40, consumption_lph=45)
        assert tower.level_liters == 500
        assert tower.status == "DESCENDING"

    def test_status_is_sticky_between_boundaries(self):
        tower = TowerState(capacity_liters=100, level_liters=95)
        TankProcess.add_water(tower, 10)
        assert tower.status == "FULL"
        TankProcess.remove_water(tower, 1)
        assert tower.level_liters == 99
        assert tower.status == "DESCENDING"
