"""
Tests for the ticker runner and the simulator command line.
"""
import asyncio

import pytest

from watertower.runner import RunnerConfig, TowerRunner, build_config, parse_args, run_headless
from watertower.tower import VIRTUAL_EPOCH


class TestTowerRunner:

    def test_tickers_drive_simulation(self, sim):
        async def scenario():
            runner = TowerRunner(sim, RunnerConfig(step_period_s=0.01, clock_period_s=0.01))
            q = runner.subscribe()
            runner.start()
            assert runner.running

            snaps = [await asyncio.wait_for(q.get(), timeout=2.0) for _ in range(3)]
            await runner.stop()
            assert not runner.running
            return snaps

        snaps = asyncio.run(scenario())
        assert sim.state.tick_n >= 3
        assert sim.clock.current_time > VIRTUAL_EPOCH
        assert [s.level_liters for s in snaps] == [43, 36, 29]

    def test_start_twice_keeps_one_pair_of_tickers(self, sim):
        async def scenario():
            runner = TowerRunner(sim, RunnerConfig(step_period_s=10.0, clock_period_s=10.0))
            runner.start()
            first = list(runner._tasks)
            runner.start()
            same = runner._tasks == first
            await runner.stop()
            return same

        assert asyncio.run(scenario())

    def test_stop_before_start(self, sim):
        runner = TowerRunner(sim)
        asyncio.run(runner.stop())
        assert not runner.running

    def test_full_queue_drops_snapshots(self, sim):
        async def scenario():
            runner = TowerRunner(sim, RunnerConfig(max_queue=1))
            q = runner.subscribe()
            runner._publish(sim.step())
            runner._publish(sim.step())
            return q.qsize(), q.get_nowait().level_liters

        size, level = asyncio.run(scenario())
        assert size == 1
        assert level == 43

    def test_invalid_periods(self):
        with pytest.raises(ValueError):
            RunnerConfig(step_period_s=0)


class TestCommandLine:

    def test_defaults(self):
        cfg = build_config(parse_args([]))
        assert cfg.capacity_liters == 1000
        assert cfg.initial_level_liters == 50
        assert cfg.consumers_lph == [25, 20]

    def test_consumer_list(self):
        cfg = build_config(parse_args(["--consumers", "10, 20,30"]))
        assert cfg.consumers_lph == [10, 20, 30]

    def test_headless_run(self):
        snap = run_headless(parse_args(["--ticks", "8", "--quiet"]))
        assert snap.level_liters == 0
        assert snap.tower_status == "EMPTY"
        assert snap.mechanical_active
        assert snap.electric_active
        assert snap.waiting_for_water
