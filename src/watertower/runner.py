#!/usr/bin/env python3
# runner.py
from __future__ import annotations

import argparse
import asyncio
import signal
from dataclasses import dataclass
from typing import List, Optional

from .bridge import BridgeConfig, TowerBridge
from .tower import TowerConfig, TowerSimulator
from .tower.state import SimulationSnapshot
from .utils import log


# ============================================================
# Config
# ============================================================
@dataclass
class RunnerConfig:
    # real seconds between ticks
    step_period_s: float = 1.0
    clock_period_s: float = 1.0

    max_queue: int = 1000

    def __post_init__(self) -> None:
        if self.step_period_s <= 0 or self.clock_period_s <= 0:
            raise ValueError("ticker periods must be positive")


# ============================================================
# Tickers
# ============================================================
class TowerRunner:
    """
    Drives a TowerSimulator with two independent periodic tickers on one event loop:
    - clock ticker: advances virtual time
    - step ticker: water balance + control
    Both handlers are synchronous, so a tick always runs to completion before the next one.
    Subscribers receive a snapshot after every step.
    """

    def __init__(self, sim: TowerSimulator, cfg: RunnerConfig | None = None):
        self.sim = sim
        self.cfg = cfg or RunnerConfig()
        self._subs: List[asyncio.Queue] = []
        self._tasks: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def subscribe(self) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue(maxsize=self.cfg.max_queue)
        self._subs.append(q)
        return q

    def start(self) -> None:
        if self.running:
            return
        # clock ticker first: with equal periods the clock moves before the step reads it
        self._tasks = [
            asyncio.create_task(self._clock_ticker()),
            asyncio.create_task(self._step_ticker()),
        ]
        log(
            f"[RUN] started step_period={self.cfg.step_period_s}s "
            f"clock_period={self.cfg.clock_period_s}s"
        )

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            log("[RUN] stopped")

    async def _clock_ticker(self) -> None:
        while True:
            await asyncio.sleep(self.cfg.clock_period_s)
            self.sim.advance_clock()

    async def _step_ticker(self) -> None:
        while True:
            await asyncio.sleep(self.cfg.step_period_s)
            snap = self.sim.step()
            self._publish(snap)

    def _publish(self, snap: SimulationSnapshot) -> None:
        for q in self._subs:
            try:
                q.put_nowait(snap)
            except asyncio.QueueFull:
                # slow subscriber misses this snapshot
                pass


# ============================================================
# Main
# ============================================================
def install_signal_handlers(stop_event: asyncio.Event) -> None:
    def _handler(*_):
        stop_event.set()

    try:
        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
    except ValueError:
        # not in the main thread
        pass


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Water tower simulator (two pumps, fixed consumers) + MQTT bridge")
    p.add_argument("--host", default="127.0.0.1", help="MQTT broker host")
    p.add_argument("--port", default=1883, type=int, help="MQTT broker port")
    p.add_argument("--base-topic", default="watertower", help="Base topic")

    p.add_argument("--step-period", type=float, default=1.0, help="Real seconds between simulation steps")
    p.add_argument("--clock-period", type=float, default=1.0, help="Real seconds between clock ticks")

    p.add_argument("--capacity", type=int, default=1000, help="Tower capacity, liters")
    p.add_argument("--initial-level", type=int, default=50, help="Initial water level, liters")
    p.add_argument("--mechanical-flow", type=int, default=80, help="Mechanical pump flow, L/h")
    p.add_argument("--electric-flow", type=int, default=80, help="Electric pump flow, L/h")
    p.add_argument(
        "--consumers",
        default="25,20",
        help="Comma-separated consumer demands, L/h",
    )

    p.add_argument("--ticks", type=int, default=0, help="Run N ticks headless and exit (no tickers, no MQTT)")
    p.add_argument("--no-mqtt", action="store_true", help="Run tickers without the MQTT bridge")
    p.add_argument("--quiet", action="store_true", help="Do not log simulation events")
    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> TowerConfig:
    consumers = [int(c) for c in args.consumers.split(",") if c.strip()]
    return TowerConfig(
        capacity_liters=args.capacity,
        initial_level_liters=args.initial_level,
        mechanical_flow_lph=args.mechanical_flow,
        electric_flow_lph=args.electric_flow,
        consumers_lph=consumers,
    )


async def run(args: argparse.Namespace) -> None:
    stop_event = asyncio.Event()
    install_signal_handlers(stop_event)

    sim = TowerSimulator(build_config(args), verbose=not args.quiet)
    runner = TowerRunner(sim, RunnerConfig(step_period_s=args.step_period, clock_period_s=args.clock_period))

    tasks: List[asyncio.Task] = []
    if not args.no_mqtt:
        bridge = TowerBridge(sim, runner, BridgeConfig(host=args.host, port=args.port, base_topic=args.base_topic))
        tasks.append(asyncio.create_task(bridge.publisher(stop_event)))
        tasks.append(asyncio.create_task(bridge.control_listener(stop_event)))
        log(f"[MAIN] mqtt://{args.host}:{args.port} base_topic={args.base_topic}")
        log(f"[MAIN] control topic: {args.base_topic}/control/commands")

    runner.start()

    while not stop_event.is_set():
        await asyncio.sleep(0.2)

    await runner.stop()
    for t in tasks:
        t.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


def run_headless(args: argparse.Namespace) -> SimulationSnapshot:
    sim = TowerSimulator(build_config(args), verbose=not args.quiet)
    snap = sim.run_ticks(args.ticks)
    log(
        f"[MAIN] {snap.sim_time:%Y-%m-%d %H:%M} status={snap.tower_status} "
        f"level={snap.level_liters}/{snap.capacity_liters} L "
        f"mechanical={'ON' if snap.mechanical_active else 'OFF'} "
        f"electric={'ON' if snap.electric_active else 'OFF'} ({snap.electric_mode})"
    )
    return snap


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    if args.ticks > 0:
        run_headless(args)
        return
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
