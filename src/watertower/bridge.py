# bridge.py
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from aiomqtt import Client, MqttError

from .tower import TowerSimulator
from .tower.state import PUMP_NAMES, SimulationSnapshot
from .utils import log, utc_iso


DEVICES = ("water_tower", "pump_mechanical", "pump_electric")


@dataclass
class BridgeConfig:
    host: str = "127.0.0.1"
    port: int = 1883
    base_topic: str = "watertower"
    retry_s: float = 1.0

    @property
    def control_topic(self) -> str:
        return f"{self.base_topic}/control/commands"

    def telemetry_topic(self, device_id: str) -> str:
        return f"{self.base_topic}/{device_id}/telemetry"


# ============================================================
# Telemetry builders
# ============================================================
def payload_tower(snap: SimulationSnapshot, seq: int, control: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "ts": utc_iso(),
        "device_id": "water_tower",
        "seq": seq,
        "sim_time": snap.sim_time.isoformat(),
        "tower": {
            "status": snap.tower_status,
            "level_liters": snap.level_liters,
            "capacity_liters": snap.capacity_liters,
            "level_pct": round(snap.level_pct, 2),
            "waiting_for_water": snap.waiting_for_water,
        },
        "control": control,
    }


def payload_pump(
    snap: SimulationSnapshot,
    which: str,
    seq: int,
    control: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    if which == "mechanical":
        pump = {"state": "ON" if snap.mechanical_active else "OFF"}
    else:
        pump = {
            "state": "ON" if snap.electric_active else "OFF",
            "mode": snap.electric_mode,
        }
    return {
        "ts": utc_iso(),
        "device_id": f"pump_{which}",
        "seq": seq,
        "sim_time": snap.sim_time.isoformat(),
        "pump": pump,
        "control": control,
    }


def build_payloads(
    snap: SimulationSnapshot,
    seq_map: Dict[str, int],
    control: Optional[Dict[str, Any]] = None,
) -> List[Tuple[str, Dict[str, Any]]]:
    out: List[Tuple[str, Dict[str, Any]]] = []
    for device_id in DEVICES:
        seq_map[device_id] = seq_map.get(device_id, 0) + 1
        if device_id == "water_tower":
            payload = payload_tower(snap, seq_map[device_id], control)
        else:
            payload = payload_pump(snap, device_id[len("pump_"):], seq_map[device_id], control)
        out.append((device_id, payload))
    return out


# ============================================================
# Control handling
# ============================================================
def parse_command(raw: bytes) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(data, dict):
        return None

    cmd = data.get("command")
    target = data.get("target")
    if not isinstance(cmd, str) or not isinstance(target, str):
        return None
    return data


def apply_control(sim: TowerSimulator, data: Dict[str, Any]) -> bool:
    cmd = data.get("command")
    target = data.get("target")

    if cmd == "TOGGLE_PUMP" and target in PUMP_NAMES:
        return sim.toggle_pump(target)
    return False


# ============================================================
# Bridge tasks
# ============================================================
class TowerBridge:
    """
    MQTT side of the simulator:
    - publisher(): pushes telemetry for every snapshot the runner emits
    - control_listener(): applies TOGGLE_PUMP commands to the simulator
    Broker failures are logged and retried; the simulation keeps ticking meanwhile.
    """

    def __init__(self, sim: TowerSimulator, runner, cfg: BridgeConfig | None = None):
        self.sim = sim
        self.runner = runner
        self.cfg = cfg or BridgeConfig()
        self.last_command: Optional[Dict[str, Any]] = None
        self.seq_map: Dict[str, int] = {d: 0 for d in DEVICES}

    def handle_message(self, raw: bytes) -> bool:
        data = parse_command(raw)
        if data is None:
            return False

        self.last_command = {
            "ts": utc_iso(),
            "source": data.get("source", "HMI"),
            "command": data.get("command"),
            "target": data.get("target"),
        }
        return apply_control(self.sim, data)

    async def publisher(self, stop_event: asyncio.Event) -> None:
        q = self.runner.subscribe()

        while not stop_event.is_set():
            try:
                async with Client(hostname=self.cfg.host, port=self.cfg.port) as client:
                    log(f"[PUB] connected mqtt://{self.cfg.host}:{self.cfg.port}")

                    while not stop_event.is_set():
                        try:
                            snap: SimulationSnapshot = await asyncio.wait_for(q.get(), timeout=0.5)
                        except asyncio.TimeoutError:
                            continue

                        for device_id, payload in build_payloads(snap, self.seq_map, self.last_command):
                            await client.publish(
                                self.cfg.telemetry_topic(device_id),
                                json.dumps(payload).encode("utf-8"),
                                qos=0,
                            )

            except MqttError as e:
                log(f"[PUB] MQTT error: {repr(e)} retry {self.cfg.retry_s}s")
                await asyncio.sleep(self.cfg.retry_s)

    async def control_listener(self, stop_event: asyncio.Event) -> None:
        topic = self.cfg.control_topic

        while not stop_event.is_set():
            try:
                async with Client(hostname=self.cfg.host, port=self.cfg.port) as client:
                    await client.subscribe(topic)
                    log(f"[CTL] subscribed {topic}")

                    async for msg in client.messages:
                        if stop_event.is_set():
                            break
                        if not isinstance(msg.payload, (bytes, bytearray)):
                            continue
                        self.handle_message(bytes(msg.payload))

            except MqttError as e:
                log(f"[CTL] MQTT error: {repr(e)} retry {self.cfg.retry_s}s")
                await asyncio.sleep(self.cfg.retry_s)
