#!/usr/bin/env python3
"""
Operator command sender for a running simulator.

Run:
  watertower-ctl toggle electric
  watertower-ctl --host 10.0.0.5 toggle mechanical
"""
from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional

from paho.mqtt import client as mqtt

from .tower.state import PUMP_NAMES
from .utils import log


def build_command(command: str, target: str, source: str = "CLI") -> Dict[str, Any]:
    return {"command": command, "target": target, "source": source}


def mqtt_publish(host: str, port: int, topic: str, payload: Dict[str, Any], timeout_s: float = 5.0) -> None:
    c = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
    c.connect(host, port, keepalive=30)
    c.loop_start()
    try:
        info = c.publish(topic, json.dumps(payload).encode("utf-8"), qos=0)
        info.wait_for_publish(timeout=timeout_s)
    finally:
        c.loop_stop()
        c.disconnect()


def send_cmd(host: str, port: int, base_topic: str, command: str, target: str) -> Dict[str, Any]:
    topic = f"{base_topic}/control/commands"
    payload = build_command(command, target)
    mqtt_publish(host=host, port=port, topic=topic, payload=payload)
    return payload


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Send control commands to the water tower simulator")
    p.add_argument("--host", default="127.0.0.1", help="MQTT broker host")
    p.add_argument("--port", default=1883, type=int, help="MQTT broker port")
    p.add_argument("--base-topic", default="watertower", help="Base topic")

    sub = p.add_subparsers(dest="action", required=True)
    toggle = sub.add_parser("toggle", help="Toggle a pump on/off")
    toggle.add_argument("pump", choices=PUMP_NAMES)
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)

    if args.action == "toggle":
        payload = send_cmd(args.host, args.port, args.base_topic, "TOGGLE_PUMP", args.pump)
        log(f"[CTL] sent {payload['command']} {payload['target']} to {args.base_topic}/control/commands")


if __name__ == "__main__":
    main()
