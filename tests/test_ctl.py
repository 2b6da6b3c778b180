import json

import pytest

from watertower import ctl
from watertower.bridge import parse_command


class FakeInfo:
    def wait_for_publish(self, timeout=None):
        return None


class FakePahoClient:
    instances = []

    def __init__(self, *args, **kwargs):
        self.calls = []
        FakePahoClient.instances.append(self)

    def connect(self, host, port, keepalive=60):
        self.calls.append(("connect", host, port))

    def loop_start(self):
        self.calls.append(("loop_start",))

    def loop_stop(self):
        self.calls.append(("loop_stop",))

    def publish(self, topic, payload, qos=0):
        self.calls.append(("publish", topic, json.loads(payload)))
        return FakeInfo()

    def disconnect(self):
        self.calls.append(("disconnect",))


@pytest.fixture
def paho(monkeypatch):
    FakePahoClient.instances = []
    monkeypatch.setattr(ctl.mqtt, "Client", FakePahoClient)
    return FakePahoClient


def test_command_is_understood_by_bridge():
    raw = json.dumps(ctl.build_command("TOGGLE_PUMP", "electric")).encode("utf-8")
    data = parse_command(raw)
    assert data == {"command": "TOGGLE_PUMP", "target": "electric", "source": "CLI"}


def test_toggle_publishes_to_control_topic(paho):
    ctl.main(["--host", "broker", "--port", "1884", "--base-topic", "wt", "toggle", "electric"])

    calls = paho.instances[0].calls
    assert calls[0] == ("connect", "broker", 1884)
    assert ("publish", "wt/control/commands", {"command": "TOGGLE_PUMP", "target": "electric", "source": "CLI"}) in calls
    assert calls[-1] == ("disconnect",)


def test_unknown_pump_rejected():
    with pytest.raises(SystemExit):
        ctl.parse_args(["toggle", "diesel"])
