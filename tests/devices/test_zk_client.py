from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest

from attendance_sync.core.exceptions import DeviceUnreachable
from attendance_sync.devices import zk_client
from attendance_sync.devices.zk_client import ZKTerminalClient


class FakeConn:
    users = 2
    records = 1
    rec_cap = 100000

    def __init__(self):
        self.disconnected = False

    def read_sizes(self):
        return True

    def get_users(self):
        return [
            SimpleNamespace(uid=1, user_id="7", name="Alice", privilege=0, card=0),
            SimpleNamespace(uid=2, user_id="1", name="Boss", privilege=14, card=123),
        ]

    def get_attendance(self):
        return [SimpleNamespace(uid=5, user_id="7", timestamp=datetime(2024, 1, 1, 8, 0), status=1, punch=0)]

    def disconnect(self):
        self.disconnected = True


class FakeZK:
    instances = []

    def __init__(self, ip, port=4370, timeout=60, password=0, force_udp=False, ommit_ping=False):
        self.ip = ip
        self.kwargs = dict(port=port, timeout=timeout, password=password, force_udp=force_udp, ommit_ping=ommit_ping)
        FakeZK.instances.append(self)

    def connect(self):
        if self.ip == "10.0.0.99":
            raise OSError("timed out")
        return FakeConn()


@pytest.fixture(autouse=True)
def fake_zk(monkeypatch):
    FakeZK.instances = []
    monkeypatch.setattr(zk_client, "ZK", FakeZK)


def test_connect_passes_settings_to_pyzk():
    client = ZKTerminalClient(port=4371, connect_timeout_ms=5000, password=12)

    client.connect("10.0.0.1")
    client.connect("10.0.0.1", timeout_ms=1500)

    first, second = FakeZK.instances
    assert first.kwargs == dict(port=4371, timeout=5.0, password=12, force_udp=False, ommit_ping=True)
    assert second.kwargs["timeout"] == 1.5


def test_connect_failure_becomes_device_unreachable():
    with pytest.raises(DeviceUnreachable, match="10.0.0.99:4370"):
        ZKTerminalClient().connect("10.0.0.99")


def test_reads_are_mapped_to_domain_types():
    client = ZKTerminalClient()
    conn = client.connect("10.0.0.1")

    info = client.get_info(conn)
    users = client.get_users(conn)
    logs = client.get_attendance_logs(conn)
    client.disconnect(conn)

    assert info == {"userCounts": 2, "logCounts": 1, "logCapacity": 100000}
    assert [(u.user_id, u.name, u.role, u.is_admin) for u in users] == [("7", "Alice", 0, False), ("1", "Boss", 14, True)]
    (log,) = logs
    assert log.device_user_id == "7"
    assert log.record_time == datetime(2024, 1, 1, 8, 0)
    assert log.user_sn == 5
    assert log.extra == {"status": 1, "punch": 0}
    assert conn.disconnected is True
