from __future__ import annotations

from attendance_sync.core.enums import DeviceStatus
from attendance_sync.core.exceptions import DeviceUnreachable
from attendance_sync.devices.fetcher import DeviceFetcher
from attendance_sync.devices.model import RawLog, UserRecord


class FakeTerminalClient:
    def __init__(self, *, users=(), logs=(), info=None, connect_error=None, read_error=None, disconnect_error=None):
        self._users = list(users)
        self._logs = list(logs)
        self._info = info if info is not None else {"userCounts": len(self._users)}
        self._connect_error = connect_error
        self._read_error = read_error
        self._disconnect_error = disconnect_error
        self.connected = []
        self.disconnected = []

    def connect(self, ip, *, timeout_ms=None):
        if self._connect_error:
            raise self._connect_error
        self.connected.append((ip, timeout_ms))
        return f"session-{ip}"

    def get_info(self, session):
        return self._info

    def get_users(self, session):
        if self._read_error:
            raise self._read_error
        return self._users

    def get_attendance_logs(self, session):
        return self._logs

    def disconnect(self, session):
        self.disconnected.append(session)
        if self._disconnect_error:
            raise self._disconnect_error


def test_fetch_enriches_logs_for_in_terminal():
    client = FakeTerminalClient(
        users=[UserRecord(user_id=7, name="Alice", role=0)],
        logs=[RawLog(device_user_id=7, record_time="2024-01-01T08:00:00Z")],
    )
    fetcher = DeviceFetcher(client, in_terminal_ip="10.0.0.1")

    snap = fetcher.fetch("10.0.0.1")

    assert snap.status == DeviceStatus.ONLINE
    assert snap.error is None
    assert [r.to_dict() for r in snap.attendance_logs] == [
        {
            "deviceUserId": 7,
            "name": "Alice",
            "type": "IN",
            "deviceIP": "10.0.0.1",
            "recordTime": "2024-01-01T08:00:00Z",
        }
    ]
    assert client.disconnected == ["session-10.0.0.1"]


def test_fetch_marks_other_terminals_out_and_unknown_names():
    client = FakeTerminalClient(
        users=[UserRecord(user_id="5", name="")],
        logs=[
            RawLog(device_user_id="5", record_time="2024-01-01T09:30:00.250+00:00", user_sn=3, extra={"punch": 1}),
            RawLog(device_user_id="99", record_time="2024-01-01T10:00:00Z"),
        ],
    )
    fetcher = DeviceFetcher(client, in_terminal_ip="10.0.0.1")

    snap = fetcher.fetch("10.0.0.2")

    first, second = snap.attendance_logs
    assert first.direction == "OUT"
    assert first.name == "Unknown"
    assert first.record_time == "2024-01-01T09:30:00.250Z"
    assert first.to_dict()["userSn"] == 3
    assert first.to_dict()["punch"] == 1
    assert second.name == "Unknown"


def test_fetch_selects_admin_users():
    client = FakeTerminalClient(
        users=[
            UserRecord(user_id=1, name="Boss", role=14),
            UserRecord(user_id=2, name="Staff", role=0),
        ]
    )

    snap = DeviceFetcher(client, in_terminal_ip="10.0.0.1").fetch("10.0.0.1")

    assert [u.user_id for u in snap.all_users] == [1, 2]
    assert [u.user_id for u in snap.admin_users] == [1]


def test_connect_failure_returns_offline_snapshot():
    client = FakeTerminalClient(connect_error=DeviceUnreachable("Cannot connect to 10.0.0.9:4370"))

    snap = DeviceFetcher(client, in_terminal_ip="10.0.0.1").fetch("10.0.0.9")

    assert snap.status == DeviceStatus.OFFLINE
    assert snap.error == "Cannot connect to 10.0.0.9:4370"
    assert snap.all_users == () and snap.admin_users == () and snap.attendance_logs == ()
    assert snap.to_dict()["error"] == "Cannot connect to 10.0.0.9:4370"
    assert client.disconnected == []


def test_read_failure_still_disconnects():
    client = FakeTerminalClient(read_error=TimeoutError("timed out"))

    snap = DeviceFetcher(client, in_terminal_ip="10.0.0.1").fetch("10.0.0.1")

    assert snap.status == DeviceStatus.OFFLINE
    assert snap.error == "timed out"
    assert client.disconnected == ["session-10.0.0.1"]


def test_unparseable_timestamp_degrades_device_to_offline():
    client = FakeTerminalClient(logs=[RawLog(device_user_id=1, record_time="yesterday-ish")])

    snap = DeviceFetcher(client, in_terminal_ip="10.0.0.1").fetch("10.0.0.1")

    assert snap.status == DeviceStatus.OFFLINE
    assert "recordTime" in snap.error


def test_disconnect_failure_does_not_change_result():
    client = FakeTerminalClient(
        logs=[RawLog(device_user_id=1, record_time="2024-01-01T08:00:00Z")],
        disconnect_error=OSError("socket closed"),
    )

    snap = DeviceFetcher(client, in_terminal_ip="10.0.0.1").fetch("10.0.0.1")

    assert snap.status == DeviceStatus.ONLINE
    assert len(snap.attendance_logs) == 1


def test_timeout_is_passed_to_client():
    client = FakeTerminalClient()

    DeviceFetcher(client, in_terminal_ip="10.0.0.1", timeout_ms=5000).fetch("10.0.0.1")
    DeviceFetcher(client, in_terminal_ip="10.0.0.1").fetch("10.0.0.2", timeout_ms=1500)

    assert client.connected == [("10.0.0.1", 5000), ("10.0.0.2", 1500)]
