from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..core.constants import ADMIN_ROLE, COMBINED_DEVICE_IP, COMBINED_INFO_TYPE
from ..core.enums import DeviceStatus
from ..records.model import AttendanceRecord, DeviceUserId


@dataclass(frozen=True)
class UserRecord:
    """A row of the terminal's user table."""

    user_id: DeviceUserId
    name: str = ""
    role: int = 0
    uid: Optional[int] = None
    card_no: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "userId": self.user_id,
            "name": self.name,
            "role": self.role,
            "cardno": self.card_no,
        }


@dataclass(frozen=True)
class RawLog:
    """Attendance log exactly as read from a terminal, before enrichment.

    Every field except the user id and time is optional; ``extra`` carries
    anything else the SDK reports (punch, status, ...).
    """

    device_user_id: DeviceUserId
    record_time: Any
    user_sn: Optional[int] = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeviceSnapshot:
    """Per-terminal result of one fetch cycle. Replaced wholesale, never mutated."""

    device_ip: str
    status: DeviceStatus
    info: dict[str, Any] = field(default_factory=dict)
    all_users: tuple[UserRecord, ...] = ()
    admin_users: tuple[UserRecord, ...] = ()
    attendance_logs: tuple[AttendanceRecord, ...] = ()
    error: Optional[str] = None

    @classmethod
    def offline(cls, device_ip: str, error: str) -> "DeviceSnapshot":
        return cls(device_ip=device_ip, status=DeviceStatus.OFFLINE, error=error or "Unknown error")

    @classmethod
    def initializing(cls, device_ip: str) -> "DeviceSnapshot":
        return cls(device_ip=device_ip, status=DeviceStatus.INITIALIZING)

    def to_dict(self) -> dict[str, Any]:
        out = {
            "info": dict(self.info),
            "allUsers": [u.to_dict() for u in self.all_users],
            "adminUsers": [u.to_dict() for u in self.admin_users],
            "attendanceLogs": [r.to_dict() for r in self.attendance_logs],
            "deviceIP": self.device_ip,
            "status": self.status.value,
        }
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class CombinedSnapshot:
    """Merged view over all terminals of one cycle."""

    info: dict[str, Any] = field(default_factory=dict)
    all_users: tuple[UserRecord, ...] = ()
    admin_users: tuple[UserRecord, ...] = ()
    attendance_logs: tuple[AttendanceRecord, ...] = ()

    @classmethod
    def empty(cls) -> "CombinedSnapshot":
        return cls(info={"type": COMBINED_INFO_TYPE, "userCounts": 0, "logCount": 0})

    def to_dict(self) -> dict[str, Any]:
        return {
            "info": dict(self.info),
            "allUsers": [u.to_dict() for u in self.all_users],
            "adminUsers": [u.to_dict() for u in self.admin_users],
            "attendanceLogs": [r.to_dict() for r in self.attendance_logs],
            "deviceIP": COMBINED_DEVICE_IP,
            "status": DeviceStatus.ONLINE.value,
        }
