from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from ..common.datetime_utils import normalize_record_time
from ..core.constants import UNKNOWN_NAME
from ..core.enums import Direction
from ..core.exceptions import MalformedRecord

DeviceUserId = Union[str, int]

_KNOWN_KEYS = {"userSn", "deviceUserId", "recordTime", "name", "type", "deviceIP"}


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công đã được làm giàu dữ liệu.

    ``extra`` keeps passthrough fields of the raw device log so they survive a
    load/save round trip of the day file.
    """

    device_user_id: DeviceUserId
    record_time: str
    device_ip: str
    name: str = UNKNOWN_NAME
    direction: str = Direction.OUT.value
    user_sn: Optional[int] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        if self.user_sn is not None:
            out["userSn"] = self.user_sn
        out.update(
            {
                "deviceUserId": self.device_user_id,
                "recordTime": self.record_time,
                "name": self.name,
                "type": self.direction,
                "deviceIP": self.device_ip,
            }
        )
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttendanceRecord":
        if not isinstance(data, Mapping):
            raise MalformedRecord(f"Expected an object, got {type(data).__name__}")

        user_id = data.get("deviceUserId")
        record_time = data.get("recordTime")
        if user_id is None or user_id == "":
            raise MalformedRecord("deviceUserId is missing")
        if record_time is None or record_time == "":
            raise MalformedRecord("recordTime is missing")

        return cls(
            device_user_id=user_id,
            record_time=normalize_record_time(record_time),
            device_ip=str(data.get("deviceIP") or ""),
            name=data.get("name") or UNKNOWN_NAME,
            direction=str(data.get("type") or Direction.OUT.value),
            user_sn=data.get("userSn"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )
