from __future__ import annotations

from enum import Enum


class DeviceStatus(str, Enum):
    """Trạng thái kết nối của một máy chấm công trong chu kỳ gần nhất."""

    ONLINE = "online"
    OFFLINE = "offline"
    INITIALIZING = "initializing"


class Direction(str, Enum):
    """Hướng ra/vào, suy ra từ máy chấm công sinh ra bản ghi."""

    IN = "IN"
    OUT = "OUT"
