from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import to_utc_iso
from ..devices.model import CombinedSnapshot, DeviceSnapshot
from ..forwarding.forwarder import ForwardResult


@dataclass(frozen=True)
class SyncSnapshot:
    """Latest per-terminal and combined view, swapped in as one object."""

    device_snapshots: Mapping[str, DeviceSnapshot]
    combined: CombinedSnapshot
    synced_at: Optional[datetime] = None


@dataclass(frozen=True)
class CycleResult:
    device_snapshots: Mapping[str, DeviceSnapshot]
    combined_snapshot: CombinedSnapshot
    new_records_count: int = 0
    total_records: int = 0
    forward: Optional[ForwardResult] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    reason: str = "manual"
    error: Optional[str] = None
    new_records: tuple = field(default=(), repr=False)

    @property
    def api_sent(self) -> bool:
        return bool(self.forward and self.forward.success)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "deviceData": {ip: s.to_dict() for ip, s in self.device_snapshots.items()},
            "combinedData": self.combined_snapshot.to_dict(),
            "newRecordsCount": self.new_records_count,
            "totalRecords": self.total_records,
            "apiSent": self.api_sent,
            "forward": self.forward.to_dict() if self.forward else None,
            "reason": self.reason,
            "startedAt": to_utc_iso(self.started_at) if self.started_at else None,
            "finishedAt": to_utc_iso(self.finished_at) if self.finished_at else None,
        }
        if self.error is not None:
            out["error"] = self.error
        return out
