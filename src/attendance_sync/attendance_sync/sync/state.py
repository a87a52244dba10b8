from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from ..devices.model import CombinedSnapshot, DeviceSnapshot
from ..records.model import AttendanceRecord
from ..records.signature import SignatureIndex
from .model import CycleResult, SyncSnapshot


@dataclass
class PipelineState:
    """All long-lived mutable state of the pipeline.

    Only a running cycle (holding ``cycle_lock``) mutates ``records`` and
    ``index``; readers take ``latest`` by reference.
    """

    terminals: tuple[str, ...]
    latest: SyncSnapshot
    index: SignatureIndex = field(default_factory=SignatureIndex)
    records: list[AttendanceRecord] = field(default_factory=list)
    day: Optional[date] = None
    last_result: Optional[CycleResult] = None
    cycle_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def initial(cls, terminals: Sequence[str]) -> "PipelineState":
        snapshots = {ip: DeviceSnapshot.initializing(ip) for ip in terminals}
        return cls(
            terminals=tuple(terminals),
            latest=SyncSnapshot(device_snapshots=snapshots, combined=CombinedSnapshot.empty()),
        )

    @property
    def cycle_in_progress(self) -> bool:
        return self.cycle_lock.locked()
