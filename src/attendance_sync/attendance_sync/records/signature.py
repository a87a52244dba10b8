from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from ..common.datetime_utils import epoch_millis
from .model import AttendanceRecord

RecordLike = Union[AttendanceRecord, Mapping[str, Any]]


def compute_signature(record: RecordLike) -> str:
    """``deviceIP_deviceUserId_epochMillis`` identity of an attendance event."""
    if isinstance(record, AttendanceRecord):
        ip, user_id, record_time = record.device_ip, record.device_user_id, record.record_time
    else:
        ip, user_id, record_time = record.get("deviceIP"), record.get("deviceUserId"), record.get("recordTime")
    return f"{ip}_{user_id}_{epoch_millis(record_time)}"


class SignatureIndex:
    """Set of signatures already accepted into the store."""

    def __init__(self, signatures: Iterable[str] = ()):
        self._known: set[str] = set(signatures)

    def is_known(self, signature: str) -> bool:
        return signature in self._known

    def mark_known(self, signature: str) -> None:
        self._known.add(signature)

    def forget(self, signature: str) -> None:
        self._known.discard(signature)

    def __contains__(self, signature: object) -> bool:
        return signature in self._known

    def __len__(self) -> int:
        return len(self._known)
