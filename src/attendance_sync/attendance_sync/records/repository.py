from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import AttendanceRecord


class RecordRepository(Protocol):
    def load(self, day: date) -> Sequence[AttendanceRecord]:
        """Valid records of ``day``; an unreadable file yields an empty list."""

        raise NotImplementedError

    def save(self, day: date, records: Sequence[AttendanceRecord]) -> None:
        """Overwrite the whole day file. Raises StoreWriteFailure."""

        raise NotImplementedError

    def list_days(self) -> Sequence[str]:
        raise NotImplementedError

    def read_day(self, filename: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def delete_day(self, filename: str) -> None:
        raise NotImplementedError
