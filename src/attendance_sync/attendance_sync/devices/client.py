from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import RawLog, UserRecord


class TerminalClient(Protocol):
    """Device SDK seam. Each call may fail independently."""

    def connect(self, ip: str, *, timeout_ms: Optional[int] = None) -> Any:
        raise NotImplementedError

    def get_info(self, session: Any) -> dict[str, Any]:
        raise NotImplementedError

    def get_users(self, session: Any) -> Sequence[UserRecord]:
        raise NotImplementedError

    def get_attendance_logs(self, session: Any) -> Sequence[RawLog]:
        raise NotImplementedError

    def disconnect(self, session: Any) -> None:
        raise NotImplementedError
