from __future__ import annotations

import logging
from typing import Any, Optional

from zk import ZK
from zk.exception import ZKError

from ..core.constants import DEFAULT_CONNECT_TIMEOUT_MS, DEFAULT_DEVICE_PORT
from ..core.exceptions import DeviceUnreachable
from .model import RawLog, UserRecord

logger = logging.getLogger(__name__)


class ZKTerminalClient:
    """TerminalClient backed by pyzk.

    pyzk applies one socket timeout to connect and to every read, so only the
    connect timeout is passed here; reads are bounded by the aggregator deadline.
    """

    def __init__(
        self,
        *,
        port: int = DEFAULT_DEVICE_PORT,
        connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS,
        password: int = 0,
        force_udp: bool = False,
        ommit_ping: bool = True,
    ):
        self._port = int(port)
        self._timeout_ms = int(connect_timeout_ms)
        self._password = int(password)
        self._force_udp = bool(force_udp)
        self._ommit_ping = bool(ommit_ping)

    def connect(self, ip: str, *, timeout_ms: Optional[int] = None) -> Any:
        seconds = (timeout_ms or self._timeout_ms) / 1000
        logger.debug("Connecting to %s:%d (timeout %.1fs)", ip, self._port, seconds)
        zk = ZK(
            ip,
            port=self._port,
            timeout=seconds,
            password=self._password,
            force_udp=self._force_udp,
            ommit_ping=self._ommit_ping,
        )
        try:
            conn = zk.connect()
        except (ZKError, OSError) as e:
            raise DeviceUnreachable(f"Cannot connect to {ip}:{self._port} - {e}") from e
        if not conn:
            raise DeviceUnreachable(f"Cannot connect to {ip}:{self._port}")
        return conn

    def get_info(self, session: Any) -> dict[str, Any]:
        try:
            session.read_sizes()
        except (ZKError, OSError) as e:
            raise DeviceUnreachable(f"read_sizes failed: {e}") from e
        return {
            "userCounts": getattr(session, "users", 0),
            "logCounts": getattr(session, "records", 0),
            "logCapacity": getattr(session, "rec_cap", 0),
        }

    def get_users(self, session: Any) -> list[UserRecord]:
        try:
            users = session.get_users() or []
        except (ZKError, OSError) as e:
            raise DeviceUnreachable(f"get_users failed: {e}") from e
        return [
            UserRecord(
                user_id=u.user_id,
                name=getattr(u, "name", "") or "",
                role=int(getattr(u, "privilege", 0) or 0),
                uid=getattr(u, "uid", None),
                card_no=getattr(u, "card", None),
            )
            for u in users
        ]

    def get_attendance_logs(self, session: Any) -> list[RawLog]:
        try:
            logs = session.get_attendance() or []
        except (ZKError, OSError) as e:
            raise DeviceUnreachable(f"get_attendance failed: {e}") from e
        return [
            RawLog(
                device_user_id=a.user_id,
                record_time=a.timestamp,
                user_sn=getattr(a, "uid", None),
                extra={"status": getattr(a, "status", None), "punch": getattr(a, "punch", None)},
            )
            for a in logs
        ]

    def disconnect(self, session: Any) -> None:
        session.disconnect()
