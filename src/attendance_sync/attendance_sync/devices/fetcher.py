from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ..common.datetime_utils import normalize_record_time
from ..core.constants import UNKNOWN_NAME
from ..core.enums import DeviceStatus, Direction
from ..records.model import AttendanceRecord
from .client import TerminalClient
from .model import DeviceSnapshot, RawLog, UserRecord

logger = logging.getLogger(__name__)


class DeviceFetcher:
    """Reads one terminal per call and never raises.

    Any failure (connect, read, timestamp parse) comes back as an offline
    snapshot carrying the error message.
    """

    def __init__(self, client: TerminalClient, *, in_terminal_ip: str, timeout_ms: Optional[int] = None):
        self._client = client
        self._in_terminal_ip = in_terminal_ip
        self._timeout_ms = timeout_ms

    def direction_for(self, ip: str) -> Direction:
        return Direction.IN if ip == self._in_terminal_ip else Direction.OUT

    def fetch(self, ip: str, *, timeout_ms: Optional[int] = None) -> DeviceSnapshot:
        session = None
        try:
            session = self._client.connect(ip, timeout_ms=timeout_ms or self._timeout_ms)

            info = self._client.get_info(session) or {}
            users = tuple(self._client.get_users(session) or ())
            logs = self._client.get_attendance_logs(session) or ()

            names = {str(u.user_id): u.name for u in users}
            records = tuple(self.enrich(ip, logs, names))

            logger.info("Fetched %s: users=%d logs=%d", ip, len(users), len(records))
            return DeviceSnapshot(
                device_ip=ip,
                status=DeviceStatus.ONLINE,
                info=dict(info),
                all_users=users,
                admin_users=filter_admins(users),
                attendance_logs=records,
            )
        except Exception as e:
            logger.warning("Error fetching from %s: %s", ip, e)
            return DeviceSnapshot.offline(ip, str(e))
        finally:
            if session is not None:
                self._disconnect(ip, session)

    def enrich(self, ip: str, logs: Iterable[RawLog], names: dict[str, str]) -> Iterable[AttendanceRecord]:
        direction = self.direction_for(ip).value
        for log in logs:
            yield AttendanceRecord(
                device_user_id=log.device_user_id,
                record_time=normalize_record_time(log.record_time),
                device_ip=ip,
                name=names.get(str(log.device_user_id)) or UNKNOWN_NAME,
                direction=direction,
                user_sn=log.user_sn,
                extra=dict(log.extra),
            )

    def _disconnect(self, ip: str, session: Any) -> None:
        try:
            self._client.disconnect(session)
        except Exception as e:
            logger.warning("Disconnect from %s failed: %s", ip, e)


def filter_admins(users: Iterable[UserRecord]) -> tuple[UserRecord, ...]:
    return tuple(u for u in users if u.is_admin)
