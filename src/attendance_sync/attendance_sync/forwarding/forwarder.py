from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import requests

from ..common.datetime_utils import parse_record_time, to_utc_iso
from ..core.constants import DEFAULT_FORWARD_TIMEOUT_SECONDS, UNKNOWN_NAME
from ..core.exceptions import ForwardFailure
from ..records.model import AttendanceRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForwardResult:
    success: bool
    records_sent: int = 0
    message: Optional[str] = None
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success, "recordsSent": self.records_sent}
        if self.message is not None:
            out["message"] = self.message
        if self.data is not None:
            out["data"] = self.data
        if self.error is not None:
            out["error"] = self.error
        if self.status_code is not None:
            out["statusCode"] = self.status_code
        return out


def to_collector_format(records: Sequence[AttendanceRecord]) -> list[dict[str, Any]]:
    """Map records to the collector's AttendanceRecordDto shape (RecordTime always with .mmm)."""
    return [
        {
            "UserSN": r.user_sn or 0,
            "DeviceUserID": "" if r.device_user_id is None else str(r.device_user_id),
            "UserName": r.name or UNKNOWN_NAME,
            "RecordTime": to_utc_iso(parse_record_time(r.record_time), millis=True),
            "DeviceIP": r.device_ip or "",
            "Type": r.direction or "UNKNOWN",
        }
        for r in records
    ]


class HttpForwarder:
    """Posts newly accepted records to the collector as one JSON array.

    No retries: a failed batch stays in the local store and must be replayed
    from there.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = DEFAULT_FORWARD_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self._endpoint = (endpoint or "").strip()
        self._timeout = float(timeout)
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def enabled(self) -> bool:
        return bool(self._endpoint)

    def forward(self, records: Sequence[AttendanceRecord]) -> ForwardResult:
        if not records:
            logger.info("No records to send to collector")
            return ForwardResult(success=False, message="No records to send")

        logger.info("Sending %d records to %s", len(records), self._endpoint)
        try:
            data = self._post(to_collector_format(records))
        except ForwardFailure as e:
            logger.error("Error sending to collector: %s", e)
            return ForwardResult(success=False, error=str(e), status_code=e.status_code)

        logger.info("Sent %d records to collector", len(records))
        return ForwardResult(success=True, records_sent=len(records), data=data)

    def _post(self, payload: list[dict[str, Any]]) -> Any:
        if not self.enabled:
            raise ForwardFailure("Collector endpoint is not configured")
        try:
            response = self._session.post(
                self._endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ForwardFailure(f"Network error: {e}") from e

        if not 200 <= response.status_code < 300:
            raise ForwardFailure(f"HTTP {response.status_code} - {response.text[:200]}", response.status_code)

        try:
            return response.json()
        except ValueError:
            return response.text
