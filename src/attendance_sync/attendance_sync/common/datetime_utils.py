from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any

from ..core.exceptions import MalformedRecord

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def utc_day(now: datetime | None = None) -> date:
    """UTC calendar date used to partition the record store."""
    return (now or now_utc()).astimezone(timezone.utc).date()


def parse_record_time(value: Any) -> datetime:
    """Parse a device/stored timestamp into an aware UTC datetime.

    Naive values are device-clock times and are read as local time of this host.
    Integers are epoch milliseconds.
    """
    if value is None or value == "":
        raise MalformedRecord("recordTime is missing")

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return _EPOCH + timedelta(milliseconds=value)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as e:
            raise MalformedRecord(f"recordTime không hợp lệ: {value!r}") from e
    else:
        raise MalformedRecord(f"recordTime không hợp lệ: {value!r}")

    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(timezone.utc)


def to_utc_iso(dt: datetime, *, millis: bool = False) -> str:
    """Format as ISO-8601 UTC with a trailing Z.

    Milliseconds are written only when present, or always with ``millis=True``.
    """
    dt = dt.astimezone(timezone.utc)
    base = dt.strftime("%Y-%m-%dT%H:%M:%S")
    if millis or dt.microsecond:
        return f"{base}.{dt.microsecond // 1000:03d}Z"
    return f"{base}Z"


def normalize_record_time(value: Any) -> str:
    return to_utc_iso(parse_record_time(value))


def epoch_millis(value: Any) -> int:
    return (parse_record_time(value) - _EPOCH) // _ONE_MS
