from __future__ import annotations

import re
from datetime import date, datetime

from ..core.constants import RECORD_FILE_PREFIX, RECORD_FILE_SUFFIX
from ..core.exceptions import ValidationError

_DAY_FILE_RE = re.compile(
    re.escape(RECORD_FILE_PREFIX) + r"(\d{4}-\d{2}-\d{2})" + re.escape(RECORD_FILE_SUFFIX), re.ASCII
)


def day_filename(day: date) -> str:
    return f"{RECORD_FILE_PREFIX}{day.strftime('%Y-%m-%d')}{RECORD_FILE_SUFFIX}"


def require_day_filename(filename: str) -> date:
    """Validate a bare ``attendance_YYYY-MM-DD.json`` name and return its day.

    Anything with directory parts (``/``, ``\\``, ``..``) fails the pattern.
    """
    if not filename or not filename.strip():
        raise ValidationError("Tên file không hợp lệ")

    m = _DAY_FILE_RE.fullmatch(filename)
    if not m:
        raise ValidationError(f"Tên file không hợp lệ: {filename}")
    try:
        return datetime.strptime(m.group(1), "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Ngày không hợp lệ: {m.group(1)}") from e
