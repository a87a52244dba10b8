from __future__ import annotations

import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Sequence

from ..common.validators import day_filename, require_day_filename
from ..core.constants import RECORD_FILE_PREFIX, RECORD_FILE_SUFFIX
from ..core.exceptions import MalformedRecord, RecordNotFound, StoreWriteFailure, ValidationError
from .model import AttendanceRecord

logger = logging.getLogger(__name__)


class JsonRecordStore:
    """One JSON array per UTC day: ``<data_dir>/attendance_YYYY-MM-DD.json``.

    Every save rewrites the full collection; there is no incremental append.
    """

    def __init__(self, data_dir: str | os.PathLike):
        self._dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._dir

    def path_for(self, day: date) -> Path:
        return self._dir / day_filename(day)

    def load(self, day: date) -> list[AttendanceRecord]:
        return self._load_path(self.path_for(day))

    def save(self, day: date, records: Sequence[AttendanceRecord]) -> None:
        path = self.path_for(day)
        tmp = path.with_name(path.name + ".tmp")
        payload = [r.to_dict() for r in records]
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False, default=str)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            raise StoreWriteFailure(f"Cannot write {path}: {e}") from e
        logger.info("Saved %d records to %s", len(payload), path)

    def list_days(self) -> list[str]:
        if not self._dir.is_dir():
            return []
        names = []
        for p in self._dir.iterdir():
            if not (p.is_file() and p.name.startswith(RECORD_FILE_PREFIX) and p.name.endswith(RECORD_FILE_SUFFIX)):
                continue
            try:
                require_day_filename(p.name)
            except ValidationError:
                continue
            names.append(p.name)
        return sorted(names)

    def read_day(self, filename: str) -> list[AttendanceRecord]:
        path = self._existing_path(filename)
        return self._load_path(path)

    def delete_day(self, filename: str) -> None:
        path = self._existing_path(filename)
        try:
            path.unlink()
        except OSError as e:
            raise StoreWriteFailure(f"Cannot delete {path}: {e}") from e
        logger.info("Deleted %s", path)

    def _existing_path(self, filename: str) -> Path:
        require_day_filename(filename)
        path = self._dir / filename
        if not path.is_file():
            raise RecordNotFound(f"Không tìm thấy file: {filename}")
        return path

    def _load_path(self, path: Path) -> list[AttendanceRecord]:
        if not path.exists():
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Error loading records from %s: %s", path, e)
            return []

        if not isinstance(data, list):
            logger.error("Error loading records from %s: top-level value is not a list", path)
            return []

        records: list[AttendanceRecord] = []
        for i, item in enumerate(data):
            try:
                records.append(AttendanceRecord.from_dict(item))
            except MalformedRecord as e:
                logger.warning("Skipping malformed entry #%d in %s: %s", i, path.name, e)
        return records
