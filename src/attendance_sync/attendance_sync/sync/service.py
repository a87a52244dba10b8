from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_utc, to_utc_iso, utc_day
from ..common.validators import day_filename, require_day_filename
from ..core.exceptions import StoreWriteFailure
from ..devices.model import CombinedSnapshot, DeviceSnapshot
from ..forwarding.forwarder import ForwardResult, HttpForwarder
from ..records.model import AttendanceRecord
from ..records.repository import RecordRepository
from ..records.signature import SignatureIndex, compute_signature
from .aggregator import BatchAggregator
from .model import CycleResult, SyncSnapshot
from .state import PipelineState

logger = logging.getLogger(__name__)

CYCLE_IN_PROGRESS = "Sync already in progress"


class SyncService:
    """Poll, dedup, persist and forward, one cycle at a time.

    ``run_cycle`` never raises: refusals and unexpected failures come back as a
    CycleResult with ``error`` set.
    """

    def __init__(
        self,
        *,
        terminals: Sequence[str],
        aggregator: BatchAggregator,
        store: RecordRepository,
        forwarder: Optional[HttpForwarder] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._aggregator = aggregator
        self._store = store
        self._forwarder = forwarder
        self._clock = clock
        self._state = PipelineState.initial(terminals)

    @property
    def state(self) -> PipelineState:
        return self._state

    def initialize(self) -> int:
        """Load today's day file and rebuild the signature index from it."""
        with self._state.cycle_lock:
            self._load_day(utc_day(self._clock()))
        return len(self._state.records)

    # ------------------------------------------------
    # Cycle
    # ------------------------------------------------
    def run_cycle(self, reason: str = "manual") -> CycleResult:
        state = self._state
        if not state.cycle_lock.acquire(blocking=False):
            logger.warning("Skipping %s sync: another cycle is still running", reason)
            return self._refused(reason, CYCLE_IN_PROGRESS)

        try:
            result = self._run_cycle_locked(reason)
            state.last_result = result
        except Exception as e:
            logger.exception("Sync cycle (%s) failed", reason)
            result = self._refused(reason, str(e))
        finally:
            state.cycle_lock.release()
        return result

    def _run_cycle_locked(self, reason: str) -> CycleResult:
        state = self._state
        started = self._clock()
        logger.info("Starting %s sync of %d terminals", reason, len(state.terminals))

        self._roll_day_if_needed(started)

        snapshots = self._aggregator.fetch_all(state.terminals)
        combined = self._aggregator.combine(snapshots.values())

        previous = list(state.records)
        new_records: list[AttendanceRecord] = []
        new_signatures: list[str] = []
        for record in combined.attendance_logs:
            sig = compute_signature(record)
            if state.index.is_known(sig):
                continue
            state.index.mark_known(sig)
            state.records.append(record)
            new_records.append(record)
            new_signatures.append(sig)

        state.latest = SyncSnapshot(device_snapshots=snapshots, combined=combined, synced_at=started)

        forward: Optional[ForwardResult] = None
        if new_records:
            try:
                self._persist()
                forward = self._forward(new_records)
            except Exception:
                # unaccept the batch so the next cycle picks it up again
                for sig in new_signatures:
                    state.index.forget(sig)
                state.records = previous
                raise
            logger.info("Added %d new attendance records (total %d)", len(new_records), len(state.records))
        else:
            logger.info("No new records found. Nothing to send")

        return CycleResult(
            device_snapshots=snapshots,
            combined_snapshot=combined,
            new_records_count=len(new_records),
            total_records=len(state.records),
            forward=forward,
            started_at=started,
            finished_at=self._clock(),
            reason=reason,
            new_records=tuple(new_records),
        )

    def _refused(self, reason: str, error: str) -> CycleResult:
        latest = self._state.latest
        return CycleResult(
            device_snapshots=latest.device_snapshots,
            combined_snapshot=latest.combined,
            total_records=len(self._state.records),
            started_at=self._clock(),
            reason=reason,
            error=error,
        )

    # ------------------------------------------------
    # Store
    # ------------------------------------------------
    def _load_day(self, day: date) -> None:
        index = SignatureIndex()
        records: list[AttendanceRecord] = []
        for r in self._store.load(day):
            sig = compute_signature(r)
            if index.is_known(sig):
                continue
            index.mark_known(sig)
            records.append(r)

        self._state.index = index
        self._state.records = records
        self._state.day = day
        logger.info("Loaded %d unique records from %s", len(records), day_filename(day))

    def _roll_day_if_needed(self, now: datetime) -> None:
        """Switch to a new day file at UTC midnight, keeping known signatures.

        Terminals return their whole log buffer, so dropping yesterday's
        signatures would re-accept and re-forward every record still on them.
        """
        state = self._state
        today = utc_day(now)
        if state.day == today:
            return
        if state.day is None:
            self._load_day(today)
            return

        logger.info("Day changed %s -> %s, switching record file", state.day, today)
        records: list[AttendanceRecord] = []
        seen: set[str] = set()
        for r in self._store.load(today):
            sig = compute_signature(r)
            if sig in seen:
                continue
            seen.add(sig)
            state.index.mark_known(sig)
            records.append(r)
        state.records = records
        state.day = today

    def _persist(self) -> None:
        state = self._state
        day = state.day or utc_day(self._clock())

        present = {compute_signature(r) for r in state.records}
        merged = 0
        for r in self._store.load(day):
            sig = compute_signature(r)
            if sig in present:
                continue
            present.add(sig)
            state.index.mark_known(sig)
            state.records.append(r)
            merged += 1
        if merged:
            logger.warning("Merged %d records found on disk but not in memory", merged)

        try:
            self._store.save(day, state.records)
        except StoreWriteFailure as e:
            # in-memory state stays authoritative; the next save rewrites everything
            logger.error("Error saving records locally: %s", e)

    def _forward(self, new_records: Sequence[AttendanceRecord]) -> Optional[ForwardResult]:
        if self._forwarder is None or not self._forwarder.enabled:
            logger.info("Collector forwarding disabled, %d records kept locally", len(new_records))
            return None

        result = self._forwarder.forward(new_records)
        if result.success:
            logger.info("Sent %d records to collector", result.records_sent)
        else:
            logger.error("Failed to send to collector: %s", result.error or result.message)
        return result

    # ------------------------------------------------
    # Readers
    # ------------------------------------------------
    def get_latest_snapshot(self) -> CombinedSnapshot:
        return self._state.latest.combined

    def get_device_snapshots(self) -> dict[str, DeviceSnapshot]:
        return dict(self._state.latest.device_snapshots)

    def get_records(self) -> list[AttendanceRecord]:
        return list(self._state.records)

    def list_stored_days(self) -> list[str]:
        return list(self._store.list_days())

    def read_day(self, filename: str) -> list[AttendanceRecord]:
        return list(self._store.read_day(filename))

    def delete_day(self, filename: str) -> None:
        """Delete a day file. If it is the loaded day, its records leave memory too.

        Signatures stay known so the same logs are not pulled back in from the
        terminals' buffers.
        """
        day = require_day_filename(filename)
        with self._state.cycle_lock:
            self._store.delete_day(filename)
            if self._state.day == day:
                self._state.records = []

    def status(self) -> dict[str, Any]:
        state = self._state
        latest = state.latest
        forwarder = self._forwarder
        return {
            "status": "running",
            "timestamp": to_utc_iso(self._clock()),
            "lastSync": to_utc_iso(latest.synced_at) if latest.synced_at else None,
            "cycleInProgress": state.cycle_in_progress,
            "devices": {ip: s.status.value for ip, s in latest.device_snapshots.items()},
            "dataStats": {
                "totalRecords": len(state.records),
                "uniqueSignatures": len(state.index),
                "storeFile": day_filename(state.day) if state.day else None,
            },
            "collector": {
                "endpoint": forwarder.endpoint if forwarder else None,
                "enabled": bool(forwarder and forwarder.enabled),
            },
        }
