from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Iterable, Optional, Sequence

from ..core.constants import COMBINED_INFO_TYPE
from ..devices.fetcher import DeviceFetcher
from ..devices.model import CombinedSnapshot, DeviceSnapshot, UserRecord

logger = logging.getLogger(__name__)


def dedupe_users(users: Iterable[UserRecord]) -> tuple[UserRecord, ...]:
    """Unique by user_id; the last occurrence wins, first-seen order is kept."""
    by_id: dict = {}
    for u in users:
        by_id[u.user_id] = u
    return tuple(by_id.values())


class BatchAggregator:
    """Fans a fetch out to every terminal and settles all of them.

    A fetch that raises or is still running at the deadline becomes an offline
    snapshot; the remaining terminals are unaffected.
    """

    def __init__(self, fetcher: DeviceFetcher, *, deadline_seconds: Optional[float] = None):
        self._fetcher = fetcher
        self._deadline = deadline_seconds

    def fetch_all(self, ips: Sequence[str]) -> dict[str, DeviceSnapshot]:
        ips = list(dict.fromkeys(ips))
        if not ips:
            return {}

        pool = ThreadPoolExecutor(max_workers=len(ips), thread_name_prefix="terminal-fetch")
        futures: dict[str, Future] = {}
        try:
            for ip in ips:
                futures[ip] = pool.submit(self._fetcher.fetch, ip)
            _, pending = wait(futures.values(), timeout=self._deadline)
        finally:
            # a hung terminal thread is left behind rather than blocking the cycle
            pool.shutdown(wait=False, cancel_futures=True)

        results: dict[str, DeviceSnapshot] = {}
        for ip, fut in futures.items():
            if fut in pending:
                logger.warning("Fetch from %s did not finish within %ss", ip, self._deadline)
                results[ip] = DeviceSnapshot.offline(ip, f"Timed out after {self._deadline}s")
                continue
            exc = fut.exception()
            if exc is not None:
                logger.warning("Fetch from %s raised: %s", ip, exc)
                results[ip] = DeviceSnapshot.offline(ip, str(exc))
            else:
                results[ip] = fut.result()
        return results

    @staticmethod
    def combine(snapshots: Iterable[DeviceSnapshot]) -> CombinedSnapshot:
        users: list[UserRecord] = []
        admins: list[UserRecord] = []
        logs = []
        for s in snapshots:
            users.extend(s.all_users)
            admins.extend(s.admin_users)
            logs.extend(s.attendance_logs)

        return CombinedSnapshot(
            info={"type": COMBINED_INFO_TYPE, "userCounts": len(users), "logCount": len(logs)},
            all_users=dedupe_users(users),
            admin_users=dedupe_users(admins),
            attendance_logs=tuple(logs),
        )
