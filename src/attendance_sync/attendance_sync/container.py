from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType

from .core.constants import (
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_DEVICE_PORT,
    DEFAULT_FORWARD_TIMEOUT_SECONDS,
    DEFAULT_OPERATION_TIMEOUT_MS,
    DEFAULT_SYNC_INTERVAL_MINUTES,
)
from .devices.client import TerminalClient
from .devices.fetcher import DeviceFetcher
from .devices.zk_client import ZKTerminalClient
from .forwarding.forwarder import HttpForwarder
from .records.json_record_store import JsonRecordStore
from .sync.aggregator import BatchAggregator
from .sync.scheduler import SyncScheduler
from .sync.service import SyncService

# connect + info/users/logs reads, plus slack
_READS_PER_FETCH = 3


@dataclass(frozen=True)
class Container:
    client: TerminalClient
    store: JsonRecordStore
    fetcher: DeviceFetcher
    aggregator: BatchAggregator
    forwarder: HttpForwarder

    sync_service: SyncService
    scheduler: SyncScheduler


def fetch_deadline_seconds(connect_timeout_ms: int, operation_timeout_ms: int) -> float:
    return (connect_timeout_ms + _READS_PER_FETCH * operation_timeout_ms) / 1000 + 1


def build_container(settings: ModuleType, *, client: TerminalClient | None = None) -> Container:
    connect_ms = int(getattr(settings, "CONNECT_TIMEOUT_MS", DEFAULT_CONNECT_TIMEOUT_MS))
    operation_ms = int(getattr(settings, "OPERATION_TIMEOUT_MS", DEFAULT_OPERATION_TIMEOUT_MS))
    terminals = list(getattr(settings, "TERMINALS"))

    client = client or ZKTerminalClient(
        port=int(getattr(settings, "DEVICE_PORT", DEFAULT_DEVICE_PORT)),
        connect_timeout_ms=connect_ms,
        password=int(getattr(settings, "DEVICE_PASSWORD", 0)),
        force_udp=bool(getattr(settings, "DEVICE_FORCE_UDP", False)),
        ommit_ping=bool(getattr(settings, "DEVICE_OMIT_PING", True)),
    )
    store = JsonRecordStore(getattr(settings, "DATA_DIR"))
    fetcher = DeviceFetcher(client, in_terminal_ip=str(getattr(settings, "IN_TERMINAL_IP")))
    aggregator = BatchAggregator(fetcher, deadline_seconds=fetch_deadline_seconds(connect_ms, operation_ms))
    forwarder = HttpForwarder(
        str(getattr(settings, "COLLECTOR_URL", "") or ""),
        timeout=float(getattr(settings, "FORWARD_TIMEOUT_SECONDS", DEFAULT_FORWARD_TIMEOUT_SECONDS)),
    )

    sync_service = SyncService(terminals=terminals, aggregator=aggregator, store=store, forwarder=forwarder)
    scheduler = SyncScheduler(
        sync_service,
        interval_minutes=int(getattr(settings, "SYNC_INTERVAL_MINUTES", DEFAULT_SYNC_INTERVAL_MINUTES)),
        initial_delay_seconds=getattr(settings, "INITIAL_SYNC_DELAY_SECONDS", 2),
    )

    return Container(
        client=client,
        store=store,
        fetcher=fetcher,
        aggregator=aggregator,
        forwarder=forwarder,
        sync_service=sync_service,
        scheduler=scheduler,
    )
