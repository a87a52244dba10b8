from __future__ import annotations

import pytest

from attendance_sync.devices.model import CombinedSnapshot
from attendance_sync.sync.model import CycleResult
from attendance_sync.sync.scheduler import SyncScheduler


class FakeService:
    def __init__(self):
        self.reasons = []

    def run_cycle(self, reason="manual"):
        self.reasons.append(reason)
        return CycleResult(device_snapshots={}, combined_snapshot=CombinedSnapshot.empty(), reason=reason)


def test_trigger_runs_the_same_cycle():
    service = FakeService()
    scheduler = SyncScheduler(service, initial_delay_seconds=None)

    result = scheduler.trigger("force")

    assert service.reasons == ["force"]
    assert result.reason == "force"


def test_interval_dividing_an_hour_is_pinned_to_the_clock():
    scheduler = SyncScheduler(FakeService(), interval_minutes=30, initial_delay_seconds=None)

    scheduler.install_jobs()

    jobs = scheduler._scheduler.jobs
    assert len(jobs) == 2
    assert sorted(j.at_time.minute for j in jobs) == [0, 30]
    assert scheduler.next_run() is not None


def test_other_intervals_repeat_relative_to_start():
    scheduler = SyncScheduler(FakeService(), interval_minutes=45, initial_delay_seconds=None)

    scheduler.install_jobs()

    (job,) = scheduler._scheduler.jobs
    assert job.interval == 45
    assert job.unit == "minutes"


def test_initial_sync_runs_once():
    service = FakeService()
    scheduler = SyncScheduler(service, interval_minutes=30, initial_delay_seconds=2)
    scheduler.install_jobs()
    assert len([j for j in scheduler._scheduler.jobs if j.unit == "seconds"]) == 1

    scheduler._scheduler.run_all()
    scheduler._scheduler.run_all()

    assert service.reasons.count("initial") == 1
    assert service.reasons.count("scheduled") == 4
    assert [j for j in scheduler._scheduler.jobs if j.unit == "seconds"] == []


def test_start_and_stop_background_thread():
    scheduler = SyncScheduler(FakeService(), initial_delay_seconds=None, poll_seconds=0.01)

    scheduler.start()
    assert scheduler.is_running

    scheduler.stop()
    assert not scheduler.is_running


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        SyncScheduler(FakeService(), interval_minutes=0)
