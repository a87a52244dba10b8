from __future__ import annotations

import json
from datetime import date

import pytest

from attendance_sync.core.exceptions import RecordNotFound, StoreWriteFailure, ValidationError
from attendance_sync.records.json_record_store import JsonRecordStore
from attendance_sync.records.model import AttendanceRecord

DAY = date(2024, 1, 1)


def _record(user_id, minute=0, **extra):
    return AttendanceRecord(
        device_user_id=user_id,
        record_time=f"2024-01-01T08:{minute:02d}:00Z",
        device_ip="10.0.0.1",
        name=f"User {user_id}",
        direction="IN",
        user_sn=user_id * 10,
        extra=extra,
    )


def test_save_then_load_round_trip(tmp_path):
    store = JsonRecordStore(tmp_path / "data")
    records = [_record(1), _record(2, punch=1), _record(3, minute=5)]

    store.save(DAY, records)
    loaded = store.load(DAY)

    assert loaded == records
    path = tmp_path / "data" / "attendance_2024-01-01.json"
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw[1] == {
        "punch": 1,
        "userSn": 20,
        "deviceUserId": 2,
        "recordTime": "2024-01-01T08:00:00Z",
        "name": "User 2",
        "type": "IN",
        "deviceIP": "10.0.0.1",
    }


def test_load_missing_file_is_empty(tmp_path):
    assert JsonRecordStore(tmp_path).load(DAY) == []


def test_load_skips_malformed_entries(tmp_path):
    (tmp_path / "attendance_2024-01-01.json").write_text(
        json.dumps(
            [
                {"deviceUserId": 1, "recordTime": "2024-01-01T08:00:00Z", "deviceIP": "10.0.0.1"},
                {"recordTime": "2024-01-01T08:00:00Z", "deviceIP": "10.0.0.1"},
                {"deviceUserId": 2, "deviceIP": "10.0.0.1"},
                {"deviceUserId": 3, "recordTime": "not-a-time", "deviceIP": "10.0.0.1"},
                "garbage",
            ]
        ),
        encoding="utf-8",
    )

    loaded = JsonRecordStore(tmp_path).load(DAY)

    assert [r.device_user_id for r in loaded] == [1]
    assert loaded[0].name == "Unknown"


def test_load_normalizes_numeric_and_offset_times(tmp_path):
    (tmp_path / "attendance_2024-01-01.json").write_text(
        json.dumps(
            [
                {"deviceUserId": 9, "recordTime": 1704096000000, "deviceIP": "10.0.0.2"},
                {"deviceUserId": 9, "recordTime": "2024-01-01T15:30:00.250+07:00", "deviceIP": "10.0.0.2"},
            ]
        ),
        encoding="utf-8",
    )

    loaded = JsonRecordStore(tmp_path).load(DAY)

    assert [r.record_time for r in loaded] == ["2024-01-01T08:00:00Z", "2024-01-01T08:30:00.250Z"]


def test_load_corrupt_file_returns_empty(tmp_path):
    (tmp_path / "attendance_2024-01-01.json").write_text("[{not json", encoding="utf-8")

    assert JsonRecordStore(tmp_path).load(DAY) == []


def test_save_failure_raises_store_write_failure(tmp_path):
    blocker = tmp_path / "data"
    blocker.write_text("a file where the directory should be", encoding="utf-8")

    with pytest.raises(StoreWriteFailure):
        JsonRecordStore(blocker).save(DAY, [_record(1)])


def test_list_days_only_returns_day_files_sorted(tmp_path):
    store = JsonRecordStore(tmp_path)
    store.save(date(2024, 1, 2), [_record(1)])
    store.save(DAY, [_record(1)])
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")
    (tmp_path / "attendance_latest.json").write_text("[]", encoding="utf-8")

    assert store.list_days() == ["attendance_2024-01-01.json", "attendance_2024-01-02.json"]


def test_list_days_without_directory(tmp_path):
    assert JsonRecordStore(tmp_path / "missing").list_days() == []


def test_read_and_delete_day(tmp_path):
    store = JsonRecordStore(tmp_path)
    store.save(DAY, [_record(1), _record(2)])

    assert len(store.read_day("attendance_2024-01-01.json")) == 2

    store.delete_day("attendance_2024-01-01.json")

    assert store.list_days() == []
    with pytest.raises(RecordNotFound):
        store.read_day("attendance_2024-01-01.json")


@pytest.mark.parametrize(
    "filename",
    [
        "../attendance_2024-01-01.json",
        "sub/attendance_2024-01-01.json",
        "attendance_2024-01-01.json/..",
        "..\\attendance_2024-01-01.json",
        "attendance_2024-13-40.json",
        "passwd",
        "",
    ],
)
def test_file_operations_reject_non_day_filenames(tmp_path, filename):
    store = JsonRecordStore(tmp_path)

    with pytest.raises(ValidationError):
        store.read_day(filename)
    with pytest.raises(ValidationError):
        store.delete_day(filename)
