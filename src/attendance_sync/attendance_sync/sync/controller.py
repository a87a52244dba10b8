from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..common.datetime_utils import now_utc, to_utc_iso
from ..core.exceptions import RecordNotFound, StoreWriteFailure, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.sync_service
    scheduler = container.scheduler

    def _scheduler_info() -> dict:
        next_run = scheduler.next_run()
        return {
            "enabled": scheduler.is_running,
            "interval": f"Every {scheduler.interval_minutes} minutes",
            "nextRun": next_run.isoformat() if next_run else None,
        }

    @app.route("/api/trigger-sync", endpoint="trigger_sync")
    def trigger_sync():
        result = scheduler.trigger("manual")
        return jsonify(
            {
                "success": not result.error,
                "message": "Sync failed" if result.error else "Sync completed",
                "data": result.to_dict(),
            }
        )

    @app.route("/api/force-sync", endpoint="force_sync")
    def force_sync():
        result = scheduler.trigger("force")
        return jsonify(
            {
                "success": not result.error,
                "message": "Force sync failed" if result.error else "Force sync completed",
                "data": result.to_dict(),
                "timestamp": to_utc_iso(now_utc()),
            }
        )

    @app.route("/force-refresh", endpoint="force_refresh")
    def force_refresh():
        return jsonify(scheduler.trigger("refresh").to_dict())

    @app.route("/api/data", endpoint="api_data")
    def api_data():
        last = service.state.last_result
        status = service.status()
        return jsonify(
            {
                "deviceData": {ip: s.to_dict() for ip, s in service.get_device_snapshots().items()},
                "combinedData": service.get_latest_snapshot().to_dict(),
                "newRecordsCount": last.new_records_count if last else 0,
                "totalRecords": status["dataStats"]["totalRecords"],
                "allAttendanceRecords": [r.to_dict() for r in service.get_records()],
                "lastSyncTime": status["lastSync"],
                "nextSyncTime": _scheduler_info()["nextRun"],
            }
        )

    @app.route("/api/health", endpoint="api_health")
    def api_health():
        payload = service.status()
        payload["scheduler"] = _scheduler_info()
        return jsonify(payload)

    @app.route("/api/status", endpoint="api_status")
    def api_status():
        status = service.status()
        return jsonify(
            {
                "scheduler": _scheduler_info(),
                "devices": [{"ip": ip, "status": s} for ip, s in status["devices"].items()],
                "data": {
                    "localRecords": status["dataStats"]["totalRecords"],
                    "storeFile": status["dataStats"]["storeFile"],
                    "lastSync": status["lastSync"],
                },
                "apiIntegration": {
                    "endpoint": status["collector"]["endpoint"],
                    "enabled": status["collector"]["enabled"],
                    "method": "POST",
                    "format": "JSON array of AttendanceRecordDto",
                },
            }
        )

    @app.route("/api/records", endpoint="list_record_files")
    def list_record_files():
        return jsonify({"files": service.list_stored_days()})

    @app.route("/api/records/<filename>", methods=["GET"], endpoint="read_record_file")
    def read_record_file(filename: str):
        try:
            records = service.read_day(filename)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except RecordNotFound as e:
            return jsonify({"success": False, "message": str(e)}), 404
        return jsonify({"file": filename, "count": len(records), "records": [r.to_dict() for r in records]})

    @app.route("/api/records/<filename>", methods=["DELETE"], endpoint="delete_record_file")
    def delete_record_file(filename: str):
        try:
            service.delete_day(filename)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except RecordNotFound as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except StoreWriteFailure as e:
            logger.error("Delete of %s failed: %s", filename, e)
            return jsonify({"success": False, "message": "Lỗi hệ thống khi xóa file"}), 500
        return jsonify({"success": True, "message": f"Deleted {filename}"})
