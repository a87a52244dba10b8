"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_DEVICE_PORT = 4370
DEFAULT_CONNECT_TIMEOUT_MS = 5000
DEFAULT_OPERATION_TIMEOUT_MS = 4000
DEFAULT_SYNC_INTERVAL_MINUTES = 30
DEFAULT_FORWARD_TIMEOUT_SECONDS = 30

ADMIN_ROLE = 14
UNKNOWN_NAME = "Unknown"

RECORD_FILE_PREFIX = "attendance_"
RECORD_FILE_SUFFIX = ".json"

COMBINED_DEVICE_IP = "Multiple Devices"
COMBINED_INFO_TYPE = "Combined View"
