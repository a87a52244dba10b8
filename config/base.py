"""Settings shared by every environment; each value can come from the env / .env."""

import os


def env_list(name: str, default: str) -> list:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


def env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# Máy chấm công (ZKTeco)
TERMINALS = env_list("TERMINALS", "192.168.18.253,192.168.18.252")
IN_TERMINAL_IP = os.getenv("IN_TERMINAL_IP", "192.168.18.253")
DEVICE_PORT = int(os.getenv("DEVICE_PORT", "4370"))
DEVICE_PASSWORD = int(os.getenv("DEVICE_PASSWORD", "0"))
DEVICE_FORCE_UDP = env_bool("DEVICE_FORCE_UDP", "0")
DEVICE_OMIT_PING = env_bool("DEVICE_OMIT_PING", "1")
CONNECT_TIMEOUT_MS = int(os.getenv("CONNECT_TIMEOUT_MS", "5000"))
OPERATION_TIMEOUT_MS = int(os.getenv("OPERATION_TIMEOUT_MS", "4000"))

# Lưu trữ cục bộ
DATA_DIR = os.getenv("DATA_DIR", "data")

# Collector nhận dữ liệu (để trống = không gửi)
COLLECTOR_URL = os.getenv("COLLECTOR_URL", "")
FORWARD_TIMEOUT_SECONDS = float(os.getenv("FORWARD_TIMEOUT_SECONDS", "30"))

# Lịch đồng bộ
SYNC_INTERVAL_MINUTES = int(os.getenv("SYNC_INTERVAL_MINUTES", "30"))
INITIAL_SYNC_DELAY_SECONDS = float(os.getenv("INITIAL_SYNC_DELAY_SECONDS", "2"))
SCHEDULER_ENABLED = env_bool("SCHEDULER_ENABLED", "1")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
