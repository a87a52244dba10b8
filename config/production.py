from .base import *  # noqa: F401,F403

DEBUG = False

# Bắt buộc cấu hình COLLECTOR_URL khi chạy thật; nếu để trống chỉ lưu cục bộ
DATA_DIR = os.getenv("DATA_DIR", "/var/lib/attendance-sync")  # noqa: F405
