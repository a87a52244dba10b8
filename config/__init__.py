"""Settings modules of attendance-sync, picked by ``APP_ENV``.

``create_app`` loads ``.env`` first, so values there reach the chosen module.
"""

import os

_SETTINGS_BY_ENV = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    # APP_ENV không khớp thì dùng cấu hình development
    env = os.getenv("APP_ENV", "development").strip().lower()
    return _SETTINGS_BY_ENV.get(env, "config.development")
