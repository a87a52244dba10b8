from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.log import configure_logging
from .container import build_container
from .devices.client import TerminalClient
from .sync.controller import register as register_sync

logger = logging.getLogger(__name__)


def create_app(*, client: TerminalClient | None = None, start_scheduler: bool | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), log_file=getattr(settings, "LOG_FILE", None))

    logger.info(
        "settings=%s terminals=%s data_dir=%s",
        settings_module,
        ",".join(settings.TERMINALS),
        settings.DATA_DIR,
    )

    container = build_container(settings, client=client)
    loaded = container.sync_service.initialize()
    logger.info("Loaded %d existing records", loaded)

    register_sync(app, container)
    app.extensions["attendance_sync"] = container

    if start_scheduler is None:
        start_scheduler = bool(getattr(settings, "SCHEDULER_ENABLED", True))
    if start_scheduler:
        container.scheduler.start()

    return app


def run() -> None:
    app = create_app()
    settings = importlib.import_module(get_settings_module())
    # reloader would start a second scheduler
    app.run(
        host=getattr(settings, "HOST", "0.0.0.0"),
        port=int(getattr(settings, "PORT", 3000)),
        debug=app.config["DEBUG"],
        use_reloader=False,
    )


if __name__ == "__main__":
    run()
