from .base import *  # noqa: F401,F403

DEBUG = False
TESTING = True

TERMINALS = ["10.0.0.1", "10.0.0.2"]
IN_TERMINAL_IP = "10.0.0.1"
DATA_DIR = os.getenv("DATA_DIR", "data-test")  # noqa: F405
COLLECTOR_URL = ""
SCHEDULER_ENABLED = False
INITIAL_SYNC_DELAY_SECONDS = None
