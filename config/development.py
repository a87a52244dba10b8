from .base import *  # noqa: F401,F403

DEBUG = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")  # noqa: F405
