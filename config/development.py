import os

from .config import *  # noqa: F401,F403
from .config import _env_bool

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Requests from 127.0.0.1 / ::1 count as office network while developing locally.
DEV_LOOPBACK_TRUST = _env_bool("DEV_LOOPBACK_TRUST", "1")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = _env_bool("AUTO_INIT_DB", "1")
