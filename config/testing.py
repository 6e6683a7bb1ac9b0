from .config import *  # noqa: F401,F403
from .config import DB_CONFIG as _BASE_DB_CONFIG

SECRET_KEY = "test-secret"

DB_CONFIG = dict(_BASE_DB_CONFIG, database="punchclock_test")

DEBUG = False
TESTING = True
AUTO_INIT_DB = False
DEV_LOOPBACK_TRUST = False
