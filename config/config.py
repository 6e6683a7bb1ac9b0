"""Settings shared by every environment; environment modules override."""

import os

from dotenv import load_dotenv

load_dotenv(override=False)


def _env_bool(name: str, default: str) -> bool:
    return bool(int(os.getenv(name, default)))


def _env_weekdays(name: str, default: str) -> tuple:
    raw = os.getenv(name, default)
    return tuple(int(d) for d in raw.split(",") if d.strip())


SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "punchclock"),
    "connection_timeout": int(os.getenv("DB_TIMEOUT", "5")),
}

# Organization-local calendar used for the (employee, date) key.
ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Asia/Ho_Chi_Minh")

# IP_ONLY | IP_OR_GEO
TRUST_POLICY = os.getenv("TRUST_POLICY", "IP_OR_GEO")
# AUDIT_ONLY | STRICT
ENFORCEMENT_MODE = os.getenv("ENFORCEMENT_MODE", "AUDIT_ONLY")
GEO_RADIUS_METERS = float(os.getenv("GEO_RADIUS_METERS", "200"))
DEV_LOOPBACK_TRUST = _env_bool("DEV_LOOPBACK_TRUST", "0")

# Number of reverse proxies in front of the app. 0 means the socket peer is the client.
TRUSTED_PROXY_HOPS = int(os.getenv("TRUSTED_PROXY_HOPS", "0"))

QR_TTL_SECONDS = int(os.getenv("QR_TTL_SECONDS", "300"))
ATTENDANCE_URL = os.getenv("ATTENDANCE_URL", "http://localhost:5000/attendance")

# Monday=0 ... Sunday=6
WORKING_WEEKDAYS = _env_weekdays("WORKING_WEEKDAYS", "0,1,2,3,4")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False
AUTO_INIT_DB = _env_bool("AUTO_INIT_DB", "0")
