"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ORG_TIMEZONE = "Asia/Ho_Chi_Minh"
DEFAULT_GEO_RADIUS_METERS = 200.0
DEFAULT_QR_TTL_SECONDS = 300
DEFAULT_LOG_DAYS = 7
MAX_LOG_DAYS = 90
DEFAULT_DB_TIMEOUT_SECONDS = 5

# Reverse proxies in front of the app whose X-Forwarded-For may be trusted.
DEFAULT_TRUSTED_PROXY_HOPS = 0
DEFAULT_WORKING_WEEKDAYS = (0, 1, 2, 3, 4)
DEFAULT_ATTENDANCE_URL = "http://localhost:5000/attendance"

LOOPBACK_ADDRESSES = frozenset({"127.0.0.1", "::1"})
EARTH_RADIUS_METERS = 6_371_000.0

REASON_NETWORK_ALLOWLIST = "network-allowlist"
REASON_GEO_PROXIMITY = "geo-proximity"
REASON_LOOPBACK_DEV = "loopback-dev"
REASON_NO_MATCH = "no-match"
