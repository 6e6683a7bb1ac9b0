from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional, Type

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateRecord, StoreUnavailable, TransientError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (
    mysql.connector.errors.OperationalError,
    mysql.connector.errors.InterfaceError,
    mysql.connector.errors.PoolError,
)


@contextmanager
def db_cursor(
    conn_factory: DatabaseConnection,
    *,
    dictionary: bool = True,
    unavailable: Type[TransientError] = StoreUnavailable,
):
    """Yield ``(conn, cursor)`` inside one transaction.

    Commits on success, rolls back on any error. Connection and timeout
    failures are re-raised as ``unavailable`` so callers can treat them as
    transient; a duplicate-key error becomes ``DuplicateRecord``.
    """
    try:
        conn = conn_factory.connect()
    except _TRANSIENT_ERRORS as e:
        logger.error("database connect failed: %s", e)
        raise unavailable("Không kết nối được cơ sở dữ liệu") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.errors.IntegrityError as e:
        conn.rollback()
        if e.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateRecord(str(e)) from e
        raise
    except _TRANSIENT_ERRORS as e:
        _safe_rollback(conn)
        logger.error("database operation failed: %s", e, exc_info=True)
        raise unavailable("Cơ sở dữ liệu tạm thời không khả dụng") from e
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except _TRANSIENT_ERRORS:
        logger.warning("rollback failed on a broken connection")


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def optional_float(value: Any) -> Optional[float]:
    """MySQL DECIMAL columns come back as Decimal; None stays None."""
    return None if value is None else float(value)


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        return time(hour=total_seconds // 3600, minute=(total_seconds % 3600) // 60, second=total_seconds % 60)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=int(parts[0]), minute=int(parts[1]), second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
