from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Open a short-lived connection and yield ``(conn, cursor)``.

    The block's work is committed when it exits cleanly and rolled back
    when it raises. Repositories rely on this for multi-statement writes
    such as code allocation during registration.
    """
    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield conn, cur
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    # TIME columns come back as timedelta; CHAR(5) columns as "HH:MM".
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, seconds % 3600 // 60, seconds % 60)
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("ascii")
    if isinstance(value, str):
        pieces = [int(p) for p in value.strip().split(":") if p != ""]
        if len(pieces) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(*pieces[:3])
    raise TypeError(f"Unsupported time value: {type(value)!r}")


def hhmm_or_none(value: Any) -> Optional[str]:
    parsed = normalize_mysql_time(value)
    return parsed.strftime("%H:%M") if parsed else None


def load_json(value: Any, default: Any = None) -> Any:
    """JSON columns may arrive as text, bytes or already decoded."""
    if value in (None, "", b""):
        return default
    if isinstance(value, (str, bytes, bytearray)):
        return json.loads(value)
    return value


def dump_json(value: Any) -> Optional[str]:
    # Dates inside payloads serialize as their ISO string.
    return None if value is None else json.dumps(value, default=str)
