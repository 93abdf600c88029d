from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, time, timedelta
from typing import Any, Dict, Iterator, List, Optional, Tuple

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import parse_clock_time
from .connection import DatabaseConnection

Row = Dict[str, Any]


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """One transaction: commit when the block finishes, roll back if it raises."""

    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=dictionary)
    committed = False
    try:
        yield conn, cur
        conn.commit()
        committed = True
    finally:
        if not committed:
            conn.rollback()
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Row]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Row]:
    return list(cur.fetchall() or ())


def is_duplicate_key(exc: Exception) -> bool:
    return isinstance(exc, mysql.connector.IntegrityError) and exc.errno == errorcode.ER_DUP_ENTRY


def like_pattern(term: str) -> str:
    """``%term%`` with LIKE wildcards in ``term`` escaped."""

    for ch in ("\\", "%", "_"):
        term = term.replace(ch, "\\" + ch)
    return f"%{term}%"


def normalize_mysql_time(value: Any) -> Optional[time]:
    # The C extension returns TIME columns as timedelta, the pure driver may give str.
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        return (datetime.min + timedelta(seconds=int(value.total_seconds()) % 86400)).time()
    if isinstance(value, str):
        text = value.strip()
        return parse_clock_time(text if text.count(":") == 2 else text + ":00")
    raise TypeError(f"Unsupported TIME value: {value!r}")
