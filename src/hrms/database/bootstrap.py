"""Schema management for the MySQL backend.

``schema.sql`` only uses ``CREATE TABLE IF NOT EXISTS`` so applying it again
is harmless. Any ``CREATE DATABASE`` / ``USE`` lines in the file are ignored;
the target database always comes from settings.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, Optional, Union

from .connection import CHARSET, COLLATION, DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

_DATABASE_LINES = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENTS = re.compile(r"(?m)^\s*--.*$")
# quoted literal | run of plain text | statement terminator | stray quote
_SQL_TOKEN = re.compile(r"""'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|[^;'"]+|;|['"]""", re.S)


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ``;`` while leaving semicolons inside string literals alone."""

    parts: list[str] = []
    for match in _SQL_TOKEN.finditer(sql):
        token = match.group(0)
        if token != ";":
            parts.append(token)
            continue
        statement = "".join(parts).strip()
        parts = []
        if statement:
            yield statement

    statement = "".join(parts).strip()
    if statement:
        yield statement


def load_schema(schema_path: Optional[Union[str, Path]] = None) -> list[str]:
    path = Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH
    sql = path.read_text(encoding="utf-8")
    sql = _LINE_COMMENTS.sub("", _DATABASE_LINES.sub("", sql))
    return list(iter_sql_statements(sql))


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET {CHARSET} COLLATE {COLLATION}")
        cur.close()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: Optional[Union[str, Path]] = None) -> None:
    ensure_database_exists(db_config)
    target = DBConfig.from_mapping(db_config)
    statements = load_schema(schema_path)

    conn = DatabaseConnection(target).connect()
    try:
        cur = conn.cursor()
        for statement in statements:
            cur.execute(statement)
        conn.commit()
        cur.close()
    finally:
        conn.close()
    logger.info("Applied %d schema statements to %s", len(statements), target.describe())


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        tables = sorted(row[0] for row in cur.fetchall())
        cur.close()
        return tables
    finally:
        conn.close()
