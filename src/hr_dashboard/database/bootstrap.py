"""Create the database and apply ``schema.sql``.

Every statement in the schema is idempotent (``CREATE TABLE IF NOT EXISTS``),
so applying it on each start is safe.
"""

from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterator, Optional

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

_CREATE_DB_OR_USE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b.*?;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


def split_statements(sql: str) -> Iterator[str]:
    """Split a schema file on ';', ignoring semicolons inside quoted strings."""
    sql = _LINE_COMMENT.sub("", _CREATE_DB_OR_USE.sub("", sql))
    buf: list[str] = []
    quote: Optional[str] = None
    escaped = False

    for ch in sql:
        buf.append(ch)
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    with closing(mysql.connector.connect(**target.connect_kwargs(with_database=False))) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: Optional[str | Path] = None) -> None:
    ensure_database_exists(db_config)
    target = DBConfig.from_dict(db_config)
    path = Path(schema_path or SCHEMA_PATH)

    with closing(mysql.connector.connect(**target.connect_kwargs())) as conn:
        cur = conn.cursor()
        count = 0
        for stmt in split_statements(path.read_text(encoding="utf-8")):
            cur.execute(stmt)
            count += 1
        conn.commit()
    logger.info("Applied %s statement(s) from %s to %s", count, path.name, target.database)


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    with closing(mysql.connector.connect(**target.connect_kwargs())) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
