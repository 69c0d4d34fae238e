from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

# schema.sql names its own database for manual use; the configured one wins.
_DATABASE_DIRECTIVES = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENT = re.compile(r"--[^\n]*")


def split_schema(sql: str) -> Iterator[str]:
    """Yield the DDL statements of a schema file.

    Database directives and `--` comments are dropped. Semicolons inside
    quoted literals do not end a statement.
    """

    sql = _DATABASE_DIRECTIVES.sub("", sql)
    stmt: list[str] = []
    quote = None
    for line in sql.splitlines():
        if quote is None:
            line = _LINE_COMMENT.sub("", line)
        for ch in line:
            if quote is not None:
                if ch == quote:
                    quote = None
            elif ch in ("'", '"', "`"):
                quote = ch
            elif ch == ";":
                text = "".join(stmt).strip()
                stmt.clear()
                if text:
                    yield text
                continue
            stmt.append(ch)
        stmt.append("\n")

    text = "".join(stmt).strip()
    if text:
        yield text


def _connect(target: DBConfig, *, with_database: bool = True):
    params = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        connection_timeout=target.connect_timeout,
    )
    if with_database:
        params["database"] = target.database
    return mysql.connector.connect(**params)


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    """Create the configured database if needed and run every schema statement."""

    target = DBConfig.from_dict(db_config)
    statements = list(split_schema(Path(schema_path).read_text(encoding="utf-8")))

    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        cur.execute(f"USE `{target.database}`")
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %d schema statements to %s", len(statements), target.database)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(row[0] for row in cur.fetchall())
    finally:
        conn.close()
