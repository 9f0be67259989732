"""
Low-level database helpers (SQLite or Postgres, chosen by DATABASE_URL).
"""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

try:
    import psycopg
    from psycopg.rows import dict_row
except Exception as exc:  # pragma: no cover - required dependency
    raise RuntimeError("psycopg is required for Postgres") from exc

DEFAULT_DATABASE_URL = "sqlite:///./accounts.db"

# Driver errors that the store surfaces as StoreError.
DB_ERRORS = (sqlite3.Error, psycopg.Error)


def _resolve_database_url() -> str:
    url = os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL
    if url.startswith(("postgres://", "postgresql://", "sqlite:///")):
        return url
    raise RuntimeError("DATABASE_URL must start with sqlite:///, postgres:// or postgresql://")


def _convert_qmarks(sql: str) -> str:
    if "?" not in sql:
        return sql
    return sql.replace("?", "%s")


class _CursorWrapper:
    def __init__(self, cursor, dialect: str):
        self._cursor = cursor
        self._dialect = dialect

    def execute(self, sql: str, params: Iterable | None = None):
        if self._dialect == "postgres":
            sql = _convert_qmarks(sql)
        if params is None:
            return self._cursor.execute(sql)
        return self._cursor.execute(sql, params)

    def fetchone(self):
        row = self._cursor.fetchone()
        if row is not None and self._dialect == "sqlite":
            return dict(row)
        return row

    def fetchall(self):
        rows = self._cursor.fetchall()
        if self._dialect == "sqlite":
            return [dict(r) for r in rows]
        return rows

    @property
    def rowcount(self):
        return getattr(self._cursor, "rowcount", 0)

    @property
    def description(self):
        return self._cursor.description


class _ConnWrapper:
    def __init__(self, conn, dialect: str):
        self._conn = conn
        self.dialect = dialect

    def cursor(self):
        return _CursorWrapper(self._conn.cursor(), self.dialect)

    def commit(self):
        return self._conn.commit()

    def rollback(self):
        return self._conn.rollback()

    def close(self):
        return self._conn.close()


def get_conn():
    """
    Return a DB connection for the current DATABASE_URL.
    Rows come back as dicts for both dialects.
    """
    url = _resolve_database_url()
    if url.startswith("sqlite:///"):
        conn = sqlite3.connect(url[len("sqlite:///"):])
        conn.row_factory = sqlite3.Row
        return _ConnWrapper(conn, "sqlite")
    conn = psycopg.connect(url, row_factory=dict_row)
    return _ConnWrapper(conn, "postgres")


__all__ = ["DB_ERRORS", "DEFAULT_DATABASE_URL", "get_conn"]
