"""
Quick helper to run a query against the configured database (DATABASE_URL).

Usage:
  python -m scripts.db_shell                                                   # list tables
  python -m scripts.db_shell "SELECT id, email, reset_token_expiry FROM users" # run a custom query
"""
from __future__ import annotations

import sys

from dotenv import load_dotenv

from core.database import DB_ERRORS, get_conn

_LIST_TABLES = {
    "sqlite": "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name",
    "postgres": "SELECT tablename AS name FROM pg_tables WHERE schemaname='public' ORDER BY tablename",
}


def main() -> None:
    load_dotenv(override=True)
    query = " ".join(sys.argv[1:]).strip()

    conn = get_conn()
    print(f"Using DB: {conn.dialect} (DATABASE_URL)", file=sys.stderr)
    try:
        cur = conn.cursor()
        cur.execute(query or _LIST_TABLES[conn.dialect])
        if cur.description is not None:
            for row in cur.fetchall():
                print(dict(row))
        else:
            conn.commit()
            print(f"OK ({cur.rowcount} row(s) affected)")
    except DB_ERRORS as exc:
        raise SystemExit(f"Error running query: {exc}") from exc
    finally:
        conn.close()


if __name__ == "__main__":
    main()
