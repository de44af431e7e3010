from __future__ import annotations

import argparse
import os
import sqlite3
import sys
from pathlib import Path


def ensure_schema(conn: sqlite3.Connection) -> None:
    # Programmatic schema init via repos so it always matches code
    from matchday.repositories.sqlite.leagues_sqlite import LeaguesRepoSqlite
    from matchday.repositories.sqlite.sessions_sqlite import SessionsRepoSqlite

    LeaguesRepoSqlite(conn)
    SessionsRepoSqlite(conn)


def main(argv: list[str] | None = None) -> int:
    # Allow running from a checkout without installing the package
    project_root = Path(__file__).resolve().parents[1]
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    parser = argparse.ArgumentParser(description="Create the league and admin session tables")
    parser.add_argument(
        "--db",
        default=os.getenv("MATCHDAY_DB_PATH", os.path.join("data", "matchday.sqlite3")),
        help="Path to SQLite DB file (will be created if missing)",
    )
    args = parser.parse_args(argv)

    db_path = os.path.abspath(args.db)
    os.makedirs(os.path.dirname(db_path), exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        ensure_schema(conn)
    finally:
        conn.close()

    print(f"Initialized schema at: {db_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
