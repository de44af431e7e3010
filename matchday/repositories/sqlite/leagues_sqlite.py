from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Optional

from ...domain.entities import League
from ..leagues import LeagueRepo


class LeaguesRepoSqlite(LeagueRepo):
    """SQLite implementation of :class:`LeagueRepo`.

    Example:
        >>> import sqlite3
        >>> conn = sqlite3.connect(":memory:")
        >>> repo = LeaguesRepoSqlite(conn)
        >>> repo.save(League(league_id="default"))
        >>> repo.get("default").current_season
        1
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS leagues (
                league_id TEXT PRIMARY KEY,
                document TEXT NOT NULL,
                updated_at DATETIME NOT NULL
            )
            """
        )
        self._conn.commit()

    def get(self, league_id: str) -> Optional[League]:
        cur = self._conn.execute(
            "SELECT document FROM leagues WHERE league_id = ?",
            (league_id,),
        )
        row = cur.fetchone()
        if row is None:
            return None
        try:
            doc = json.loads(row[0])
        except (TypeError, ValueError) as exc:
            raise RuntimeError(f"Corrupt league document for {league_id!r}") from exc
        return League.from_document(league_id, doc)

    def save(self, league: League) -> None:
        document = json.dumps(league.to_document(), ensure_ascii=False, sort_keys=True)
        self._conn.execute(
            """
            INSERT INTO leagues (league_id, document, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(league_id) DO UPDATE SET
                document = excluded.document,
                updated_at = excluded.updated_at
            """,
            (league.league_id, document, datetime.now(timezone.utc).isoformat()),
        )
        self._conn.commit()

    def delete(self, league_id: str) -> None:
        self._conn.execute("DELETE FROM leagues WHERE league_id = ?", (league_id,))
        self._conn.commit()

    def list_ids(self, *, limit: int = 100, offset: int = 0) -> list[str]:
        cur = self._conn.execute(
            "SELECT league_id FROM leagues ORDER BY league_id LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [row[0] for row in cur.fetchall()]
