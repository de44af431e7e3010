from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional

from ..sessions import SessionRecord, SessionRepo


def _parse_dt(value: object) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    dt = datetime.fromisoformat(str(value))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class SessionsRepoSqlite(SessionRepo):
    """SQLite implementation of :class:`SessionRepo`."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS admin_sessions (
                session_id TEXT PRIMARY KEY,
                principal TEXT NOT NULL,
                league_id TEXT NOT NULL,
                version INTEGER NOT NULL CHECK(version >= 1),
                issued_at DATETIME NOT NULL,
                expires_at DATETIME NOT NULL,
                revoked_at DATETIME
            )
            """
        )
        self._conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_admin_sessions_principal
            ON admin_sessions (principal, league_id)
            """
        )
        self._conn.commit()

    def insert(self, record: SessionRecord) -> None:
        self._conn.execute(
            """
            INSERT INTO admin_sessions
                (session_id, principal, league_id, version, issued_at, expires_at, revoked_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.session_id,
                record.principal,
                record.league_id,
                record.version,
                record.issued_at.isoformat(),
                record.expires_at.isoformat(),
                record.revoked_at.isoformat() if record.revoked_at else None,
            ),
        )
        self._conn.commit()

    def get(self, session_id: str) -> Optional[SessionRecord]:
        cur = self._conn.execute(
            """
            SELECT session_id, principal, league_id, version, issued_at, expires_at, revoked_at
            FROM admin_sessions
            WHERE session_id = ?
            """,
            (session_id,),
        )
        row = cur.fetchone()
        if row is None:
            return None
        issued = _parse_dt(row[4])
        expires = _parse_dt(row[5])
        assert issued is not None and expires is not None
        return SessionRecord(
            session_id=row[0],
            principal=row[1],
            league_id=row[2],
            version=int(row[3]),
            issued_at=issued,
            expires_at=expires,
            revoked_at=_parse_dt(row[6]),
        )

    def revoke_for_principal(self, principal: str, league_id: str, revoked_at: datetime) -> int:
        cur = self._conn.execute(
            """
            UPDATE admin_sessions SET revoked_at = ?
            WHERE principal = ? AND league_id = ? AND revoked_at IS NULL
            """,
            (revoked_at.isoformat(), principal, league_id),
        )
        self._conn.commit()
        return int(cur.rowcount)
