# mypy: ignore-errors

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from matchday.domain.entities import League, PlayerTotals
from matchday.repositories.sessions import SessionRecord
from matchday.repositories.sqlite.leagues_sqlite import LeaguesRepoSqlite
from matchday.repositories.sqlite.sessions_sqlite import SessionsRepoSqlite


def test_leagues_crud(conn: sqlite3.Connection) -> None:
    repo = LeaguesRepoSqlite(conn)
    assert repo.get("default") is None

    league = League(league_id="default", players=["A", "B"], total_matches=2)
    league.player_totals["A"] = PlayerTotals(wins=2, goals_for=5)
    repo.save(league)

    loaded = repo.get("default")
    assert loaded.players == ["A", "B"]
    assert loaded.total_matches == 2
    assert loaded.player_totals["A"].goals_for == 5

    loaded.current_season = 3
    repo.save(loaded)
    assert repo.get("default").current_season == 3

    repo.save(League(league_id="other"))
    assert repo.list_ids(limit=10) == ["default", "other"]
    assert repo.list_ids(limit=1, offset=1) == ["other"]
    repo.delete("other")
    assert repo.get("other") is None


def test_leagues_schema_created_once(conn: sqlite3.Connection) -> None:
    LeaguesRepoSqlite(conn).save(League(league_id="x"))
    # Second adapter on the same connection keeps existing rows
    assert LeaguesRepoSqlite(conn).get("x") is not None


def test_corrupt_league_document_raises(conn: sqlite3.Connection) -> None:
    repo = LeaguesRepoSqlite(conn)
    conn.execute(
        "INSERT INTO leagues (league_id, document, updated_at) VALUES (?, ?, ?)",
        ("bad", "{not json", "2024-01-01"),
    )
    with pytest.raises(RuntimeError, match="Corrupt league document"):
        repo.get("bad")


def test_sessions_insert_get_revoke(conn: sqlite3.Connection) -> None:
    repo = SessionsRepoSqlite(conn)
    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    for sid, principal in (("s1", "u1"), ("s2", "u1"), ("s3", "u2")):
        repo.insert(
            SessionRecord(
                session_id=sid,
                principal=principal,
                league_id="default",
                version=1,
                issued_at=now,
                expires_at=now + timedelta(hours=1),
            )
        )

    rec = repo.get("s1")
    assert rec.principal == "u1"
    assert rec.expires_at == now + timedelta(hours=1)
    assert not rec.revoked

    assert repo.revoke_for_principal("u1", "default", now) == 2
    assert repo.get("s1").revoked
    assert repo.get("s1").revoked_at == now
    assert not repo.get("s3").revoked
    # Already revoked rows are not counted again
    assert repo.revoke_for_principal("u1", "default", now) == 0
    assert repo.revoke_for_principal("u2", "elsewhere", now) == 0
    assert repo.get("missing") is None


def test_sessions_reject_invalid_version(conn: sqlite3.Connection) -> None:
    repo = SessionsRepoSqlite(conn)
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    with pytest.raises(sqlite3.IntegrityError):
        repo.insert(
            SessionRecord(
                session_id="s",
                principal="u",
                league_id="l",
                version=0,
                issued_at=now,
                expires_at=now,
            )
        )
