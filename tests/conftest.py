from __future__ import annotations

import logging
import sqlite3
from collections.abc import Generator
from datetime import datetime, timezone

import pytest

from matchday.application.services.admin_credentials import AdminCredentialService
from matchday.application.services.lock_scheduler import LockScheduler
from matchday.application.services.match_ledger import MatchLedger
from matchday.application.services.stats_aggregator import StatsAggregator
from matchday.infrastructure.events import EventQueue
from matchday.logging_config import LOG_NAME
from matchday.repositories.sqlite.leagues_sqlite import LeaguesRepoSqlite
from matchday.repositories.sqlite.sessions_sqlite import SessionsRepoSqlite


class FakeClock:
    """Mutable clock injected into services."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(autouse=True)
def reset_project_logger() -> Generator[None, None, None]:
    """Drop handlers installed by get_logger so caplog sees module records."""
    yield
    logger = logging.getLogger(LOG_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def conn() -> Generator[sqlite3.Connection, None, None]:
    c = sqlite3.connect(":memory:")
    yield c
    c.close()


@pytest.fixture
def leagues(conn: sqlite3.Connection) -> LeaguesRepoSqlite:
    return LeaguesRepoSqlite(conn)


@pytest.fixture
def sessions(conn: sqlite3.Connection) -> SessionsRepoSqlite:
    return SessionsRepoSqlite(conn)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger(leagues: LeaguesRepoSqlite, clock: FakeClock) -> MatchLedger:
    return MatchLedger(
        leagues,
        StatsAggregator(),
        EventQueue(),
        LockScheduler(leagues),
        clock=clock,
    )


@pytest.fixture
def admin_service(
    leagues: LeaguesRepoSqlite, sessions: SessionsRepoSqlite, clock: FakeClock
) -> AdminCredentialService:
    return AdminCredentialService(
        leagues, sessions, "test-secret", session_ttl_seconds=3600, clock=clock
    )
