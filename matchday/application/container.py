from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass
from typing import TYPE_CHECKING

from matchday.infrastructure.events import EventQueue
from matchday.repositories.sqlite.leagues_sqlite import LeaguesRepoSqlite
from matchday.repositories.sqlite.sessions_sqlite import SessionsRepoSqlite

from .rpc import AdminRpc
from .services.admin_credentials import AdminCredentialService
from .services.lock_scheduler import LockScheduler
from .services.match_ledger import MatchLedger
from .services.roster_service import RosterService
from .services.stats_aggregator import PointsConfig, StatsAggregator
from .services.team_generator import TeamGenerator

if TYPE_CHECKING:  # pragma: no cover - import for type checkers only
    from matchday.config.settings import Settings


@dataclass
class Services:
    ledger: MatchLedger
    stats: StatsAggregator
    locks: LockScheduler
    admin: AdminCredentialService
    roster: RosterService
    teams: TeamGenerator
    rpc: AdminRpc
    events: EventQueue


def connect(db_path: str) -> sqlite3.Connection:
    if db_path != ":memory:":
        folder = os.path.dirname(os.path.abspath(db_path))
        os.makedirs(folder, exist_ok=True)
    return sqlite3.connect(db_path)


def build_services(conn: sqlite3.Connection, settings: "Settings") -> Services:
    """Wire every service against one SQLite connection."""
    leagues = LeaguesRepoSqlite(conn)
    sessions = SessionsRepoSqlite(conn)
    events = EventQueue()
    stats = StatsAggregator(
        PointsConfig(win=settings.points_win, draw=settings.points_draw, loss=settings.points_loss)
    )
    locks = LockScheduler(leagues, tz=settings.lock_timezone)
    roster = RosterService(leagues)
    ledger = MatchLedger(
        leagues,
        stats,
        events,
        locks,
        reconcile_aggregates=settings.reconcile_aggregates_on_edit,
    )
    admin = AdminCredentialService(
        leagues,
        sessions,
        settings.session_secret,
        session_ttl_seconds=settings.session_ttl_seconds,
    )
    return Services(
        ledger=ledger,
        stats=stats,
        locks=locks,
        admin=admin,
        roster=roster,
        teams=TeamGenerator(roster),
        rpc=AdminRpc(admin),
        events=events,
    )


def open_services() -> Services:
    """Build services from environment settings (CLI entry point)."""
    # Lazy import so importing this module never requires environment variables
    from matchday.config.settings import settings

    return build_services(connect(settings.db_path), settings)
