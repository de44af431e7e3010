from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Optional, Sequence
from uuid import uuid4

from pydantic import ValidationError

from matchday.domain.entities import League, MatchLocation, MatchRecord
from matchday.domain.errors import InvalidArgument, NotFound, PermissionDenied
from matchday.domain.rules.lock import is_locked, parse_timestamp
from matchday.domain.rules.result import resolve_result
from matchday.domain.value_objects.ids import LeagueId, MatchId
from matchday.domain.value_objects.score import ScoreLine
from matchday.infrastructure.events import EventQueue, MatchCreated
from matchday.repositories.leagues import LeagueRepo

from .lock_scheduler import LockScheduler
from .stats_aggregator import StatsAggregator

logger = logging.getLogger(__name__)

LOCKED_MESSAGE = "This match is locked. Sign in as admin to edit past matches."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def validate_league_id(league_id: object) -> LeagueId:
    if not isinstance(league_id, str) or not league_id.strip():
        raise InvalidArgument("leagueId is required.")
    return LeagueId(league_id)


@dataclass(frozen=True)
class MatchDraft:
    """Raw input for recording a match."""

    team1: Sequence[str]
    team2: Sequence[str]
    score: ScoreLine
    timestamp: Optional[str] = None
    team1_name: Optional[str] = None
    team2_name: Optional[str] = None
    team1_league: Optional[str] = None
    team2_league: Optional[str] = None


class MatchLedger:
    """Season-partitioned match history of a league.

    Appends update the player running totals in the same document write.
    Edits and deletes leave those totals alone unless ``reconcile_aggregates``
    is set, in which case totals are rebuilt from the remaining matches.
    Every mutation of an existing match checks the edit lock first.
    """

    def __init__(
        self,
        leagues: LeagueRepo,
        stats: Optional[StatsAggregator] = None,
        events: Optional[EventQueue] = None,
        lock_scheduler: Optional[LockScheduler] = None,
        *,
        reconcile_aggregates: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._leagues = leagues
        self._stats = stats or StatsAggregator()
        self._events = events if events is not None else EventQueue()
        self._locks = lock_scheduler
        self._reconcile_aggregates = reconcile_aggregates
        self._clock = clock

    @property
    def events(self) -> EventQueue:
        return self._events

    # --------------------------- Loading ---------------------------
    def _read(self, league_id: str) -> Optional[League]:
        league = self._leagues.get(validate_league_id(league_id))
        if league is not None and self._locks is not None:
            if self._locks.reconcile(league):
                self._leagues.save(league)
        return league

    def _require(self, league_id: str) -> League:
        league = self._read(league_id)
        if league is None:
            raise NotFound("League not found.")
        return league

    def _check_editable(self, match: MatchRecord, admin: bool) -> None:
        if is_locked(match.lock_at, self._clock(), admin=admin):
            raise PermissionDenied(LOCKED_MESSAGE)

    # --------------------------- Append ---------------------------
    def append(self, league_id: str, draft: MatchDraft) -> MatchRecord:
        lid = validate_league_id(league_id)
        now = self._clock()
        try:
            match = MatchRecord(
                match_id=MatchId(uuid4().hex),
                team1=tuple(draft.team1),
                team2=tuple(draft.team2),
                score=draft.score,
                result=resolve_result(draft.score),
                timestamp=draft.timestamp or _iso(now),
                created_at=now,
                team1_name=draft.team1_name,
                team2_name=draft.team2_name,
                team1_league=draft.team1_league,
                team2_league=draft.team2_league,
            )
        except ValidationError as exc:
            raise InvalidArgument(f"Invalid match: {exc.errors()[0]['msg']}") from exc

        league = self._leagues.get(lid) or League(league_id=lid)
        # Frozen at append time; later presence changes do not rewrite history.
        match = match.model_copy(
            update={"player_presence": {p: league.is_present(p) for p in match.players}}
        )
        season = league.ensure_season(league.current_season, now)
        season.matches.append(match)
        league.total_matches += 1
        for player in match.players:
            league.register_player(player)
        self._stats.apply_match(league, match)
        self._leagues.save(league)

        logger.info(
            "Recorded match %s (%s) in season %s",
            match.match_id,
            match.result.value,
            season.number,
            extra={"league_id": lid},
        )
        self._events.publish(MatchCreated(league_id=lid, match_id=match.match_id))
        return match

    # --------------------------- Lookup ---------------------------
    def league(self, league_id: str) -> Optional[League]:
        """The league document with any missing lock boundaries filled in."""
        return self._read(league_id)

    def find_by_timestamp(self, league_id: str, timestamp: str) -> Optional[MatchRecord]:
        """Return the first match with ``timestamp`` in season then insertion order."""
        league = self._read(league_id)
        if league is None:
            return None
        loc = league.locate_timestamp(timestamp)
        return league.match_at(loc) if loc is not None else None

    def find_by_id(self, league_id: str, match_id: str) -> Optional[MatchRecord]:
        league = self._read(league_id)
        if league is None:
            return None
        loc = league.locate_id(match_id)
        return league.match_at(loc) if loc is not None else None

    def season_matches(self, league_id: str, season: Optional[int] = None) -> list[MatchRecord]:
        league = self._read(league_id)
        if league is None:
            return []
        number = league.current_season if season is None else int(season)
        found = league.seasons.get(number)
        return list(found.matches) if found is not None else []

    def all_matches(self, league_id: str) -> list[MatchRecord]:
        league = self._read(league_id)
        return league.all_matches() if league is not None else []

    def matches_between(
        self, league_id: str, date_from: Optional[date] = None, date_to: Optional[date] = None
    ) -> list[MatchRecord]:
        """Matches whose UTC calendar date falls within the inclusive range."""
        out: list[MatchRecord] = []
        for match in self.all_matches(league_id):
            dt = parse_timestamp(match.timestamp)
            if dt is None:
                continue
            day = dt.date()
            if date_from is not None and day < date_from:
                continue
            if date_to is not None and day > date_to:
                continue
            out.append(match)
        return out

    def current_season(self, league_id: str) -> int:
        league = self._read(league_id)
        return league.current_season if league is not None else 1

    def can_edit(self, match: MatchRecord, *, admin: bool = False) -> bool:
        return not is_locked(match.lock_at, self._clock(), admin=admin)

    # --------------------------- Mutations ---------------------------
    def update(
        self, league_id: str, timestamp: str, score: ScoreLine, *, admin: bool = False
    ) -> MatchRecord:
        league = self._require(league_id)
        loc = league.locate_timestamp(timestamp)
        if loc is None:
            raise NotFound(f"No match with timestamp {timestamp}")
        current = league.match_at(loc)
        self._check_editable(current, admin)

        updated = current.model_copy(update={"score": score, "result": resolve_result(score)})
        league.replace_match(loc, updated)
        if self._reconcile_aggregates:
            self._stats.rebuild_player_totals(league)
        self._leagues.save(league)
        logger.info(
            "Updated match %s: %s -> %s",
            current.match_id,
            current.result.value,
            updated.result.value,
            extra={"league_id": league.league_id},
        )
        return updated

    def delete(self, league_id: str, timestamp: str, *, admin: bool = False) -> MatchRecord:
        league = self._require(league_id)
        loc = league.locate_timestamp(timestamp)
        if loc is None:
            raise NotFound(f"No match with timestamp {timestamp}")
        return self._remove(league, loc, admin)

    def delete_last(self, league_id: str, *, admin: bool = False) -> Optional[MatchRecord]:
        """Remove the most recent match of the current season, if any."""
        league = self._read(league_id)
        if league is None:
            return None
        season = league.seasons.get(league.current_season)
        if season is None or not season.matches:
            return None
        return self._remove(league, MatchLocation(season.number, len(season.matches) - 1), admin)

    def _remove(self, league: League, loc: MatchLocation, admin: bool) -> MatchRecord:
        match = league.match_at(loc)
        self._check_editable(match, admin)
        del league.seasons[loc.season].matches[loc.index]
        if league.total_matches > 0:
            league.total_matches -= 1
        if self._reconcile_aggregates:
            self._stats.rebuild_player_totals(league)
        self._leagues.save(league)
        logger.info(
            "Deleted match %s from season %s",
            match.match_id,
            loc.season,
            extra={"league_id": league.league_id},
        )
        return match

    # --------------------------- Seasons ---------------------------
    def start_new_season(self, league_id: str) -> int:
        lid = validate_league_id(league_id)
        league = self._leagues.get(lid) or League(league_id=lid)
        league.current_season += 1
        league.ensure_season(league.current_season, self._clock())
        self._leagues.save(league)
        logger.info("Started season %s", league.current_season, extra={"league_id": lid})
        return league.current_season

    def clear_statistics(self, league_id: str, *, admin: bool) -> None:
        """Drop every season and running total, keeping the roster."""
        if not admin:
            raise PermissionDenied("Admin required.")
        league = self._require(league_id)
        league.seasons = {}
        league.current_season = 1
        league.total_matches = 0
        league.player_totals = {}
        self._leagues.save(league)
        logger.warning("Cleared all statistics", extra={"league_id": league.league_id})
