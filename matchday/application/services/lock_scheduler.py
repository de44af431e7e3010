from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from matchday.domain.entities import League, MatchRecord
from matchday.domain.rules.lock import LOCK_TIMEZONE, compute_lock_at, parse_timestamp
from matchday.infrastructure.events import EventQueue, MatchCreated
from matchday.repositories.leagues import LeagueRepo

logger = logging.getLogger(__name__)


def choose_base_date(match: MatchRecord) -> Optional[datetime]:
    """Prefer the logical timestamp so back-dated matches lock at once; else insertion time."""
    parsed = parse_timestamp(match.timestamp)
    if parsed is not None:
        return parsed
    return match.created_at


class LockScheduler:
    """Assign the edit-lock boundary of newly created matches.

    - :meth:`on_match_created` is the one-shot trigger for a creation event.
    - :meth:`reconcile` fills in any boundary still missing on an in-memory
      league, so readers never depend on the trigger having run.

    Failures are logged and swallowed: a match without ``lock_at`` stays
    editable, which is the safe default.
    """

    def __init__(self, leagues: LeagueRepo, tz: str = LOCK_TIMEZONE) -> None:
        self._leagues = leagues
        self._tz = tz

    @property
    def timezone(self) -> str:
        return self._tz

    def lock_for(self, match: MatchRecord, league_id: Optional[str] = None) -> Optional[datetime]:
        """The lock boundary for ``match``, or ``None`` when it cannot be computed."""
        base = choose_base_date(match)
        if base is None:
            return None
        try:
            return compute_lock_at(base, self._tz)
        except OverflowError:
            logger.error(
                "Lock boundary for match %s is outside the supported date range; left unlocked",
                match.match_id,
                extra={"league_id": league_id},
            )
            return None

    def on_match_created(self, event: MatchCreated) -> None:
        try:
            league = self._leagues.get(event.league_id)
            loc = league.locate_id(event.match_id) if league is not None else None
            if league is None or loc is None:
                logger.warning(
                    "Match %s not found in league %s; lock not set",
                    event.match_id,
                    event.league_id,
                )
                return
            match = league.match_at(loc)
            if match.lock_at is not None:
                return
            lock_at = self.lock_for(match, event.league_id)
            if lock_at is None:
                logger.error(
                    "Could not compute lock time for match %s; left unlocked",
                    event.match_id,
                    extra={"league_id": event.league_id},
                )
                return
            league.replace_match(loc, match.model_copy(update={"lock_at": lock_at}))
            self._leagues.save(league)
            logger.info(
                "Set lockAt for match %s: %s",
                event.match_id,
                lock_at.isoformat(),
                extra={"league_id": event.league_id},
            )
        except Exception:
            logger.exception(
                "Error setting lock time for match %s",
                event.match_id,
                extra={"league_id": event.league_id},
            )

    def run_pending(self, queue: EventQueue) -> int:
        """Process every queued creation event; return how many were handled."""
        handled = 0
        for event in queue.drain():
            self.on_match_created(event)
            handled += 1
        return handled

    def reconcile(self, league: League) -> int:
        """Set ``lock_at`` on matches of ``league`` that lack it; return the number patched.

        A match whose boundary cannot be computed is logged and left unlocked.
        """
        patched = 0
        for loc, match in list(league.iter_matches()):
            if match.lock_at is not None:
                continue
            try:
                lock_at = self.lock_for(match, league.league_id)
                if lock_at is None:
                    continue
                league.replace_match(loc, match.model_copy(update={"lock_at": lock_at}))
            except Exception:
                logger.exception(
                    "Error setting lock time for match %s",
                    match.match_id,
                    extra={"league_id": league.league_id},
                )
                continue
            patched += 1
        return patched
