from __future__ import annotations

import logging

from matchday.domain.entities import League
from matchday.domain.errors import InvalidArgument, NotFound
from matchday.domain.value_objects.ids import PlayerName
from matchday.repositories.leagues import LeagueRepo

from .match_ledger import validate_league_id

logger = logging.getLogger(__name__)


class RosterService:
    """League roster and the presence flags captured into each new match."""

    def __init__(self, leagues: LeagueRepo) -> None:
        self._leagues = leagues

    def players(self, league_id: str) -> list[PlayerName]:
        league = self._leagues.get(validate_league_id(league_id))
        return list(league.players) if league is not None else []

    def add_player(self, league_id: str, name: str) -> bool:
        """Add ``name`` to the roster; return False if it was already there."""
        lid = validate_league_id(league_id)
        player = _clean_name(name)
        league = self._leagues.get(lid) or League(league_id=lid)
        if player in league.players:
            return False
        league.register_player(player)
        self._leagues.save(league)
        return True

    def present_players(self, league_id: str) -> list[PlayerName]:
        """Roster players currently marked present, in roster order."""
        league = self._leagues.get(validate_league_id(league_id))
        if league is None:
            return []
        return [p for p in league.players if league.is_present(p)]

    def set_presence(self, league_id: str, name: str, present: bool) -> None:
        lid = validate_league_id(league_id)
        player = _clean_name(name)
        league = self._leagues.get(lid)
        if league is None or player not in league.players:
            raise NotFound(f"Unknown player {player!r}")
        league.presence[player] = bool(present)
        self._leagues.save(league)
        logger.debug("Presence of %s set to %s", player, present, extra={"league_id": lid})

    def is_present(self, league_id: str, name: str) -> bool:
        league = self._leagues.get(validate_league_id(league_id))
        return league.is_present(PlayerName(name)) if league is not None else True


def _clean_name(name: str) -> PlayerName:
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgument("Player name is required.")
    return PlayerName(name.strip())
