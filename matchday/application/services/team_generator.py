from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import permutations
from typing import Optional, Sequence

from matchday.domain.errors import InvalidArgument
from matchday.domain.value_objects.enums import LockSide
from matchday.domain.value_objects.ids import PlayerName

from .roster_service import RosterService

logger = logging.getLogger(__name__)

MAX_PLAYERS = 4


@dataclass(frozen=True)
class Pairing:
    team1: tuple[str, ...]
    team2: tuple[str, ...]

    def swapped(self) -> "Pairing":
        return Pairing(team1=self.team2, team2=self.team1)

    def describe(self) -> str:
        return f"{' & '.join(self.team1)} vs {' & '.join(self.team2)}"


@dataclass(frozen=True)
class RoundStructure:
    """One complete set of matches for a session, in playing order."""

    matches: tuple[Pairing, ...]


@dataclass(frozen=True)
class PlayerLock:
    """Keep ``player`` on one side (home is team 1, away is team 2)."""

    player: Optional[str] = None
    side: LockSide = LockSide.NEUTRAL

    @classmethod
    def parse(cls, player: Optional[str], side: Optional[str]) -> "PlayerLock":
        try:
            lock_side = LockSide(side or LockSide.NEUTRAL.value)
        except ValueError as exc:
            raise InvalidArgument(f"Unknown lock side {side!r}") from exc
        return cls(player=player.strip() if player else None, side=lock_side)

    def active_for(self, players: Sequence[str]) -> bool:
        return bool(self.player) and self.side != LockSide.NEUTRAL and self.player in players


def _base_matches(players: Sequence[str]) -> list[Pairing]:
    p = list(players)
    if len(p) == 3:
        # each pair in turn against the remaining player
        return [
            Pairing((p[0], p[1]), (p[2],)),
            Pairing((p[0], p[2]), (p[1],)),
            Pairing((p[1], p[2]), (p[0],)),
        ]
    # the first player partners each of the others once
    return [
        Pairing((p[0], p[1]), (p[2], p[3])),
        Pairing((p[0], p[2]), (p[1], p[3])),
        Pairing((p[0], p[3]), (p[1], p[2])),
    ]


def round_structures(players: Sequence[str], lock: Optional[PlayerLock] = None) -> list[RoundStructure]:
    """Every round structure for ``players``.

    - 2 players: a single 1v1 match.
    - 3 players: the three 2v1 matches, in every order.
    - 4 players: the three 2v2 partnerships, in every order.

    Fewer than 2 or more than 4 players yield no structures.
    """
    count = len(players)
    if count == 2:
        structures = [RoundStructure((Pairing((players[0],), (players[1],)),))]
    elif count in (3, MAX_PLAYERS):
        structures = [RoundStructure(tuple(order)) for order in permutations(_base_matches(players))]
    else:
        return []
    return apply_player_lock(structures, players, lock)


def apply_player_lock(
    structures: Sequence[RoundStructure], players: Sequence[str], lock: Optional[PlayerLock]
) -> list[RoundStructure]:
    """Swap sides in every match where the locked player is on the wrong side."""
    if lock is None or not lock.active_for(players):
        return list(structures)
    out = []
    for structure in structures:
        matches = []
        for match in structure.matches:
            if lock.side == LockSide.HOME and lock.player in match.team2:
                match = match.swapped()
            elif lock.side == LockSide.AWAY and lock.player in match.team1:
                match = match.swapped()
            matches.append(match)
        out.append(RoundStructure(tuple(matches)))
    return out


class TeamGenerator:
    """Suggest fixtures for the players currently marked present."""

    def __init__(self, roster: RosterService) -> None:
        self._roster = roster

    def present_players(self, league_id: str) -> list[PlayerName]:
        return self._roster.present_players(league_id)

    def rounds(self, league_id: str, lock: Optional[PlayerLock] = None) -> list[RoundStructure]:
        players = self.present_players(league_id)
        structures = round_structures(players, lock)
        if not structures:
            logger.info(
                "No round structure for %d present players",
                len(players),
                extra={"league_id": league_id},
            )
        return structures
