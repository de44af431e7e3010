from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Iterable, Sequence

from matchday.domain.entities import League, MatchRecord, PlayerTotals
from matchday.domain.rules.result import effective_pair
from matchday.domain.value_objects.enums import MatchResult, StatsMode
from matchday.domain.value_objects.ids import PlayerName, TeamId

# Team standings always score 3 for a win and 1 for a draw
TEAM_POINTS_WIN = 3
TEAM_POINTS_DRAW = 1

_METRICS = (
    "played",
    "won",
    "drawn",
    "lost",
    "goals_for",
    "goals_against",
    "goal_difference",
    "points",
)


def team_id(roster: Iterable[str]) -> TeamId:
    """Deterministic id for a roster, independent of player order."""
    return TeamId("team_" + "_".join(sorted(roster)))


def _round1(value: float) -> float:
    # half-up, so 0.25 -> 0.3 and -0.25 -> -0.2
    return math.floor(value * 10 + 0.5) / 10


@dataclass(frozen=True)
class PointsConfig:
    """Points a player earns per result in the player table."""

    win: int = 1
    draw: int = 1
    loss: int = 0

    def score(self, totals: PlayerTotals) -> int:
        return totals.wins * self.win + totals.draws * self.draw + totals.losses * self.loss


@dataclass(frozen=True)
class StandingRow:
    team_id: str
    players: tuple[str, ...]
    played: float = 0
    won: float = 0
    drawn: float = 0
    lost: float = 0
    goals_for: float = 0
    goals_against: float = 0
    goal_difference: float = 0
    points: float = 0


class StatsAggregator:
    """Player running totals and on-demand partnership standings.

    - Player totals are updated incrementally by :meth:`apply_match` when a
      match is appended. Every player on a side receives the same deltas.
    - Team standings are never stored; :meth:`team_standings` folds the full
      match list each time.
    - Player points follow the injected :class:`PointsConfig`; team standings
      keep the fixed 3/1 scale.
    """

    def __init__(self, points: PointsConfig | None = None) -> None:
        self.points = points or PointsConfig()

    # --------------------------- Player totals ---------------------------
    def apply_match(self, league: League, match: MatchRecord) -> None:
        pair = effective_pair(match.score)
        if match.result == MatchResult.TEAM1:
            t1, t2 = {"wins": 1}, {"losses": 1}
        elif match.result == MatchResult.TEAM2:
            t1, t2 = {"losses": 1}, {"wins": 1}
        else:
            t1, t2 = {"draws": 1}, {"draws": 1}

        for player in match.team1:
            self._bump(league, player, goals_for=pair.team1, goals_against=pair.team2, **t1)
        for player in match.team2:
            self._bump(league, player, goals_for=pair.team2, goals_against=pair.team1, **t2)

    def rebuild_player_totals(self, league: League) -> None:
        """Recompute player totals from the stored matches."""
        league.player_totals = {}
        for match in league.all_matches():
            self.apply_match(league, match)

    @staticmethod
    def _bump(league: League, player: PlayerName, **deltas: int) -> None:
        current = league.player_totals.get(player, PlayerTotals())
        league.player_totals[player] = current.plus(**deltas)

    def player_table(self, league: League, mode: StatsMode = StatsMode.RAW) -> list[StandingRow]:
        rows = [
            StandingRow(
                team_id=name,
                players=(name,),
                played=t.played,
                won=t.wins,
                drawn=t.draws,
                lost=t.losses,
                goals_for=t.goals_for,
                goals_against=t.goals_against,
                goal_difference=t.goals_for - t.goals_against,
                points=self.points.score(t),
            )
            for name, t in league.player_totals.items()
        ]
        return self.present(rows, mode)

    # --------------------------- Team standings ---------------------------
    def team_standings(
        self,
        matches: Sequence[MatchRecord],
        *,
        partnerships_only: bool = False,
        mode: StatsMode = StatsMode.RAW,
    ) -> list[StandingRow]:
        table: dict[str, dict[str, int]] = {}
        rosters: dict[str, tuple[str, ...]] = {}

        def row_for(roster: tuple[str, ...]) -> dict[str, int]:
            tid = team_id(roster)
            if tid not in table:
                table[tid] = {k: 0 for k in _METRICS}
                rosters[tid] = roster
            return table[tid]

        for match in matches:
            a = row_for(match.team1)
            b = row_for(match.team2)
            gf_a, gf_b = match.score.regular.team1, match.score.regular.team2
            a["played"] += 1
            b["played"] += 1
            a["goals_for"] += gf_a
            a["goals_against"] += gf_b
            b["goals_for"] += gf_b
            b["goals_against"] += gf_a

            if match.result == MatchResult.TEAM1:
                a["won"] += 1
                a["points"] += TEAM_POINTS_WIN
                b["lost"] += 1
            elif match.result == MatchResult.TEAM2:
                b["won"] += 1
                b["points"] += TEAM_POINTS_WIN
                a["lost"] += 1
            else:
                a["drawn"] += 1
                b["drawn"] += 1
                a["points"] += TEAM_POINTS_DRAW
                b["points"] += TEAM_POINTS_DRAW

            a["goal_difference"] = a["goals_for"] - a["goals_against"]
            b["goal_difference"] = b["goals_for"] - b["goals_against"]

        rows = [StandingRow(team_id=tid, players=rosters[tid], **vals) for tid, vals in table.items()]
        if partnerships_only:
            rows = [r for r in rows if len(r.players) > 1]
        return self.present(rows, mode)

    # --------------------------- Presentation ---------------------------
    def present(self, rows: Sequence[StandingRow], mode: StatsMode = StatsMode.RAW) -> list[StandingRow]:
        """Apply a presentation mode and sort by points, goal difference, goals for."""
        mode = StatsMode(mode)
        out = list(rows)
        if mode != StatsMode.RAW:
            max_played = max((r.played for r in out), default=0)
            out = [_scale(r, mode, max_played) for r in out]
        out.sort(key=lambda r: (-r.points, -r.goal_difference, -r.goals_for))
        return out


def _scale(row: StandingRow, mode: StatsMode, max_played: float) -> StandingRow:
    played = row.played
    changes: dict[str, float] = {}
    for f in fields(row):
        if f.name in ("team_id", "players"):
            continue
        value = getattr(row, f.name)
        if not played:
            changes[f.name] = 0
        elif mode == StatsMode.PER_GAME:
            changes[f.name] = _round1(value / played)
        else:
            changes[f.name] = _round1(value / played * (max_played or played))
    return replace(row, **changes)
