from __future__ import annotations

from ..value_objects.enums import MatchResult
from ..value_objects.score import ScoreLine, ScorePair


def effective_pair(score: ScoreLine) -> ScorePair:
    """Return the stage that decides the match: penalties, then extra time, then regular."""
    if score.penalties is not None:
        return score.penalties
    if score.extra_time is not None:
        return score.extra_time
    return score.regular


def resolve_result(score: ScoreLine) -> MatchResult:
    pair = effective_pair(score)
    if pair.team1 > pair.team2:
        return MatchResult.TEAM1
    if pair.team1 < pair.team2:
        return MatchResult.TEAM2
    return MatchResult.DRAW
