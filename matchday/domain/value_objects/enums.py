from enum import Enum


class MatchResult(str, Enum):
    TEAM1 = "team1"
    TEAM2 = "team2"
    DRAW = "draw"


class ScoreKind(str, Enum):
    REGULAR_ONLY = "regular_only"
    WITH_EXTRA_TIME = "with_extra_time"
    WITH_PENALTIES = "with_penalties"


class StatsMode(str, Enum):
    RAW = "raw"
    PER_GAME = "per_game"
    PROJECTED = "projected"


class LockSide(str, Enum):
    HOME = "home"
    AWAY = "away"
    NEUTRAL = "neutral"
