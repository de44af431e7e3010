from .credential import AdminClaim, AdminCredential
from .league import League, MatchLocation, Season
from .match import MatchRecord
from .player import PlayerTotals

__all__ = [
    "AdminClaim",
    "AdminCredential",
    "League",
    "MatchLocation",
    "MatchRecord",
    "PlayerTotals",
    "Season",
]
