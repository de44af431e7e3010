from typing import NewType

LeagueId = NewType("LeagueId", str)
PlayerName = NewType("PlayerName", str)
MatchId = NewType("MatchId", str)
TeamId = NewType("TeamId", str)
