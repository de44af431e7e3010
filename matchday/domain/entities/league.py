"""League aggregate.

A league is stored as one document: roster, running totals, seasons with
their matches, and the admin credential. Services load it, mutate it in
memory and write it back in a single store call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator, Mapping, Optional

from ..rules.lock import parse_timestamp
from ..value_objects.ids import LeagueId, PlayerName
from .credential import AdminCredential
from .match import MatchRecord
from .player import PlayerTotals


def _iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class Season:
    number: int
    start_date: datetime
    matches: list[MatchRecord] = field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        return {
            "startDate": _iso(self.start_date),
            "matches": [m.to_document() for m in self.matches],
        }

    @classmethod
    def from_document(cls, number: int, doc: Mapping[str, Any]) -> "Season":
        start = parse_timestamp(doc.get("startDate")) or datetime.fromtimestamp(0, timezone.utc)
        return cls(
            number=int(number),
            start_date=start,
            matches=[MatchRecord.from_document(m) for m in doc.get("matches") or []],
        )


@dataclass(frozen=True)
class MatchLocation:
    season: int
    index: int


@dataclass
class League:
    league_id: LeagueId
    players: list[PlayerName] = field(default_factory=list)
    presence: dict[PlayerName, bool] = field(default_factory=dict)
    current_season: int = 1
    total_matches: int = 0
    player_totals: dict[PlayerName, PlayerTotals] = field(default_factory=dict)
    seasons: dict[int, Season] = field(default_factory=dict)
    credential: Optional[AdminCredential] = None

    # --------------------------- Matches ---------------------------
    def iter_matches(self) -> Iterator[tuple[MatchLocation, MatchRecord]]:
        """Yield every match, seasons ascending, matches in insertion order."""
        for number in sorted(self.seasons):
            for index, match in enumerate(self.seasons[number].matches):
                yield MatchLocation(number, index), match

    def all_matches(self) -> list[MatchRecord]:
        return [m for _, m in self.iter_matches()]

    def locate_timestamp(self, timestamp: str) -> Optional[MatchLocation]:
        for loc, match in self.iter_matches():
            if match.timestamp == timestamp:
                return loc
        return None

    def locate_id(self, match_id: str) -> Optional[MatchLocation]:
        for loc, match in self.iter_matches():
            if match.match_id == match_id:
                return loc
        return None

    def match_at(self, loc: MatchLocation) -> MatchRecord:
        return self.seasons[loc.season].matches[loc.index]

    def replace_match(self, loc: MatchLocation, match: MatchRecord) -> None:
        self.seasons[loc.season].matches[loc.index] = match

    def ensure_season(self, number: int, start_date: datetime) -> Season:
        season = self.seasons.get(number)
        if season is None:
            season = Season(number=number, start_date=start_date)
            self.seasons[number] = season
        return season

    # --------------------------- Players ---------------------------
    def register_player(self, name: PlayerName) -> None:
        if name not in self.players:
            self.players.append(name)

    def is_present(self, name: PlayerName) -> bool:
        return self.presence.get(name, True)

    # --------------------------- Serialisation ---------------------------
    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "players": list(self.players),
            "presence": dict(self.presence),
            "currentSeason": self.current_season,
            "overallStats": {
                "totalMatches": self.total_matches,
                "players": {name: t.to_document() for name, t in self.player_totals.items()},
            },
            "seasons": {str(n): s.to_document() for n, s in sorted(self.seasons.items())},
        }
        if self.credential is not None:
            doc.update(
                adminPinHash=self.credential.pin_hash,
                adminPinSalt=self.credential.salt,
                adminPinVersion=self.credential.version,
                adminPinSetAt=_iso(self.credential.set_at),
            )
        return doc

    @classmethod
    def from_document(cls, league_id: str, doc: Mapping[str, Any]) -> "League":
        overall = doc.get("overallStats") or {}
        credential = None
        if doc.get("adminPinHash") and doc.get("adminPinSalt"):
            credential = AdminCredential(
                pin_hash=str(doc["adminPinHash"]),
                salt=str(doc["adminPinSalt"]),
                version=int(doc.get("adminPinVersion") or 1),
                set_at=parse_timestamp(doc.get("adminPinSetAt")),
            )
        return cls(
            league_id=LeagueId(league_id),
            players=list(doc.get("players") or []),
            presence=dict(doc.get("presence") or {}),
            current_season=int(doc.get("currentSeason") or 1),
            total_matches=int(overall.get("totalMatches") or 0),
            player_totals={
                name: PlayerTotals.from_document(t)
                for name, t in (overall.get("players") or {}).items()
            },
            seasons={
                int(n): Season.from_document(int(n), s)
                for n, s in (doc.get("seasons") or {}).items()
            },
            credential=credential,
        )
