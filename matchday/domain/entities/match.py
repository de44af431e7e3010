from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..rules.lock import parse_timestamp
from ..rules.result import resolve_result
from ..value_objects.enums import MatchResult
from ..value_objects.ids import MatchId, PlayerName
from ..value_objects.score import ScoreLine

_META_FIELDS = {
    "team1_name": "team1Name",
    "team2_name": "team2Name",
    "team1_league": "team1League",
    "team2_league": "team2League",
}


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class MatchRecord(BaseModel):
    match_id: MatchId = Field(..., description="Generated unique identifier")
    team1: tuple[PlayerName, ...] = Field(..., min_length=1, description="Team 1 roster")
    team2: tuple[PlayerName, ...] = Field(..., min_length=1, description="Team 2 roster")
    score: ScoreLine
    result: MatchResult
    timestamp: str = Field(..., description="Logical event time, ISO-8601")
    created_at: datetime | None = Field(default=None, description="Ledger insertion time")
    lock_at: datetime | None = Field(default=None, description="Edit-lock boundary")
    player_presence: dict[PlayerName, bool] = Field(default_factory=dict)
    team1_name: str | None = None
    team2_name: str | None = None
    team1_league: str | None = None
    team2_league: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("team1", "team2")
    @classmethod
    def _names_not_blank(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(str(name).strip() for name in v)
        if any(not name for name in cleaned):
            raise ValueError("player names must not be blank")
        return cleaned

    @field_validator("created_at", "lock_at", mode="before")
    @classmethod
    def _ensure_utc(cls, v: Any) -> Any:
        if v is None:
            return None
        parsed = parse_timestamp(v)
        if parsed is None:
            raise ValueError("timestamp fields must be ISO-8601 datetimes")
        return parsed

    @model_validator(mode="after")
    def _result_matches_score(self) -> "MatchRecord":
        if self.result != resolve_result(self.score):
            raise ValueError("result does not match the recorded score")
        return self

    @property
    def players(self) -> tuple[PlayerName, ...]:
        """Distinct players of both rosters in roster order."""
        return tuple(dict.fromkeys(self.team1 + self.team2))

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "matchId": self.match_id,
            "team1": list(self.team1),
            "team2": list(self.team2),
            **self.score.to_document(),
            "result": self.result.value,
            "timestamp": self.timestamp,
            "playerPresence": dict(self.player_presence),
        }
        if self.created_at is not None:
            doc["createdAt"] = _iso(self.created_at)
        if self.lock_at is not None:
            doc["lockAt"] = _iso(self.lock_at)
        for attr, key in _META_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                doc[key] = value
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "MatchRecord":
        team1 = doc.get("team1") or []
        team2 = doc.get("team2") or []
        return cls(
            match_id=MatchId(str(doc.get("matchId") or doc.get("timestamp"))),
            team1=tuple(team1) if isinstance(team1, (list, tuple)) else (team1,),
            team2=tuple(team2) if isinstance(team2, (list, tuple)) else (team2,),
            score=ScoreLine.from_document(doc),
            result=MatchResult(doc.get("result")),
            timestamp=str(doc.get("timestamp")),
            created_at=doc.get("createdAt"),
            lock_at=doc.get("lockAt"),
            player_presence=dict(doc.get("playerPresence") or {}),
            **{attr: doc.get(key) for attr, key in _META_FIELDS.items()},
        )
