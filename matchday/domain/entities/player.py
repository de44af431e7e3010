from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field


class PlayerTotals(BaseModel):
    """Running per-player aggregates over appended matches."""

    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    draws: int = Field(default=0, ge=0)
    goals_for: int = Field(default=0, ge=0)
    goals_against: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def played(self) -> int:
        return self.wins + self.losses + self.draws

    def plus(
        self,
        *,
        wins: int = 0,
        losses: int = 0,
        draws: int = 0,
        goals_for: int = 0,
        goals_against: int = 0,
    ) -> "PlayerTotals":
        return PlayerTotals(
            wins=self.wins + wins,
            losses=self.losses + losses,
            draws=self.draws + draws,
            goals_for=self.goals_for + goals_for,
            goals_against=self.goals_against + goals_against,
        )

    def to_document(self) -> dict[str, int]:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "goalsFor": self.goals_for,
            "goalsAgainst": self.goals_against,
        }

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "PlayerTotals":
        return cls(
            wins=int(doc.get("wins") or 0),
            losses=int(doc.get("losses") or 0),
            draws=int(doc.get("draws") or 0),
            goals_for=int(doc.get("goalsFor") or 0),
            goals_against=int(doc.get("goalsAgainst") or 0),
        )
