from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import InvalidArgument
from .enums import ScoreKind


class ScorePair(BaseModel):
    """Goals for both sides at one stage of a match."""

    team1: int = Field(..., ge=0, description="Goals for team 1")
    team2: int = Field(..., ge=0, description="Goals for team 2")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def optional(cls, team1: Optional[int], team2: Optional[int], stage: str) -> "ScorePair | None":
        """Build a pair from two optional values; both or neither must be given."""
        if team1 is None and team2 is None:
            return None
        if team1 is None or team2 is None:
            raise InvalidArgument(f"{stage} score must have both values or neither")
        return cls(team1=team1, team2=team2)


class ScoreLine(BaseModel):
    """Regular-time score plus the optional extra-time and penalties stages.

    Each optional stage is stored as a whole :class:`ScorePair`, so a one-sided
    stage cannot be represented.
    """

    regular: ScorePair
    extra_time: ScorePair | None = None
    penalties: ScorePair | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> ScoreKind:
        if self.penalties is not None:
            return ScoreKind.WITH_PENALTIES
        if self.extra_time is not None:
            return ScoreKind.WITH_EXTRA_TIME
        return ScoreKind.REGULAR_ONLY

    @classmethod
    def from_fields(
        cls,
        team1_score: int,
        team2_score: int,
        team1_extra_time: Optional[int] = None,
        team2_extra_time: Optional[int] = None,
        team1_penalties: Optional[int] = None,
        team2_penalties: Optional[int] = None,
    ) -> "ScoreLine":
        if team1_score is None or team2_score is None:
            raise InvalidArgument("regular score requires both values")
        given = [
            v
            for v in (
                team1_score,
                team2_score,
                team1_extra_time,
                team2_extra_time,
                team1_penalties,
                team2_penalties,
            )
            if v is not None
        ]
        if any(isinstance(v, bool) or not isinstance(v, int) for v in given):
            raise InvalidArgument("scores must be whole numbers")
        if min(given) < 0:
            raise InvalidArgument("scores must be non-negative")
        return cls(
            regular=ScorePair(team1=team1_score, team2=team2_score),
            extra_time=ScorePair.optional(team1_extra_time, team2_extra_time, "extra-time"),
            penalties=ScorePair.optional(team1_penalties, team2_penalties, "penalties"),
        )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "ScoreLine":
        return cls.from_fields(
            doc.get("team1Score"),  # type: ignore[arg-type]
            doc.get("team2Score"),  # type: ignore[arg-type]
            doc.get("team1ExtraTimeScore"),
            doc.get("team2ExtraTimeScore"),
            doc.get("team1PenaltiesScore"),
            doc.get("team2PenaltiesScore"),
        )

    def to_document(self) -> dict[str, int]:
        out = {"team1Score": self.regular.team1, "team2Score": self.regular.team2}
        if self.extra_time is not None:
            out["team1ExtraTimeScore"] = self.extra_time.team1
            out["team2ExtraTimeScore"] = self.extra_time.team2
        if self.penalties is not None:
            out["team1PenaltiesScore"] = self.penalties.team1
            out["team2PenaltiesScore"] = self.penalties.team2
        return out
