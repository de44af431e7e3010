from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..value_objects.ids import LeagueId


class AdminCredential(BaseModel):
    """Salted PIN hash for one league. ``version`` only ever increases."""

    pin_hash: str = Field(..., min_length=1, description="Hex encoded scrypt digest")
    salt: str = Field(..., min_length=1, description="Hex encoded salt")
    version: int = Field(..., ge=1)
    set_at: datetime | None = None

    model_config = ConfigDict(frozen=True)


class AdminClaim(BaseModel):
    """Signed assertion of admin privilege for one principal and league."""

    session_id: str
    principal: str
    league_id: LeagueId
    version: int = Field(..., ge=1)
    issued_at: datetime
    expires_at: datetime
    admin: bool = True

    model_config = ConfigDict(frozen=True)

    @field_validator("issued_at", "expires_at", mode="before")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("claim times must be timezone-aware")
        return v.astimezone(timezone.utc)

    def expired(self, now: datetime) -> bool:
        return now >= self.expires_at
