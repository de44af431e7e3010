from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class SessionRecord:
    """Server-side record of an issued admin claim."""

    session_id: str
    principal: str
    league_id: str
    version: int
    issued_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None


class SessionRepo(ABC):
    """Repository interface for admin sessions."""

    @abstractmethod
    def insert(self, record: SessionRecord) -> None:
        """Persist a newly issued session."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[SessionRecord]:
        """Return a session by identifier."""

    @abstractmethod
    def revoke_for_principal(self, principal: str, league_id: str, revoked_at: datetime) -> int:
        """Revoke every live session of ``principal`` for ``league_id``; return the count."""
