from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..domain.entities import League


class LeagueRepo(ABC):
    """Document store for :class:`League` aggregates.

    Each league is written as one document; ``save`` replaces it atomically
    and the last write wins.
    """

    @abstractmethod
    def get(self, league_id: str) -> Optional[League]:
        """Return the league document if present."""

    @abstractmethod
    def save(self, league: League) -> None:
        """Insert or replace the whole league document."""

    @abstractmethod
    def delete(self, league_id: str) -> None:
        """Remove a league document."""

    @abstractmethod
    def list_ids(self, *, limit: int = 100, offset: int = 0) -> list[str]:
        """List stored league identifiers with pagination."""
