from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator


@dataclass(frozen=True)
class MatchCreated:
    """Emitted once a match has been durably appended to a league."""

    league_id: str
    match_id: str


class EventQueue:
    """In-process FIFO of creation events consumed out-of-band.

    Producers ``publish`` after their write has committed; consumers
    ``drain`` at their own pace. Nothing is persisted: events lost on
    shutdown are recovered by read-time reconciliation.
    """

    def __init__(self) -> None:
        self._events: Deque[MatchCreated] = deque()

    def publish(self, event: MatchCreated) -> None:
        self._events.append(event)

    def drain(self) -> Iterator[MatchCreated]:
        while self._events:
            yield self._events.popleft()

    def __len__(self) -> int:
        return len(self._events)
