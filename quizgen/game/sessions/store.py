from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar
from uuid import UUID

from cachetools import LRUCache

from quizgen.game.sessions.errors import SessionNotFoundError
from quizgen.game.sessions.types import QuizSessionState

T = TypeVar("T")


@dataclass(slots=True)
class _SessionEntry:
    state: QuizSessionState
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionStore:
    """In-memory session registry; each session is updated under its own lock."""

    def __init__(self, max_sessions: int = 10000) -> None:
        self._entries: LRUCache[UUID, _SessionEntry] = LRUCache(maxsize=max(1, max_sessions))

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, state: QuizSessionState) -> None:
        self._entries[state.session_id] = _SessionEntry(state=state)

    def _entry(self, session_id: UUID) -> _SessionEntry:
        entry = self._entries.get(session_id)
        if entry is None:
            raise SessionNotFoundError
        return entry

    async def transition(
        self,
        session_id: UUID,
        apply: Callable[[QuizSessionState], tuple[QuizSessionState, T]],
    ) -> T:
        entry = self._entry(session_id)
        async with entry.lock:
            updated, result = apply(entry.state)
            entry.state = updated
        return result
