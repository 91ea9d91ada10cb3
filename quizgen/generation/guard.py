from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from quizgen.generation.errors import GenerationInProgressError

logger = structlog.get_logger(__name__)


class GenerationGuard:
    """Allows one in-flight generation per client key."""

    def __init__(self) -> None:
        self._in_flight: set[str] = set()

    def is_busy(self, key: str) -> bool:
        return key in self._in_flight

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        # No await between the check and the add, so this is atomic on the loop.
        if self.is_busy(key):
            logger.warning("quiz_generation_rejected_in_flight", client_key=key)
            raise GenerationInProgressError("generation already in progress")
        self._in_flight.add(key)
        try:
            yield
        finally:
            self._in_flight.discard(key)
