"""
Bounded in-memory conversation history.

Sessions are kept in LRU order; the least recently used session is
dropped once ``max_sessions`` is exceeded, each session keeps only its
last ``max_turns`` turns, and sessions untouched for ``ttl_s`` seconds
are treated as gone.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable

from recipe_rag.core.config import settings
from recipe_rag.schemas.query import ConversationTurn
from recipe_rag.utils.logging import get_logger

logger = get_logger("recipe_rag.services.history_store")


class InMemoryHistoryStore:
    def __init__(
        self,
        max_sessions: int | None = None,
        max_turns: int | None = None,
        ttl_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_sessions = max_sessions or settings.history_max_sessions
        self.max_turns = max_turns or settings.history_max_turns
        self.ttl_s = ttl_s if ttl_s is not None else settings.history_ttl_s
        self._clock = clock
        self._lock = threading.Lock()
        # session_id -> (last_touched, turns)
        self._sessions: OrderedDict[str, tuple[float, list[ConversationTurn]]] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _expired(self, touched: float, now: float) -> bool:
        return self.ttl_s > 0 and now - touched > self.ttl_s

    def get(self, session_id: str) -> list[ConversationTurn]:
        now = self._clock()
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return []
            touched, turns = entry
            if self._expired(touched, now):
                del self._sessions[session_id]
                logger.debug("History for session %s expired", session_id)
                return []
            self._sessions.move_to_end(session_id)
            return list(turns)

    def put(self, session_id: str, turns: list[ConversationTurn]) -> None:
        now = self._clock()
        with self._lock:
            self._sessions[session_id] = (now, list(turns)[-self.max_turns:])
            self._sessions.move_to_end(session_id)
            while len(self._sessions) > self.max_sessions:
                dropped, _ = self._sessions.popitem(last=False)
                logger.debug("History for session %s evicted (LRU)", dropped)

    def append(self, session_id: str, *turns: ConversationTurn) -> None:
        self.put(session_id, self.get(session_id) + list(turns))

    def evict(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
