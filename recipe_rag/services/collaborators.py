"""
Narrow interfaces the engine consumes.

The engine never imports a concrete backend; anything with these
method shapes can be injected (real adapters in this package, fakes in
tests).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from recipe_rag.schemas.query import ConversationTurn
from recipe_rag.schemas.retrieval import SearchResult


@runtime_checkable
class SearchBackend(Protocol):
    async def vector_search(self, text: str, k: int) -> list[SearchResult]: ...

    async def keyword_search(self, text: str, k: int) -> list[SearchResult]: ...

    async def personalized_search(self, text: str, user_id: str, k: int) -> list[SearchResult]: ...


@runtime_checkable
class PersonalizationScorer(Protocol):
    async def score(self, user_id: str, source_id: str, base_score: float) -> float: ...


@runtime_checkable
class GenerationBackend(Protocol):
    model_name: str

    async def generate_text(self, prompt: str, *, temperature: float, max_tokens: int) -> str: ...


@runtime_checkable
class HistoryStore(Protocol):
    def get(self, session_id: str) -> list[ConversationTurn]: ...

    def put(self, session_id: str, turns: list[ConversationTurn]) -> None: ...

    def evict(self, session_id: str) -> None: ...
