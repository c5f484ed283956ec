"""
PipelineContext carries state between the engine's stages.

Created once per query and progressively enriched; discarded after the
RAGResult is returned.
"""

from __future__ import annotations

import time
from enum import Enum

from pydantic import BaseModel, Field

from recipe_rag.schemas.analysis import QueryAnalysis
from recipe_rag.schemas.query import ConversationTurn, Query
from recipe_rag.schemas.retrieval import ContextWindow, RankedResult, SearchResult, SearchStrategy


class GenerationAttempt(str, Enum):
    PRIMARY = "primary"
    RETRY = "retry"


class GenerationOutcome(BaseModel):
    """Result of the verified generation loop."""
    text: str
    quality_score: float
    final_attempt: GenerationAttempt = GenerationAttempt.PRIMARY
    calls: int = 1
    regeneration_failed: bool = False

    @property
    def regenerated(self) -> bool:
        return self.final_attempt == GenerationAttempt.RETRY


class PipelineContext(BaseModel):
    """Shared context threaded through all pipeline stages."""

    # ── Inputs ───────────────────────────────────────────────────────
    query: Query
    history: list[ConversationTurn] = Field(default_factory=list)

    # ── Stage outputs (populated progressively) ─────────────────────
    analysis: QueryAnalysis | None = None
    strategy: SearchStrategy | None = None
    retrieved: list[SearchResult] = Field(default_factory=list)
    ranked: list[RankedResult] = Field(default_factory=list)
    context_window: ContextWindow | None = None
    prompt: str = ""
    generation: GenerationOutcome | None = None

    # ── Timing ──────────────────────────────────────────────────────
    start_time: float = Field(default_factory=time.perf_counter)
    stage_timings: dict[str, float] = Field(default_factory=dict)

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000
