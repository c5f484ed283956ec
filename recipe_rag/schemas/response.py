"""
Schemas for the composed answer and the HTTP layer.

RAGResult is the engine's output.  QueryRequest / SearchRequest are the
external API contract; they convert into the engine's own types.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from recipe_rag.schemas.query import ContextType, ConversationTurn, Query
from recipe_rag.schemas.retrieval import SearchOptions, StrategyName


# ── Engine output ───────────────────────────────────────────────────
class SourceCitation(BaseModel):
    """Citation-sized projection of one recipe shown to the model."""
    source_id: str
    title: str
    snippet: str = ""
    relevance: float = 0.0


class RAGMetadata(BaseModel):
    """Diagnostic metadata attached to every answer."""
    processing_time_ms: float = 0.0
    search_strategy: str = ""
    model_used: str = ""
    context_quality: float = 0.0
    stage_timings: dict[str, float] = Field(default_factory=dict)
    generation_calls: int = 0
    regenerated: bool = False
    analysis_degraded: bool = False


class RAGResult(BaseModel):
    """
    Complete engine output.  Same shape whether the answer came from
    the full pipeline or the empty-retrieval branch.
    """
    response: str
    sources: list[SourceCitation] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    reasoning: str = ""
    suggestions: list[str] = Field(default_factory=list)
    metadata: RAGMetadata = Field(default_factory=RAGMetadata)


# ── External API schemas ────────────────────────────────────────────
class QueryRequest(BaseModel):
    query: str = Field(..., min_length=1)
    user_id: str | None = None
    session_id: str | None = None
    context_type: ContextType = ContextType.RECIPE_SEARCH
    max_results: int = Field(default=10, ge=1, le=50)
    conversation_history: list[ConversationTurn] | None = None

    def to_query(self) -> Query:
        return Query(
            text=self.query,
            user_id=self.user_id,
            session_id=self.session_id,
            context_type=self.context_type,
            max_results=self.max_results,
            conversation_history=self.conversation_history,
        )


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    k: int = Field(default=10, ge=1, le=50)
    user_id: str | None = None
    strategy: StrategyName = StrategyName.VECTOR_PRIMARY
    expand_query: bool = False
    min_score: float = Field(default=0.3, ge=0.0, le=1.0)

    def to_options(self) -> SearchOptions:
        return SearchOptions(
            k=self.k,
            user_id=self.user_id,
            strategy=self.strategy,
            expand_query=self.expand_query,
            min_score=self.min_score,
        )
