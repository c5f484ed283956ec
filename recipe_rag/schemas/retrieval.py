"""
Schemas for strategy selection, retrieval, re-ranking and context packing.

Every SearchResult carries a ``source_id`` that is unique after merge,
and the modality that produced it, so downstream code never has to
guess where a score came from.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class StrategyName(str, Enum):
    VECTOR_PRIMARY = "vector_primary"
    HYBRID_BALANCED = "hybrid_balanced"
    KEYWORD_FOCUSED = "keyword_focused"
    PERSONALIZED_DEEP = "personalized_deep"


class SearchStrategy(BaseModel):
    """Named preset of modality weights and flags."""

    name: StrategyName
    vector_weight: float = Field(ge=0.0)
    keyword_weight: float = Field(ge=0.0)
    use_personalization: bool = False
    expand_query: bool = False
    boost_personal_history: bool = False

    class Config:
        frozen = True
        use_enum_values = True


class Modality(str, Enum):
    """Retrieval modalities, in merge-priority order."""

    VECTOR = "vector"
    KEYWORD = "keyword"
    PERSONALIZED = "personalized"
    EXPANDED = "expanded"


MODALITY_ORDER: tuple[Modality, ...] = (
    Modality.VECTOR,
    Modality.KEYWORD,
    Modality.PERSONALIZED,
    Modality.EXPANDED,
)


class SearchResult(BaseModel):
    """One recipe returned by a retrieval collaborator."""

    source_id: str
    title: str
    description: str = ""
    relevance_score: float = 0.0
    personalized_score: float | None = None
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    difficulty: str = "medium"
    cooking_time: int = 0  # minutes
    modality: Modality | None = None

    class Config:
        use_enum_values = True


class RankedResult(SearchResult):
    """SearchResult plus the fused score used for ordering."""

    final_score: float = 0.0


class ContextWindow(BaseModel):
    """Results accepted under the character budget, best first."""

    results: list[RankedResult] = Field(default_factory=list)
    quality: float = Field(default=0.0, ge=0.0, le=1.0)
    total_length: int = 0
    budget: int = 0

    @property
    def mean_relevance(self) -> float:
        if not self.results:
            return 0.0
        return sum(r.relevance_score for r in self.results) / len(self.results)


class SearchOptions(BaseModel):
    """Options for retrieval-only calls (no answer generation)."""

    k: int = Field(default=10, ge=1, le=50)
    user_id: str | None = None
    strategy: StrategyName = StrategyName.VECTOR_PRIMARY
    expand_query: bool = False
    min_score: float = Field(default=0.3, ge=0.0, le=1.0)


class SearchOnlyResult(BaseModel):
    results: list[RankedResult] = Field(default_factory=list)
    search_time_ms: float = 0.0
    max_score: float = 0.0
