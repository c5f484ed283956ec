"""
Pipeline Stage 4c: Result composition.

Turns the generated text and the packed context into a RAGResult:
citations, confidence, a one-line reasoning trace and templated
follow-up suggestions.  No LLM calls.
"""

from __future__ import annotations

from recipe_rag.prompts.constants import (
    DEFAULT_SUGGESTIONS,
    EMPTY_RETRIEVAL_REASONING,
    EMPTY_RETRIEVAL_RESPONSE,
    MAX_SUGGESTIONS,
    MIN_SUGGESTIONS,
)
from recipe_rag.schemas.analysis import QueryAnalysis, QueryIntent
from recipe_rag.schemas.pipeline import GenerationOutcome
from recipe_rag.schemas.response import RAGMetadata, RAGResult, SourceCitation
from recipe_rag.schemas.retrieval import ContextWindow, RankedResult
from recipe_rag.utils.text import truncate

MAX_CONFIDENCE = 95.0
SNIPPET_CHARS = 150

# keyword (matched against entity values) -> follow-up
_ENTITY_SUGGESTIONS: list[tuple[tuple[str, ...], str]] = [
    (("vegan", "vegetarian", "plant"), "Would you like more plant-based recipes like this one?"),
    (("gluten",), "Shall I suggest gluten-free swaps for the other ingredients?"),
    (("chicken", "beef", "pork", "fish", "tofu"), "Want other dishes that use the same main protein?"),
    (("quick", "minute", "fast", "hour"), "Should I look for even faster recipes?"),
    (("bake", "baking", "oven", "roast"), "Would you like tips for getting the oven temperature right?"),
]

_INTENT_SUGGESTIONS: dict[str, str] = {
    QueryIntent.RECIPE_SEARCH.value: "Would you like to see other similar recipes?",
    QueryIntent.COOKING_HELP.value: "Is there another step you're stuck on?",
    QueryIntent.NUTRITION_ADVICE.value: "Are you curious about the nutrition facts for this dish?",
    QueryIntent.INGREDIENT_SUBSTITUTE.value: "Need a substitute for another ingredient?",
    QueryIntent.GENERAL_CHAT.value: "Shall I recommend something to cook today?",
}


def build_sources(window: ContextWindow) -> list[SourceCitation]:
    return [
        SourceCitation(
            source_id=r.source_id,
            title=r.title,
            snippet=truncate(r.description, SNIPPET_CHARS),
            relevance=round(r.relevance_score, 4),
        )
        for r in window.results
    ]


def build_reasoning(results: list[RankedResult]) -> str:
    if not results:
        return EMPTY_RETRIEVAL_REASONING
    mean = sum(r.relevance_score for r in results) / len(results)
    return (
        f"Selected the best-fitting information from {len(results)} related "
        f"recipe(s); their average relevance is {mean * 100:.1f}%."
    )


def build_suggestions(analysis: QueryAnalysis | None) -> list[str]:
    """2-4 follow-ups picked by keyword matching on the analysis."""
    picked: list[str] = []

    if analysis is not None:
        entities = analysis.entities
        values = [
            *entities.ingredients,
            *entities.dietary_restrictions,
            entities.cuisine_type or "",
            entities.cooking_method or "",
            entities.time_constraint or "",
        ]
        haystack = " ".join(values).lower()
        for keywords, suggestion in _ENTITY_SUGGESTIONS:
            if any(k in haystack for k in keywords) and suggestion not in picked:
                picked.append(suggestion)
        if entities.cuisine_type:
            picked.append(f"Want to explore more {entities.cuisine_type} dishes?")

        intent_suggestion = _INTENT_SUGGESTIONS.get(analysis.intent)
        if intent_suggestion and intent_suggestion not in picked:
            picked.append(intent_suggestion)

    for default in DEFAULT_SUGGESTIONS:
        if len(picked) >= MIN_SUGGESTIONS:
            break
        if default not in picked:
            picked.append(default)

    return picked[:MAX_SUGGESTIONS]


def compose_result(
    outcome: GenerationOutcome,
    window: ContextWindow,
    analysis: QueryAnalysis | None,
    *,
    strategy_name: str,
    model_used: str,
    processing_time_ms: float,
    stage_timings: dict[str, float] | None = None,
) -> RAGResult:
    confidence = min(window.quality * 100, MAX_CONFIDENCE)
    return RAGResult(
        response=outcome.text.strip(),
        sources=build_sources(window),
        confidence=max(0.0, confidence),
        reasoning=build_reasoning(window.results),
        suggestions=build_suggestions(analysis),
        metadata=RAGMetadata(
            processing_time_ms=processing_time_ms,
            search_strategy=strategy_name,
            model_used=model_used,
            context_quality=window.quality,
            stage_timings=dict(stage_timings or {}),
            generation_calls=outcome.calls,
            regenerated=outcome.regenerated,
            analysis_degraded=bool(analysis and analysis.degraded),
        ),
    )


def compose_empty_result(
    analysis: QueryAnalysis | None,
    *,
    strategy_name: str,
    model_used: str,
    processing_time_ms: float,
    stage_timings: dict[str, float] | None = None,
) -> RAGResult:
    """Fixed answer for the nothing-retrieved branch; no generation call was made."""
    return RAGResult(
        response=EMPTY_RETRIEVAL_RESPONSE,
        sources=[],
        confidence=0.0,
        reasoning=EMPTY_RETRIEVAL_REASONING,
        suggestions=build_suggestions(analysis),
        metadata=RAGMetadata(
            processing_time_ms=processing_time_ms,
            search_strategy=strategy_name,
            model_used=model_used,
            context_quality=0.0,
            stage_timings=dict(stage_timings or {}),
            generation_calls=0,
            analysis_degraded=bool(analysis and analysis.degraded),
        ),
    )
