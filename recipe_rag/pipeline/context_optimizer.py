"""
Pipeline Stage 3b: Context packing.

Greedy walk over the ranked results in order.  Each result is rendered
as a fixed block; blocks are accepted while the running total stays
within the character budget, and the walk stops at the first block
that does not fit (no skipping ahead to smaller ones).

Context quality (0..1):
    w_rel  * mean relevance
  + w_div  * min(1, distinct difficulty levels / 3)
  + w_thr  * share of results with relevance above the threshold
"""

from __future__ import annotations

from recipe_rag.core.config import Settings, settings
from recipe_rag.schemas.retrieval import ContextWindow, RankedResult, SearchResult
from recipe_rag.utils.logging import get_logger

logger = get_logger("recipe_rag.pipeline.context_optimizer")

# easy / medium / hard
DIFFICULTY_LEVELS = 3


def format_result_for_context(result: SearchResult, ingredient_limit: int | None = None) -> str:
    limit = ingredient_limit if ingredient_limit is not None else settings.context_ingredient_limit
    return (
        f"Recipe: {result.title}\n"
        f"Description: {result.description}\n"
        f"Ingredients: {', '.join(result.ingredients[:limit])}\n"
        f"Difficulty: {result.difficulty}\n"
        f"Cooking time: {result.cooking_time} minutes\n"
        "---\n"
    )


def evaluate_context_quality(results: list[SearchResult], cfg: Settings | None = None) -> float:
    cfg = cfg or settings
    if not results:
        return 0.0

    n = len(results)
    mean_relevance = sum(r.relevance_score for r in results) / n
    diversity = min(1.0, len({r.difficulty for r in results}) / DIFFICULTY_LEVELS)
    above = sum(1 for r in results if r.relevance_score > cfg.quality_relevance_threshold) / n

    quality = (
        cfg.quality_relevance_weight * mean_relevance
        + cfg.quality_diversity_weight * diversity
        + cfg.quality_threshold_weight * above
    )
    return max(0.0, min(1.0, quality))


def optimize_context(
    ranked: list[RankedResult],
    budget: int | None = None,
    cfg: Settings | None = None,
) -> ContextWindow:
    cfg = cfg or settings
    budget = budget if budget is not None else cfg.context_budget_chars

    accepted: list[RankedResult] = []
    total = 0
    for result in ranked:
        block_len = len(format_result_for_context(result, cfg.context_ingredient_limit))
        if total + block_len > budget:
            break
        accepted.append(result)
        total += block_len

    quality = evaluate_context_quality(accepted, cfg)
    logger.info(
        "[CONTEXT] accepted %d/%d results (%d/%d chars) quality=%.2f",
        len(accepted), len(ranked), total, budget, quality,
    )
    return ContextWindow(results=accepted, quality=quality, total_length=total, budget=budget)
