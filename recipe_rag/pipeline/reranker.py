"""
Pipeline Stage 3a: Re-ranking.

Without a user, the final score is the (modality-weighted) relevance.
With a user, each item is scored by the personalization collaborator
concurrently and fused:

    final = w_rel * relevance + w_pers * personalized

An item whose personalization call fails or times out keeps its
relevance as the final score.
"""

from __future__ import annotations

import asyncio

from recipe_rag.core.config import Settings, settings
from recipe_rag.schemas.retrieval import RankedResult, SearchResult
from recipe_rag.services.collaborators import PersonalizationScorer
from recipe_rag.utils.logging import get_logger

logger = get_logger("recipe_rag.pipeline.reranker")


async def rerank(
    results: list[SearchResult],
    scorer: PersonalizationScorer | None = None,
    user_id: str | None = None,
    cfg: Settings | None = None,
) -> list[RankedResult]:
    cfg = cfg or settings
    if not results:
        return []

    if not user_id or scorer is None:
        ranked = [
            RankedResult(**r.model_dump(), final_score=r.relevance_score)
            for r in results
        ]
        return sort_ranked(ranked)

    async with asyncio.TaskGroup() as tg:
        tasks = [
            tg.create_task(_safe_score(scorer, user_id, r, cfg.personalization_timeout_s))
            for r in results
        ]

    ranked = []
    failures = 0
    for r, task in zip(results, tasks):
        personalized = task.result()
        if personalized is None:
            failures += 1
            ranked.append(RankedResult(**r.model_dump(), final_score=r.relevance_score))
            continue
        fused = (
            cfg.fusion_relevance_weight * r.relevance_score
            + cfg.fusion_personalization_weight * personalized
        )
        data = r.model_dump()
        data["personalized_score"] = personalized
        ranked.append(RankedResult(**data, final_score=fused))

    if failures:
        logger.warning("[RERANK] personalization failed for %d/%d item(s)", failures, len(results))
    return sort_ranked(ranked)


async def _safe_score(
    scorer: PersonalizationScorer,
    user_id: str,
    result: SearchResult,
    timeout: float,
) -> float | None:
    try:
        return float(await asyncio.wait_for(
            scorer.score(user_id, result.source_id, result.relevance_score),
            timeout=timeout,
        ))
    except Exception as e:
        logger.debug("[RERANK] score failed for %s: %s", result.source_id, e)
        return None


def sort_ranked(ranked: list[RankedResult]) -> list[RankedResult]:
    return sorted(ranked, key=lambda r: r.final_score, reverse=True)
