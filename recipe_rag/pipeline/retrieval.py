"""
Pipeline Stage 2b: Multi-modal retrieval.

1. Launch one task per enabled modality (vector, keyword,
   personalized, expanded) inside a TaskGroup
2. Each task owns its timeout and turns any failure into an empty list,
   so no modality can cancel its siblings
3. Merge in modality-priority order: first occurrence of a source id
   wins and its relevance is scaled by that modality's weight

NO ranking here; the merged list is returned unsorted.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Mapping

from recipe_rag.core.config import Settings, settings
from recipe_rag.pipeline.query_expansion import expand_query
from recipe_rag.schemas.retrieval import MODALITY_ORDER, Modality, SearchResult, SearchStrategy
from recipe_rag.services.collaborators import GenerationBackend, SearchBackend
from recipe_rag.utils.logging import get_logger

logger = get_logger("recipe_rag.pipeline.retrieval")


async def retrieve_multi_modal(
    text: str,
    strategy: SearchStrategy,
    search: SearchBackend,
    generator: GenerationBackend | None = None,
    *,
    user_id: str | None = None,
    max_results: int | None = None,
    cfg: Settings | None = None,
) -> list[SearchResult]:
    cfg = cfg or settings
    k = max_results or cfg.default_max_results
    timeout = cfg.retrieval_timeout_s

    async def _expanded_search() -> list[SearchResult]:
        expanded = await expand_query(text, generator, cfg)
        return await search.vector_search(expanded, max(1, k // 2))

    calls: dict[Modality, tuple[Awaitable[list[SearchResult]], float]] = {}
    if strategy.vector_weight > 0:
        calls[Modality.VECTOR] = (search.vector_search(text, k), timeout)
    if strategy.keyword_weight > 0:
        calls[Modality.KEYWORD] = (search.keyword_search(text, k), timeout)
    if strategy.use_personalization and user_id:
        calls[Modality.PERSONALIZED] = (search.personalized_search(text, user_id, k), timeout)
    if strategy.expand_query and generator is not None:
        calls[Modality.EXPANDED] = (_expanded_search(), timeout + cfg.expansion_timeout_s)

    logger.info(
        "[RETRIEVAL] strategy=%s modalities=%s k=%d",
        strategy.name, [m.value for m in calls], k,
    )

    async with asyncio.TaskGroup() as tg:
        tasks = {
            modality: tg.create_task(_safe_search(modality, call, limit))
            for modality, (call, limit) in calls.items()
        }
    outcomes = {modality: task.result() for modality, task in tasks.items()}

    merged = merge_results(outcomes, strategy, cfg)
    logger.info(
        "[RETRIEVAL] %s -> %d merged",
        {m.value: len(r) for m, r in outcomes.items()}, len(merged),
    )
    return merged


async def _safe_search(
    modality: Modality,
    call: Awaitable[list[SearchResult]],
    timeout: float,
) -> list[SearchResult]:
    """Per-modality outcome: the results, or [] on any failure."""
    try:
        results = await asyncio.wait_for(call, timeout=timeout)
    except TimeoutError:
        logger.warning("[RETRIEVAL] %s search timed out after %.1fs", modality.value, timeout)
        return []
    except Exception as e:
        logger.warning("[RETRIEVAL] %s search failed: %s: %s", modality.value, type(e).__name__, e)
        return []
    return [r.model_copy(update={"modality": modality.value}) for r in results or []]


def modality_weight(modality: Modality, strategy: SearchStrategy, cfg: Settings | None = None) -> float:
    cfg = cfg or settings
    return {
        Modality.VECTOR: strategy.vector_weight,
        Modality.KEYWORD: strategy.keyword_weight,
        Modality.PERSONALIZED: cfg.personalization_multiplier,
        Modality.EXPANDED: cfg.expansion_multiplier,
    }[modality]


def merge_results(
    outcomes: Mapping[Modality, list[SearchResult]],
    strategy: SearchStrategy,
    cfg: Settings | None = None,
) -> list[SearchResult]:
    """Deduplicate by source id (first writer wins) and apply modality weights."""
    seen: set[str] = set()
    merged: list[SearchResult] = []

    for modality in MODALITY_ORDER:
        weight = modality_weight(modality, strategy, cfg)
        for result in outcomes.get(modality, []):
            if result.source_id in seen:
                continue
            seen.add(result.source_id)
            merged.append(result.model_copy(update={
                "relevance_score": result.relevance_score * weight,
                "modality": modality.value,
            }))

    return merged
