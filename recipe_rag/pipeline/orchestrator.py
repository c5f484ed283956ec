"""
Pipeline Orchestrator: top-level entry point.

Runs analysis -> strategy -> retrieval -> re-ranking -> context packing
-> prompt -> verified generation -> composition, timing every stage.
Short-circuits with a fixed answer when retrieval finds nothing.

Only GenerationError (failed primary answer) reaches the caller; every
other stage degrades in place.
"""

from __future__ import annotations

import asyncio
import time

from recipe_rag.core.config import Settings, settings
from recipe_rag.pipeline.analyzer import analyze_query
from recipe_rag.pipeline.composer import compose_empty_result, compose_result
from recipe_rag.pipeline.context_optimizer import optimize_context
from recipe_rag.pipeline.generator import generate_verified
from recipe_rag.pipeline.prompt_builder import build_prompt
from recipe_rag.pipeline.reranker import rerank
from recipe_rag.pipeline.retrieval import retrieve_multi_modal
from recipe_rag.pipeline.strategy import get_strategy, select_strategy
from recipe_rag.schemas.pipeline import PipelineContext
from recipe_rag.schemas.query import ConversationRole, ConversationTurn, Query
from recipe_rag.schemas.response import RAGResult
from recipe_rag.schemas.retrieval import SearchOnlyResult, SearchOptions
from recipe_rag.services.collaborators import (
    GenerationBackend,
    HistoryStore,
    PersonalizationScorer,
    SearchBackend,
)
from recipe_rag.utils.logging import get_logger
from recipe_rag.utils.timing import Timer, timed

logger = get_logger("recipe_rag.pipeline.orchestrator")


class RAGEngine:
    """
    Stateless per query; collaborators are injected once.

    The history store is optional: without one, only the history passed
    on the Query itself is used.
    """

    def __init__(
        self,
        search: SearchBackend,
        generator: GenerationBackend,
        personalization: PersonalizationScorer | None = None,
        history_store: HistoryStore | None = None,
        cfg: Settings | None = None,
    ):
        self.search = search
        self.generator = generator
        self.personalization = personalization
        self.history_store = history_store
        self.cfg = cfg or settings

    @property
    def model_name(self) -> str:
        return getattr(self.generator, "model_name", "unknown")

    # ── Full pipeline ───────────────────────────────────────────────
    async def process_query(self, query: Query) -> RAGResult:
        ctx = PipelineContext(query=query, history=self._load_history(query))
        logger.info(
            "[PIPELINE] Started | type=%s user=%s | question: %s",
            query.context_type, query.user_id or "-", query.text[:80],
        )

        try:
            result = await self._run(ctx)
        except asyncio.CancelledError:
            logger.info("[PIPELINE] Cancelled after %.0fms", ctx.elapsed_ms)
            raise

        self._save_history(query, result.response)
        logger.info(
            "[PIPELINE] Done (%.0fms) | strategy=%s sources=%d confidence=%.1f",
            result.metadata.processing_time_ms, result.metadata.search_strategy,
            len(result.sources), result.confidence,
        )
        return result

    async def _run(self, ctx: PipelineContext) -> RAGResult:
        query = ctx.query
        cfg = self.cfg

        # ── Stage 1: Query understanding ────────────────────────────
        with Timer("stage_analysis") as t:
            ctx.analysis = await analyze_query(query.text, query.context_type, self.generator, cfg)
            ctx.strategy = select_strategy(ctx.analysis, has_user=bool(query.user_id))
        ctx.stage_timings["analysis"] = t.elapsed_ms
        logger.info("[PIPELINE] Analysis done (%.0fms) | strategy=%s", t.elapsed_ms, ctx.strategy.name)

        # ── Stage 2: Retrieval ──────────────────────────────────────
        with Timer("stage_retrieval") as t:
            ctx.retrieved = await retrieve_multi_modal(
                query.text,
                ctx.strategy,
                self.search,
                self.generator,
                user_id=query.user_id,
                max_results=query.max_results,
                cfg=cfg,
            )
        ctx.stage_timings["retrieval"] = t.elapsed_ms

        if not ctx.retrieved:
            logger.info("[PIPELINE] Short-circuit: no recipes retrieved (no generation)")
            return compose_empty_result(
                ctx.analysis,
                strategy_name=ctx.strategy.name,
                model_used=self.model_name,
                processing_time_ms=ctx.elapsed_ms,
                stage_timings=ctx.stage_timings,
            )

        # ── Stage 3: Ranking & packing ──────────────────────────────
        with Timer("stage_ranking") as t:
            ctx.ranked = await rerank(ctx.retrieved, self.personalization, query.user_id, cfg)
            ctx.context_window = optimize_context(ctx.ranked, cfg.context_budget_chars, cfg)
        ctx.stage_timings["ranking"] = t.elapsed_ms
        logger.info(
            "[PIPELINE] Ranking done (%.0fms) | retrieved=%d in_context=%d",
            t.elapsed_ms, len(ctx.retrieved), len(ctx.context_window.results),
        )

        # ── Stage 4: Generation ─────────────────────────────────────
        with Timer("stage_generation") as t:
            ctx.prompt = build_prompt(query, ctx.analysis, ctx.context_window, ctx.history, cfg)
            ctx.generation = await generate_verified(ctx.prompt, query.text, self.generator, cfg)
        ctx.stage_timings["generation"] = t.elapsed_ms

        return compose_result(
            ctx.generation,
            ctx.context_window,
            ctx.analysis,
            strategy_name=ctx.strategy.name,
            model_used=self.model_name,
            processing_time_ms=ctx.elapsed_ms,
            stage_timings=ctx.stage_timings,
        )

    # ── Retrieval only ──────────────────────────────────────────────
    @timed("search_only")
    async def search_only(self, text: str, options: SearchOptions | None = None) -> SearchOnlyResult:
        """
        Retrieval + re-ranking without analysis or generation.  Results
        scoring below ``options.min_score`` are dropped.

        Never raises (except on cancellation): any failure yields an
        empty result with max_score 0.
        """
        options = options or SearchOptions(k=self.cfg.default_max_results)
        start = time.perf_counter()
        try:
            strategy = get_strategy(options.strategy).model_copy(
                update={"expand_query": options.expand_query},
            )
            retrieved = await retrieve_multi_modal(
                text,
                strategy,
                self.search,
                self.generator,
                user_id=options.user_id,
                max_results=options.k,
                cfg=self.cfg,
            )
            ranked = await rerank(retrieved, self.personalization, options.user_id, self.cfg)
            ranked = [r for r in ranked if r.final_score >= options.min_score][: options.k]
        except Exception as e:
            logger.error("[SEARCH] search_only failed: %s: %s", type(e).__name__, e)
            return SearchOnlyResult(
                results=[],
                search_time_ms=(time.perf_counter() - start) * 1000,
                max_score=0.0,
            )

        return SearchOnlyResult(
            results=ranked,
            search_time_ms=(time.perf_counter() - start) * 1000,
            max_score=ranked[0].final_score if ranked else 0.0,
        )

    # ── History ─────────────────────────────────────────────────────
    def _load_history(self, query: Query) -> list[ConversationTurn]:
        if query.conversation_history is not None:
            return list(query.conversation_history)
        if self.history_store is not None and query.session_id:
            return self.history_store.get(query.session_id)
        return []

    def _save_history(self, query: Query, answer: str) -> None:
        if self.history_store is None or not query.session_id:
            return
        turns = self.history_store.get(query.session_id)
        turns.append(ConversationTurn(role=ConversationRole.USER, content=query.text))
        turns.append(ConversationTurn(role=ConversationRole.ASSISTANT, content=answer))
        self.history_store.put(query.session_id, turns)
