"""Tests for score fusion and ordering."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from recipe_rag.core.config import Settings
from recipe_rag.pipeline.reranker import rerank


def scorer_with(fn):
    scorer = MagicMock()
    scorer.score = AsyncMock(side_effect=fn)
    return scorer


def assert_sorted(ranked):
    scores = [r.final_score for r in ranked]
    assert scores == sorted(scores, reverse=True)


class TestRerank:
    @pytest.mark.asyncio
    async def test_empty_input(self, cfg):
        assert await rerank([], cfg=cfg) == []

    @pytest.mark.asyncio
    async def test_without_user_final_score_is_relevance(self, make_result, cfg):
        results = [make_result("a", 0.3), make_result("b", 0.9), make_result("c", 0.6)]
        scorer = scorer_with(lambda *a: 1.0)

        ranked = await rerank(results, scorer, user_id=None, cfg=cfg)

        assert [r.source_id for r in ranked] == ["b", "c", "a"]
        assert [r.final_score for r in ranked] == [0.9, 0.6, 0.3]
        scorer.score.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fuses_relevance_and_personalized_score(self, make_result, cfg):
        results = [make_result("a", 0.5), make_result("b", 0.8)]
        personal = {"a": 1.0, "b": 0.0}
        scorer = scorer_with(lambda user_id, source_id, base: personal[source_id])

        ranked = await rerank(results, scorer, user_id="u1", cfg=cfg)

        by_id = {r.source_id: r for r in ranked}
        assert by_id["a"].final_score == pytest.approx(0.6 * 0.5 + 0.4 * 1.0)
        assert by_id["b"].final_score == pytest.approx(0.6 * 0.8)
        assert by_id["a"].personalized_score == 1.0
        assert [r.source_id for r in ranked] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_partial_scorer_failures_fall_back_to_relevance(self, make_result, cfg):
        results = [make_result(f"r{i}", rel) for i, rel in enumerate([0.9, 0.2, 0.7, 0.5, 0.4])]
        failing = {"r1", "r3"}

        def score(user_id, source_id, base):
            if source_id in failing:
                raise RuntimeError("profile service error")
            return 0.5

        ranked = await rerank(results, scorer_with(score), user_id="u1", cfg=cfg)

        by_id = {r.source_id: r for r in ranked}
        assert by_id["r1"].final_score == pytest.approx(0.2)
        assert by_id["r3"].final_score == pytest.approx(0.5)
        assert by_id["r0"].final_score == pytest.approx(0.6 * 0.9 + 0.4 * 0.5)
        assert by_id["r2"].final_score == pytest.approx(0.6 * 0.7 + 0.4 * 0.5)
        assert by_id["r4"].final_score == pytest.approx(0.6 * 0.4 + 0.4 * 0.5)
        assert len(ranked) == 5
        assert_sorted(ranked)

    @pytest.mark.asyncio
    async def test_slow_scorer_times_out_to_relevance(self, make_result):
        fast_cfg = Settings(_env_file=None, personalization_timeout_s=0.05)

        async def slow(user_id, source_id, base):
            await asyncio.sleep(1.0)
            return 1.0

        scorer = MagicMock()
        scorer.score = slow

        ranked = await rerank([make_result("a", 0.4)], scorer, user_id="u1", cfg=fast_cfg)

        assert ranked[0].final_score == pytest.approx(0.4)

    @pytest.mark.asyncio
    async def test_fusion_weights_are_configurable(self, make_result):
        custom = Settings(_env_file=None, fusion_relevance_weight=0.0, fusion_personalization_weight=1.0)
        ranked = await rerank([make_result("a", 0.9)], scorer_with(lambda *a: 0.1), user_id="u1", cfg=custom)
        assert ranked[0].final_score == pytest.approx(0.1)
