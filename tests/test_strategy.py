"""Tests for the strategy decision table."""

import pytest

from recipe_rag.pipeline.strategy import STRATEGIES, get_strategy, select_strategy
from recipe_rag.schemas.analysis import QueryAnalysis, QueryEntities


def analysis(complexity="medium", specificity="specific", **entities):
    return QueryAnalysis(
        intent="recipe_search",
        complexity=complexity,
        specificity=specificity,
        entities=QueryEntities(**entities),
    )


class TestSelectStrategy:
    def test_complex_query_with_user_goes_deep(self):
        assert select_strategy(analysis(complexity="complex"), has_user=True).name == "personalized_deep"

    def test_complex_query_without_user_is_not_personalized(self):
        assert select_strategy(analysis(complexity="complex"), has_user=False).name == "vector_primary"

    def test_vague_query_is_hybrid(self):
        assert select_strategy(analysis(specificity="vague"), has_user=False).name == "hybrid_balanced"

    def test_many_entities_is_keyword_focused(self):
        a = analysis(ingredients=["chicken", "garlic", "soy sauce"], cuisine_type="korean")
        assert a.entities.count() == 4
        assert select_strategy(a, has_user=False).name == "keyword_focused"

    def test_three_entities_stays_vector_primary(self):
        a = analysis(ingredients=["chicken", "garlic", "soy sauce"])
        assert select_strategy(a, has_user=False).name == "vector_primary"

    def test_vague_wins_over_entity_count(self):
        a = analysis(specificity="vague", ingredients=["a", "b", "c", "d"])
        assert select_strategy(a, has_user=False).name == "hybrid_balanced"

    def test_complex_with_user_wins_over_vague(self):
        a = analysis(complexity="complex", specificity="vague")
        assert select_strategy(a, has_user=True).name == "personalized_deep"

    def test_selection_is_pure(self):
        a = analysis(specificity="vague")
        first = select_strategy(a, has_user=True)
        for _ in range(5):
            assert select_strategy(a, has_user=True) == first


class TestPresets:
    @pytest.mark.parametrize("name,vector,keyword,personal,expand", [
        ("vector_primary", 0.8, 0.2, True, False),
        ("hybrid_balanced", 0.6, 0.4, True, True),
        ("keyword_focused", 0.3, 0.7, False, True),
        ("personalized_deep", 0.7, 0.3, True, True),
    ])
    def test_preset_values(self, name, vector, keyword, personal, expand):
        s = get_strategy(name)
        assert (s.vector_weight, s.keyword_weight) == (vector, keyword)
        assert s.use_personalization is personal
        assert s.expand_query is expand

    def test_only_personalized_deep_boosts_history(self):
        boosted = [name for name, s in STRATEGIES.items() if s.boost_personal_history]
        assert boosted == ["personalized_deep"]

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown search strategy"):
            get_strategy("random_walk")
