"""Tests for answer-prompt assembly."""

from recipe_rag.core.config import Settings
from recipe_rag.pipeline.prompt_builder import (
    build_prompt,
    format_analysis_hints,
    format_history,
    format_search_context,
)
from recipe_rag.prompts.constants import SYSTEM_PROMPTS
from recipe_rag.schemas.analysis import QueryAnalysis, QueryEntities
from recipe_rag.schemas.query import ConversationTurn, Query
from recipe_rag.schemas.retrieval import ContextWindow, RankedResult


def window_of(make_result, n=2, **kw):
    results = []
    for i in range(n):
        r = make_result(f"r{i}", 0.9 - i * 0.1, **kw)
        results.append(RankedResult(**r.model_dump(), final_score=r.relevance_score))
    return ContextWindow(results=results, quality=0.8, total_length=100, budget=4000)


def turns(n):
    return [
        ConversationTurn(role="user" if i % 2 == 0 else "assistant", content=f"message {i}")
        for i in range(n)
    ]


class TestFormatHistory:
    def test_empty(self):
        assert format_history(None) == ""
        assert format_history([]) == ""

    def test_keeps_last_five_turns(self):
        text = format_history(turns(8), max_turns=5, max_chars=300)
        lines = text.splitlines()
        assert len(lines) == 5
        assert lines[0] == "Assistant: message 3"
        assert lines[-1] == "Assistant: message 7"

    def test_truncates_long_turns(self):
        long_turn = [ConversationTurn(role="user", content="a" * 1000)]
        text = format_history(long_turn, max_turns=5, max_chars=50)
        assert len(text) <= len("User: ") + 50
        assert text.endswith("...")


class TestFormatSearchContext:
    def test_numbered_entries_with_eight_ingredients(self, make_result):
        window = window_of(make_result, n=2, ingredients=[f"ing{i}" for i in range(10)])
        text = format_search_context(window)
        assert text.startswith("1. Recipe r0")
        assert "2. Recipe r1" in text
        assert "ing7" in text
        assert "ing8" not in text
        assert "Relevance: 0.90" in text


class TestAnalysisHints:
    def test_no_hints_for_plain_analysis(self):
        assert format_analysis_hints(QueryAnalysis.fallback()) == ""

    def test_constraints_and_tone(self):
        a = QueryAnalysis(
            intent="recipe_search",
            complexity="simple",
            specificity="specific",
            entities=QueryEntities(dietary_restrictions=["vegan"], time_constraint="15 minutes"),
            emotional_tone="urgent",
        )
        hints = format_analysis_hints(a)
        assert "Dietary restrictions: vegan" in hints
        assert "Time constraint: 15 minutes" in hints
        assert "urgent" in hints


class TestBuildPrompt:
    def test_sections_in_order(self, make_result, cfg):
        query = Query(text="simple pasta", context_type="cooking_help")
        prompt = build_prompt(query, QueryAnalysis.fallback(), window_of(make_result), turns(2), cfg)

        persona = SYSTEM_PROMPTS["cooking_help"]
        positions = [
            prompt.index(persona),
            prompt.index("## PREVIOUS CONVERSATION"),
            prompt.index('"simple pasta"'),
            prompt.index("## RELATED RECIPES"),
            prompt.index("## RESPONSE INSTRUCTIONS"),
        ]
        assert positions == sorted(positions)
        assert "Answer in English" in prompt

    def test_no_history_section_without_history(self, make_result, cfg):
        prompt = build_prompt(Query(text="pasta"), None, window_of(make_result), [], cfg)
        assert "## PREVIOUS CONVERSATION" not in prompt
        assert SYSTEM_PROMPTS["recipe_search"] in prompt

    def test_response_language_is_configurable(self, make_result):
        korean = Settings(_env_file=None, response_language="Korean")
        prompt = build_prompt(Query(text="pasta"), None, window_of(make_result), None, korean)
        assert "Answer in Korean" in prompt

    def test_deterministic(self, make_result, cfg):
        query = Query(text="pasta")
        history = turns(3)
        window = window_of(make_result)
        assert build_prompt(query, None, window, history, cfg) == build_prompt(query, None, window, history, cfg)
