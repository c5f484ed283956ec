"""
tests/conftest.py

Shared fixtures: a settings object isolated from the environment,
recipe factories, an in-memory search backend and a scripted
generation backend that routes replies by prompt type.
"""

import asyncio
import json
from typing import Any

import pytest

from recipe_rag.core.config import Settings
from recipe_rag.prompts.query_analysis import ANALYSIS_HEADER, EXPANSION_HEADER
from recipe_rag.schemas.retrieval import SearchResult


GOOD_ANSWER = (
    "Try the garlic butter pasta: boil the spaghetti for 10 minutes, then toss it "
    "with 2 tbsp of butter, 3 cloves of sliced garlic and a handful of parsley. "
    "Step 1 is getting the water salty enough."
)

DEFAULT_ANALYSIS = {
    "intent": "recipe_search",
    "complexity": "medium",
    "specificity": "specific",
    "entities": {},
    "emotional_tone": "casual",
    "follow_up_likely": True,
}


# ── Settings ───────────────────────────────────────────────────────────────
@pytest.fixture
def cfg():
    """Default settings, never read from a local .env file."""
    return Settings(_env_file=None)


# ── Recipes ────────────────────────────────────────────────────────────────
def build_result(source_id: str, relevance: float = 0.9, **overrides: Any) -> SearchResult:
    data = {
        "source_id": source_id,
        "title": f"Recipe {source_id}",
        "description": f"A tasty dish number {source_id}.",
        "relevance_score": relevance,
        "ingredients": ["pasta", "garlic", "olive oil"],
        "steps": ["Boil", "Toss"],
        "tags": ["italian"],
        "difficulty": "easy",
        "cooking_time": 20,
    }
    data.update(overrides)
    return SearchResult(**data)


@pytest.fixture
def make_result():
    return build_result


# ── Search backend ─────────────────────────────────────────────────────────
class FakeSearchBackend:
    """Canned results per modality; modalities listed in ``fail`` raise."""

    def __init__(
        self,
        vector: list[SearchResult] | None = None,
        keyword: list[SearchResult] | None = None,
        personalized: list[SearchResult] | None = None,
        fail: tuple[str, ...] = (),
        delays: dict[str, float] | None = None,
    ):
        self.responses = {
            "vector": vector or [],
            "keyword": keyword or [],
            "personalized": personalized or [],
        }
        self.fail = set(fail)
        self.delays = delays or {}
        self.calls: list[tuple[str, str, int]] = []

    async def _respond(self, modality: str, text: str, k: int) -> list[SearchResult]:
        self.calls.append((modality, text, k))
        if modality in self.delays:
            await asyncio.sleep(self.delays[modality])
        if modality in self.fail:
            raise RuntimeError(f"{modality} index unavailable")
        return list(self.responses[modality][:k])

    async def vector_search(self, text, k):
        return await self._respond("vector", text, k)

    async def keyword_search(self, text, k):
        return await self._respond("keyword", text, k)

    async def personalized_search(self, text, user_id, k):
        return await self._respond("personalized", text, k)

    def modalities_called(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def fake_search():
    return FakeSearchBackend


# ── Generation backend ─────────────────────────────────────────────────────
class ScriptedGenerator:
    """
    Replies by prompt type: analysis JSON, expansion line, or the next
    scripted answer.  Exceptions in the script are raised instead.
    """

    model_name = "fake-model"

    def __init__(
        self,
        answers: list[Any] | None = None,
        analysis: Any = None,
        expansion: Any = "Expanded query: garlic pasta aglio olio",
        answer_delay: float = 0.0,
    ):
        self.answers = list(answers) if answers is not None else [GOOD_ANSWER]
        self.analysis = DEFAULT_ANALYSIS if analysis is None else analysis
        self.expansion = expansion
        self.answer_delay = answer_delay
        self.calls: list[dict[str, Any]] = []

    async def generate_text(self, prompt, *, temperature, max_tokens):
        if prompt.startswith(ANALYSIS_HEADER):
            kind, reply = "analysis", self.analysis
            if isinstance(reply, dict):
                reply = json.dumps(reply)
        elif prompt.startswith(EXPANSION_HEADER):
            kind, reply = "expansion", self.expansion
        else:
            kind = "answer"
            reply = self.answers.pop(0) if self.answers else GOOD_ANSWER
            if self.answer_delay:
                await asyncio.sleep(self.answer_delay)

        self.calls.append({
            "kind": kind,
            "prompt": prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def calls_of(self, kind: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["kind"] == kind]


@pytest.fixture
def scripted_generator():
    return ScriptedGenerator
