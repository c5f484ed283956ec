"""
Engine wiring for the HTTP layer.

The engine is built lazily from settings on first request and reused;
tests override ``get_engine`` through FastAPI's dependency overrides.
"""

from __future__ import annotations

import threading

from recipe_rag.core.config import settings
from recipe_rag.pipeline.orchestrator import RAGEngine
from recipe_rag.services.history_store import InMemoryHistoryStore
from recipe_rag.services.llm import create_generation_backend
from recipe_rag.services.personalization import ProfileWeightScorer
from recipe_rag.services.recipe_search import ChromaRecipeSearch
from recipe_rag.utils.logging import get_logger

logger = get_logger("recipe_rag.api.dependencies")

_engine_lock = threading.Lock()
_engine: RAGEngine | None = None


def build_engine() -> RAGEngine:
    generator = create_generation_backend(settings)
    engine = RAGEngine(
        search=ChromaRecipeSearch(collection_name=settings.chroma_collection),
        generator=generator,
        personalization=ProfileWeightScorer(),
        history_store=InMemoryHistoryStore(),
        cfg=settings,
    )
    logger.info(
        "Engine ready (backend=%s, model=%s, collection=%s)",
        settings.llm_backend, engine.model_name, settings.chroma_collection,
    )
    return engine


def get_engine() -> RAGEngine:
    global _engine
    if _engine is not None:
        return _engine
    with _engine_lock:
        if _engine is None:
            _engine = build_engine()
        return _engine
