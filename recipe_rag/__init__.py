"""
Recipe RAG engine.

    from recipe_rag import RAGEngine, Query
    engine = RAGEngine(search=..., generator=...)
    result = await engine.process_query(Query(text="simple pasta"))
"""

from recipe_rag.errors import BackendUnavailableError, GenerationError, RAGEngineError
from recipe_rag.pipeline.orchestrator import RAGEngine
from recipe_rag.schemas import (
    ConversationTurn,
    Query,
    RAGResult,
    SearchOnlyResult,
    SearchOptions,
    SearchResult,
)

__all__ = [
    "BackendUnavailableError",
    "ConversationTurn",
    "GenerationError",
    "Query",
    "RAGEngine",
    "RAGEngineError",
    "RAGResult",
    "SearchOnlyResult",
    "SearchOptions",
    "SearchResult",
]
