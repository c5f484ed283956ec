"""
Thin API routes for the RAG engine.

No business logic: validate the request, call the engine, return its
result.  All heavy lifting lives in the pipeline modules.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from recipe_rag.api.dependencies import get_engine
from recipe_rag.errors import GenerationError
from recipe_rag.pipeline.orchestrator import RAGEngine
from recipe_rag.schemas.response import QueryRequest, RAGResult, SearchRequest
from recipe_rag.schemas.retrieval import SearchOnlyResult
from recipe_rag.utils.logging import get_logger

logger = get_logger("recipe_rag.api.rag")

router = APIRouter(prefix="/rag", tags=["RAG"])


@router.post("/query", response_model=RAGResult)
async def query_recipes(
    request: QueryRequest,
    engine: RAGEngine = Depends(get_engine),
):
    """Answer a cooking question grounded in the recipe collection."""
    q = request.query.strip()[:80]
    logger.info("[API] New query: %s%s", q, "..." if len(request.query) > 80 else "")

    try:
        return await engine.process_query(request.to_query())
    except GenerationError as e:
        logger.warning("[API] Generation failed (returning 503): %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.user_message,
        )


@router.post("/search", response_model=SearchOnlyResult)
async def search_recipes(
    request: SearchRequest,
    engine: RAGEngine = Depends(get_engine),
):
    """Retrieve and rank recipes without generating an answer."""
    return await engine.search_only(request.query, request.to_options())
