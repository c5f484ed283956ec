"""
Health check endpoint for monitoring.
"""

from __future__ import annotations

from fastapi import APIRouter

from recipe_rag.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {"status": "ok", "service": "recipe-rag", "llm_backend": settings.llm_backend}
