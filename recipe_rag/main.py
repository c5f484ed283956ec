from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recipe_rag.core.config import settings
from recipe_rag.utils.logging import get_logger, setup_logging

from recipe_rag.api.rag import router as rag_router
from recipe_rag.api.health import router as health_router

setup_logging()
logger = get_logger("recipe_rag.main")

app = FastAPI(
    title=settings.app_name,
    description="Recipe RAG engine: multi-strategy retrieval with verified answer generation",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rag_router, prefix="/api/v1")    # /api/v1/rag/query, /api/v1/rag/search
app.include_router(health_router, prefix="/api")    # /api/health


@app.on_event("startup")
async def on_startup():
    logger.info(
        "Starting %s (environment=%s, llm_backend=%s)",
        settings.app_name, settings.environment, settings.llm_backend,
    )


@app.on_event("shutdown")
async def on_shutdown():
    """Close the generation backend's HTTP client, if the engine was built."""
    from recipe_rag.api import dependencies

    engine = dependencies._engine
    if engine is not None and hasattr(engine.generator, "aclose"):
        await engine.generator.aclose()
    logger.info("[OK] Shutdown complete")
