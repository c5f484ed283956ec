"""
Pydantic schemas for every pipeline boundary.
Each module covers one pipeline stage or cross-cutting concern.
"""

from recipe_rag.schemas.query import (
    ContextType,
    ConversationRole,
    ConversationTurn,
    Query,
)
from recipe_rag.schemas.analysis import (
    Complexity,
    EmotionalTone,
    ParseFailure,
    QueryAnalysis,
    QueryEntities,
    QueryIntent,
    Specificity,
)
from recipe_rag.schemas.retrieval import (
    MODALITY_ORDER,
    ContextWindow,
    Modality,
    RankedResult,
    SearchOnlyResult,
    SearchOptions,
    SearchResult,
    SearchStrategy,
    StrategyName,
)
from recipe_rag.schemas.response import (
    QueryRequest,
    RAGMetadata,
    RAGResult,
    SearchRequest,
    SourceCitation,
)
from recipe_rag.schemas.pipeline import (
    GenerationAttempt,
    GenerationOutcome,
    PipelineContext,
)

__all__ = [
    # Query
    "ContextType",
    "ConversationRole",
    "ConversationTurn",
    "Query",
    # Analysis
    "Complexity",
    "EmotionalTone",
    "ParseFailure",
    "QueryAnalysis",
    "QueryEntities",
    "QueryIntent",
    "Specificity",
    # Retrieval
    "MODALITY_ORDER",
    "ContextWindow",
    "Modality",
    "RankedResult",
    "SearchOnlyResult",
    "SearchOptions",
    "SearchResult",
    "SearchStrategy",
    "StrategyName",
    # Response
    "QueryRequest",
    "RAGMetadata",
    "RAGResult",
    "SearchRequest",
    "SourceCitation",
    # Pipeline
    "GenerationAttempt",
    "GenerationOutcome",
    "PipelineContext",
]
