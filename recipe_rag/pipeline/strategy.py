"""
Pipeline Stage 1b: Strategy selection.

Pure decision table; no I/O.  Rules are checked in order and the
first match wins.
"""

from __future__ import annotations

from recipe_rag.schemas.analysis import Complexity, QueryAnalysis, Specificity
from recipe_rag.schemas.retrieval import SearchStrategy, StrategyName

# Queries with more extracted entities than this lean on exact matches.
KEYWORD_ENTITY_THRESHOLD = 3

STRATEGIES: dict[str, SearchStrategy] = {
    StrategyName.VECTOR_PRIMARY.value: SearchStrategy(
        name=StrategyName.VECTOR_PRIMARY,
        vector_weight=0.8,
        keyword_weight=0.2,
        use_personalization=True,
        expand_query=False,
    ),
    StrategyName.HYBRID_BALANCED.value: SearchStrategy(
        name=StrategyName.HYBRID_BALANCED,
        vector_weight=0.6,
        keyword_weight=0.4,
        use_personalization=True,
        expand_query=True,
    ),
    StrategyName.KEYWORD_FOCUSED.value: SearchStrategy(
        name=StrategyName.KEYWORD_FOCUSED,
        vector_weight=0.3,
        keyword_weight=0.7,
        use_personalization=False,
        expand_query=True,
    ),
    StrategyName.PERSONALIZED_DEEP.value: SearchStrategy(
        name=StrategyName.PERSONALIZED_DEEP,
        vector_weight=0.7,
        keyword_weight=0.3,
        use_personalization=True,
        expand_query=True,
        boost_personal_history=True,
    ),
}


def get_strategy(name: str | StrategyName) -> SearchStrategy:
    key = name.value if isinstance(name, StrategyName) else str(name)
    try:
        return STRATEGIES[key]
    except KeyError:
        raise ValueError(f"Unknown search strategy: {key!r}") from None


def select_strategy(analysis: QueryAnalysis, has_user: bool) -> SearchStrategy:
    """
    1. complex + known user      -> personalized_deep
    2. vague                     -> hybrid_balanced
    3. many extracted entities   -> keyword_focused
    4. otherwise                 -> vector_primary
    """
    if analysis.complexity == Complexity.COMPLEX and has_user:
        return STRATEGIES[StrategyName.PERSONALIZED_DEEP.value]
    if analysis.specificity == Specificity.VAGUE:
        return STRATEGIES[StrategyName.HYBRID_BALANCED.value]
    if analysis.entities.count() > KEYWORD_ENTITY_THRESHOLD:
        return STRATEGIES[StrategyName.KEYWORD_FOCUSED.value]
    return STRATEGIES[StrategyName.VECTOR_PRIMARY.value]
