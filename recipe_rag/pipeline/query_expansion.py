"""
Pipeline Stage 2a: Query expansion.

Asks the backend for a short rewrite of the search text with related
ingredients and techniques.  Any failure returns the original text.
"""

from __future__ import annotations

import asyncio

from recipe_rag.core.config import Settings, settings
from recipe_rag.prompts.query_analysis import build_expansion_prompt
from recipe_rag.services.collaborators import GenerationBackend
from recipe_rag.utils.logging import get_logger
from recipe_rag.utils.text import clean_generated_line

logger = get_logger("recipe_rag.pipeline.query_expansion")


async def expand_query(
    text: str,
    generator: GenerationBackend,
    cfg: Settings | None = None,
) -> str:
    cfg = cfg or settings
    try:
        raw = await asyncio.wait_for(
            generator.generate_text(
                build_expansion_prompt(text),
                temperature=cfg.expansion_temperature,
                max_tokens=cfg.expansion_max_tokens,
            ),
            timeout=cfg.expansion_timeout_s,
        )
    except Exception as e:
        logger.warning("[EXPANSION] Failed, using original query: %s", e)
        return text

    expanded = clean_generated_line(raw)
    if not expanded:
        return text
    logger.info("[EXPANSION] '%s' -> '%s'", text[:60], expanded[:120])
    return expanded
