"""
Pipeline Stage 4b: Verified generation.

Two-state machine with a hard cap of one regeneration:

    PRIMARY --(quality >= gate)--> done
    PRIMARY --(quality <  gate)--> RETRY --> done

The retry output is accepted whatever its score.  A failed primary
call raises GenerationError; a failed retry falls back to the primary
answer.
"""

from __future__ import annotations

import asyncio
import re

from recipe_rag.core.config import Settings, settings
from recipe_rag.errors import GenerationError
from recipe_rag.prompts.refinement import build_regeneration_prompt
from recipe_rag.schemas.pipeline import GenerationAttempt, GenerationOutcome
from recipe_rag.services.collaborators import GenerationBackend
from recipe_rag.utils.logging import get_logger

logger = get_logger("recipe_rag.pipeline.generator")

MAX_REGENERATIONS = 1

# ── Quality heuristic ───────────────────────────────────────────────
BASE_SCORE = 0.5
LENGTH_BONUS = 0.2
SPECIFICITY_BONUS = 0.2
ECHO_BONUS = 0.1
MIN_LENGTH = 100
MAX_LENGTH = 2000
ECHO_PREFIX = 10

_SPECIFICITY_MARKERS = re.compile(
    r"\d+\s*(?:minutes?|mins?|hours?|hrs?|seconds?|secs?|servings?|pieces?|cups?|tbsp|tsp"
    r"|grams?|g\b|ml\b|분|시간|초|개|인분|큰술|작은술)"
    r"|\bstep\s*\d+|^\s*\d+\.\s|단계|재료",
    re.IGNORECASE | re.MULTILINE,
)


def evaluate_response_quality(text: str, query_text: str) -> float:
    """Cheap heuristic score in [0, 1]; no model call."""
    text = text or ""
    score = BASE_SCORE
    if MIN_LENGTH <= len(text) <= MAX_LENGTH:
        score += LENGTH_BONUS
    if _SPECIFICITY_MARKERS.search(text):
        score += SPECIFICITY_BONUS
    prefix = (query_text or "").strip()[:ECHO_PREFIX].lower()
    if prefix and prefix in text.lower():
        score += ECHO_BONUS
    return min(1.0, score)


async def generate_verified(
    prompt: str,
    query_text: str,
    generator: GenerationBackend,
    cfg: Settings | None = None,
) -> GenerationOutcome:
    cfg = cfg or settings

    # ── PRIMARY ─────────────────────────────────────────────────────
    try:
        primary = await asyncio.wait_for(
            generator.generate_text(
                prompt,
                temperature=cfg.generation_temperature,
                max_tokens=cfg.generation_max_tokens,
            ),
            timeout=cfg.generation_timeout_s,
        )
    except Exception as e:
        logger.error("[GENERATION] Primary call failed: %s: %s", type(e).__name__, e)
        raise GenerationError(f"Primary generation failed: {e}") from e

    primary = (primary or "").strip()
    quality = evaluate_response_quality(primary, query_text)
    logger.info("[GENERATION] Primary answer: %d chars, quality=%.2f", len(primary), quality)

    outcome = GenerationOutcome(text=primary, quality_score=quality)
    if quality >= cfg.quality_gate_threshold or MAX_REGENERATIONS < 1:
        return outcome

    # ── RETRY (at most once) ────────────────────────────────────────
    logger.info(
        "[GENERATION] Quality %.2f below gate %.2f, regenerating once",
        quality, cfg.quality_gate_threshold,
    )
    try:
        retry = await asyncio.wait_for(
            generator.generate_text(
                build_regeneration_prompt(prompt),
                temperature=cfg.regeneration_temperature,
                max_tokens=cfg.generation_max_tokens,
            ),
            timeout=cfg.generation_timeout_s,
        )
    except Exception as e:
        logger.warning("[GENERATION] Regeneration failed, keeping primary answer: %s", e)
        return outcome.model_copy(update={"calls": 2, "regeneration_failed": True})

    retry = (retry or "").strip()
    return GenerationOutcome(
        text=retry,
        quality_score=evaluate_response_quality(retry, query_text),
        final_attempt=GenerationAttempt.RETRY,
        calls=2,
    )
