"""
Pipeline Stage 1a: Query analysis.

One low-temperature LLM call that classifies the question into a
fixed-shape JSON object.  Parsing yields ``QueryAnalysis | ParseFailure``;
every failure (backend error, timeout, bad JSON, wrong shape) ends in
the same fallback branch, so this stage never fails the pipeline.
"""

from __future__ import annotations

import asyncio
import json

from pydantic import ValidationError

from recipe_rag.core.config import Settings, settings
from recipe_rag.prompts.query_analysis import build_analysis_prompt
from recipe_rag.schemas.analysis import ParseFailure, QueryAnalysis
from recipe_rag.services.collaborators import GenerationBackend
from recipe_rag.utils.logging import get_logger
from recipe_rag.utils.text import extract_json_object

logger = get_logger("recipe_rag.pipeline.analyzer")

_ENUM_FIELDS = ("intent", "complexity", "specificity", "emotional_tone")


def parse_analysis(raw: str) -> QueryAnalysis | ParseFailure:
    """Validate the backend's reply against the QueryAnalysis shape."""
    blob = extract_json_object(raw)
    if blob is None:
        return ParseFailure(reason="no JSON object in reply", raw_excerpt=(raw or "")[:200])

    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        return ParseFailure(reason=f"invalid JSON: {e.msg}", raw_excerpt=blob[:200])

    if not isinstance(data, dict):
        return ParseFailure(reason="JSON root is not an object", raw_excerpt=blob[:200])

    # Small models drift in casing / spacing for enum values
    for key in _ENUM_FIELDS:
        if isinstance(data.get(key), str):
            data[key] = data[key].strip().lower().replace(" ", "_")
    data.pop("degraded", None)

    try:
        return QueryAnalysis.model_validate(data)
    except ValidationError as e:
        return ParseFailure(reason=f"shape mismatch: {e.error_count()} error(s)", raw_excerpt=blob[:200])


async def analyze_query(
    text: str,
    context_type_hint: str | None,
    generator: GenerationBackend,
    cfg: Settings | None = None,
) -> QueryAnalysis:
    """
    Classify ``text``.  Always returns a QueryAnalysis; a degraded one
    (``degraded=True``) when the backend or its reply is unusable.
    """
    cfg = cfg or settings
    prompt = build_analysis_prompt(text, context_type_hint or "recipe_search")

    try:
        raw = await asyncio.wait_for(
            generator.generate_text(
                prompt,
                temperature=cfg.analysis_temperature,
                max_tokens=cfg.analysis_max_tokens,
            ),
            timeout=cfg.generation_timeout_s,
        )
        parsed = parse_analysis(raw)
    except Exception as e:
        parsed = ParseFailure(reason=f"backend error: {type(e).__name__}: {e}")

    if isinstance(parsed, ParseFailure):
        logger.info("[ANALYZER] Using default analysis (%s)", parsed.reason)
        return QueryAnalysis.fallback(context_type_hint)

    logger.info(
        "[ANALYZER] intent=%s complexity=%s specificity=%s entities=%d",
        parsed.intent, parsed.complexity, parsed.specificity, parsed.entities.count(),
    )
    return parsed
