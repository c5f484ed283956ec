"""
Pipeline Stage 4a: Prompt assembly.

Deterministic string building only; no I/O and no failure modes.
"""

from __future__ import annotations

from recipe_rag.core.config import Settings, settings
from recipe_rag.prompts.answer_generator import build_answer_prompt
from recipe_rag.schemas.analysis import EmotionalTone, QueryAnalysis
from recipe_rag.schemas.query import ConversationTurn, Query
from recipe_rag.schemas.retrieval import ContextWindow
from recipe_rag.utils.text import truncate

# Ingredients listed per recipe in the prompt (the context block shows fewer).
PROMPT_INGREDIENT_LIMIT = 8


def format_history(
    history: list[ConversationTurn] | None,
    max_turns: int | None = None,
    max_chars: int | None = None,
) -> str:
    if not history:
        return ""
    max_turns = max_turns if max_turns is not None else settings.prompt_history_turns
    max_chars = max_chars if max_chars is not None else settings.prompt_history_chars

    lines = []
    for turn in history[-max_turns:] if max_turns > 0 else []:
        role = "User" if turn.role == "user" else "Assistant"
        lines.append(f"{role}: {truncate(turn.content, max_chars)}")
    return "\n".join(lines)


def format_search_context(window: ContextWindow) -> str:
    entries = []
    for i, r in enumerate(window.results, 1):
        entries.append(
            f"{i}. {r.title}\n"
            f"   Description: {r.description}\n"
            f"   Ingredients: {', '.join(r.ingredients[:PROMPT_INGREDIENT_LIMIT])}\n"
            f"   Difficulty: {r.difficulty} | Cooking time: {r.cooking_time} minutes\n"
            f"   Relevance: {r.final_score:.2f}"
        )
    return "\n\n".join(entries)


def format_analysis_hints(analysis: QueryAnalysis | None) -> str:
    """Constraints worth repeating to the model, if the analyzer found any."""
    if analysis is None:
        return ""
    hints = []
    entities = analysis.entities
    if entities.dietary_restrictions:
        hints.append(f"Dietary restrictions: {', '.join(entities.dietary_restrictions)}")
    if entities.time_constraint:
        hints.append(f"Time constraint: {entities.time_constraint}")
    if entities.difficulty_preference:
        hints.append(f"Preferred difficulty: {entities.difficulty_preference}")
    if analysis.emotional_tone != EmotionalTone.CASUAL:
        hints.append(f"The user sounds {analysis.emotional_tone}.")
    return "\n".join(hints)


def build_prompt(
    query: Query,
    analysis: QueryAnalysis | None,
    window: ContextWindow,
    history: list[ConversationTurn] | None = None,
    cfg: Settings | None = None,
) -> str:
    cfg = cfg or settings
    return build_answer_prompt(
        context_type=query.context_type,
        question=query.text,
        search_context=format_search_context(window),
        language=cfg.response_language,
        conversation_context=format_history(
            history, cfg.prompt_history_turns, cfg.prompt_history_chars,
        ),
        analysis_hints=format_analysis_hints(analysis),
    )
