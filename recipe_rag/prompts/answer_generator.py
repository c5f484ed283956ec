"""
Prompt templates for answer generation.
"""

from __future__ import annotations

from recipe_rag.prompts.constants import (
    DEFAULT_CONTEXT_TYPE,
    SYSTEM_PROMPTS,
    build_response_instructions,
)


def build_system_prompt(context_type: str) -> str:
    """Persona for the query's declared context type."""
    return SYSTEM_PROMPTS.get(context_type, SYSTEM_PROMPTS[DEFAULT_CONTEXT_TYPE])


def build_answer_prompt(
    *,
    context_type: str,
    question: str,
    search_context: str,
    language: str,
    conversation_context: str = "",
    analysis_hints: str = "",
) -> str:
    """
    Build the single-shot generation prompt.

    Structure:
      1. System persona
      2. Conversation context (optional)
      3. User question (+ analysis hints)
      4. Retrieved recipes
      5. Response instructions
    """
    parts: list[str] = [build_system_prompt(context_type)]

    if conversation_context:
        parts.append(f"## PREVIOUS CONVERSATION\n{conversation_context}")

    question_block = f'## USER QUESTION\n"{question}"'
    if analysis_hints:
        question_block += f"\n{analysis_hints}"
    parts.append(question_block)

    parts.append(
        "## RELATED RECIPES\n"
        + (search_context or "(no recipes fit in the context; rely on general cooking knowledge)")
    )
    parts.append(build_response_instructions(language))
    parts.append("Answer:")

    return "\n\n".join(parts)
