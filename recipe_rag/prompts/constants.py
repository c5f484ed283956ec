"""
Centralized prompt constants: system personas, response instructions,
fixed fallback texts and follow-up templates.
"""

from __future__ import annotations


# ── System personas (keyed by Query.context_type) ───────────────────
SYSTEM_PROMPTS: dict[str, str] = {
    "recipe_search": (
        "You are an expert home-cooking guide. You find the recipes that best "
        "match what the user wants and explain how to cook them in a friendly way."
    ),
    "cooking_help": (
        "You are a cooking troubleshooting expert. You solve problems the user "
        "runs into while preparing a dish, step by step."
    ),
    "nutrition_advice": (
        "You are a nutrition specialist. You give practical advice on healthy "
        "meals and explain the nutritional side of recipes."
    ),
    "general_chat": (
        "You are a friendly cooking assistant who answers any question about "
        "food and cooking."
    ),
}
DEFAULT_CONTEXT_TYPE = "general_chat"


# ── Response instructions (appended to every answer prompt) ─────────
def build_response_instructions(language: str) -> str:
    return "\n".join([
        "## RESPONSE INSTRUCTIONS",
        f"1. Answer in {language}, in a warm and natural tone.",
        "2. Recommend the single most fitting recipe from the list above and say why it fits.",
        "3. Give concrete, actionable cooking steps (quantities, times, temperatures).",
        "4. Take the user's situation and preferences into account.",
        "5. Suggest ingredient substitutions or variations when relevant.",
        "6. Include a short nutrition or health tip when it is relevant.",
    ])


# ── Fixed texts ─────────────────────────────────────────────────────
EMPTY_RETRIEVAL_RESPONSE = (
    "I couldn't find any recipes that match your question. "
    "Try naming an ingredient or a dish, or describe what you feel like eating "
    "in a different way."
)
EMPTY_RETRIEVAL_REASONING = "No recipes were retrieved for this question, so no answer was generated."


# ── Follow-up templates ─────────────────────────────────────────────
DEFAULT_SUGGESTIONS: list[str] = [
    "Would you like to see other similar recipes?",
    "Are you curious about the nutrition facts for this dish?",
    "Shall I show you ways to shorten the cooking time?",
]
MIN_SUGGESTIONS = 2
MAX_SUGGESTIONS = 4
