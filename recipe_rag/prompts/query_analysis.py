"""
Prompt templates for query understanding: structured analysis and
query expansion.  Both are short, single-purpose prompts.
"""

from __future__ import annotations

ANALYSIS_HEADER = "Analyze the following cooking question and describe its intent and characteristics."
EXPANSION_HEADER = "Expand the following recipe search query with closely related keywords."

_ANALYSIS_SHAPE = """{
  "intent": "recipe_search|cooking_help|nutrition_advice|ingredient_substitute|general_chat",
  "complexity": "simple|medium|complex",
  "specificity": "vague|specific|very_specific",
  "entities": {
    "ingredients": [],
    "cuisine_type": "",
    "cooking_method": "",
    "dietary_restrictions": [],
    "time_constraint": "",
    "difficulty_preference": ""
  },
  "emotional_tone": "casual|urgent|curious|frustrated",
  "follow_up_likely": true
}"""


def build_analysis_prompt(question: str, context_type: str) -> str:
    """Ask the backend for a fixed-shape JSON classification."""
    return (
        f"{ANALYSIS_HEADER}\n\n"
        f'Question: "{question}"\n'
        f"Context type: {context_type}\n\n"
        "Return ONLY a JSON object with exactly this shape "
        "(pick one value where alternatives are separated by |):\n"
        f"{_ANALYSIS_SHAPE}"
    )


def build_expansion_prompt(query: str) -> str:
    """Ask for a short, natural rewrite of a search query."""
    return (
        f"{EXPANSION_HEADER}\n\n"
        f'Original query: "{query}"\n\n'
        "Guidelines:\n"
        "1. Add similar ingredients or cooking methods.\n"
        "2. Include related cooking styles or regional specialties.\n"
        "3. Use synonyms or alternative expressions.\n"
        "4. Keep it short and natural; reply with the expanded query only.\n\n"
        "Expanded query:"
    )
