"""
Prompt template for the single regeneration pass.

Only used when the primary answer scores below the quality gate.
"""

from __future__ import annotations


def build_regeneration_prompt(original_prompt: str) -> str:
    """Append an explicit improvement request to the original prompt."""
    lines = [
        original_prompt,
        "",
        "The previous answer to this prompt was not good enough. "
        "Write a better answer that fixes the following:",
        "1. Give more specific and practical information (quantities, times, steps).",
        "2. Answer the user's question more directly.",
        "3. Make better use of the related recipes listed above.",
        "4. Keep a friendly, helpful tone.",
        "",
        "Improved answer:",
    ]
    return "\n".join(lines)
