"""
Text helpers shared by the pipeline stages.

All functions are pure (no I/O, no LLM).
"""

from __future__ import annotations

import re

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_WORD = re.compile(r"[\w']+", re.UNICODE)

_STOPWORDS = frozenset({
    "a", "an", "and", "are", "can", "do", "for", "how", "i", "in", "is",
    "it", "me", "my", "of", "on", "or", "something", "the", "to", "what",
    "with", "want", "some", "please", "make",
})


def truncate(text: str, limit: int, suffix: str = "...") -> str:
    """Cut ``text`` to at most ``limit`` characters, marking the cut."""
    text = (text or "").strip()
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    return text[: max(0, limit - len(suffix))].rstrip() + suffix


def extract_json_object(raw: str) -> str | None:
    """
    Pull the first ``{...}`` block out of an LLM reply.

    Small local models often wrap JSON in Markdown fences or add a
    sentence before it.  Returns None when no object is present.
    """
    if not raw:
        return None
    text = _CODE_FENCE.sub("", raw.strip())
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def clean_generated_line(text: str) -> str:
    """Normalise a one-line LLM rewrite (strip quotes, labels, newlines)."""
    line = (text or "").strip().splitlines()[0] if (text or "").strip() else ""
    line = re.sub(r"^(expanded query|query)\s*:\s*", "", line, flags=re.IGNORECASE)
    return line.strip().strip('"').strip("'").strip()


def keyword_terms(text: str) -> list[str]:
    """Lower-cased content words of a query, in order, without duplicates."""
    seen: list[str] = []
    for word in _WORD.findall((text or "").lower()):
        if len(word) < 2 or word in _STOPWORDS or word in seen:
            continue
        seen.append(word)
    return seen
