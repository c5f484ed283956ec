"""
Typed errors surfaced by the engine and its backends.

Only a failed primary generation call ever reaches the caller; every
retrieval- and scoring-stage failure is recovered inside the pipeline.
"""

from __future__ import annotations


class RAGEngineError(Exception):
    """Base class for engine errors."""


class BackendUnavailableError(RAGEngineError):
    """A concrete collaborator (LLM server, vector store) could not be reached."""


class GenerationError(RAGEngineError):
    """The primary answer-generation call failed."""

    user_message = (
        "Sorry, I couldn't prepare an answer right now. "
        "Please try asking again in a moment."
    )
