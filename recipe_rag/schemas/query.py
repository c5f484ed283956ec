"""
Schemas for the engine's input: the user query and its conversation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class ContextType(str, Enum):
    RECIPE_SEARCH = "recipe_search"
    COOKING_HELP = "cooking_help"
    NUTRITION_ADVICE = "nutrition_advice"
    GENERAL_CHAT = "general_chat"


class ConversationRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurn(BaseModel):
    role: ConversationRole
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        use_enum_values = True


class Query(BaseModel):
    """One incoming question, created fresh per request."""

    text: str = Field(..., min_length=1)
    conversation_history: list[ConversationTurn] | None = None
    user_id: str | None = None
    session_id: str | None = None  # Loads/stores history via the history store
    context_type: ContextType = ContextType.RECIPE_SEARCH
    max_results: int = Field(default=10, ge=1, le=50)

    class Config:
        use_enum_values = True
