"""
Schema for the Query Analyzer output.

QueryAnalysis is produced once per query and frozen; every later stage
reads it without mutating it.  Parsing the backend's JSON reply yields
either a QueryAnalysis or a ParseFailure, never an exception.
"""

from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, field_validator


class QueryIntent(str, Enum):
    RECIPE_SEARCH = "recipe_search"
    COOKING_HELP = "cooking_help"
    NUTRITION_ADVICE = "nutrition_advice"
    INGREDIENT_SUBSTITUTE = "ingredient_substitute"
    GENERAL_CHAT = "general_chat"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


class Specificity(str, Enum):
    VAGUE = "vague"
    SPECIFIC = "specific"
    VERY_SPECIFIC = "very_specific"


class EmotionalTone(str, Enum):
    CASUAL = "casual"
    URGENT = "urgent"
    CURIOUS = "curious"
    FRUSTRATED = "frustrated"


class QueryEntities(BaseModel):
    ingredients: list[str] = Field(default_factory=list)
    cuisine_type: str | None = None
    cooking_method: str | None = None
    dietary_restrictions: list[str] = Field(default_factory=list)
    time_constraint: str | None = Field(
        default=None,
        validation_alias=AliasChoices("time_constraint", "time_constraints"),
    )
    difficulty_preference: str | None = None

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("cuisine_type", "cooking_method", "time_constraint", "difficulty_preference", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("ingredients", "dietary_restrictions", mode="before")
    @classmethod
    def _drop_blank_items(cls, value):
        if isinstance(value, list):
            return [v.strip() for v in value if isinstance(v, str) and v.strip()]
        return value

    def count(self) -> int:
        """Number of individual values extracted from the query."""
        singles = [self.cuisine_type, self.cooking_method, self.time_constraint, self.difficulty_preference]
        return (
            len(self.ingredients)
            + len(self.dietary_restrictions)
            + sum(1 for v in singles if v)
        )


class QueryAnalysis(BaseModel):
    """Immutable classification of one query."""

    intent: QueryIntent
    complexity: Complexity
    specificity: Specificity
    entities: QueryEntities = Field(default_factory=QueryEntities)
    emotional_tone: EmotionalTone = EmotionalTone.CASUAL
    follow_up_likely: bool = Field(
        default=True,
        validation_alias=AliasChoices("follow_up_likely", "follow_up_potential"),
    )
    degraded: bool = False  # True when produced by the fallback branch

    class Config:
        frozen = True
        populate_by_name = True
        use_enum_values = True

    @classmethod
    def fallback(cls, hint: str | None = None) -> "QueryAnalysis":
        """Conservative default used whenever classification fails."""
        intent = hint if hint in {i.value for i in QueryIntent} else QueryIntent.RECIPE_SEARCH
        return cls(
            intent=intent,
            complexity=Complexity.MEDIUM,
            specificity=Specificity.SPECIFIC,
            entities=QueryEntities(),
            emotional_tone=EmotionalTone.CASUAL,
            follow_up_likely=True,
            degraded=True,
        )


class ParseFailure(BaseModel):
    """Tagged failure from parsing the analyzer's reply."""

    reason: str
    raw_excerpt: str = ""
