"""
Profile-weight personalization scorer.

A user's profile is reduced to a single weight (learned elsewhere);
the personalized score is the base score scaled by that weight and
clamped to [0, 1].  Users without a profile get the base score back.
"""

from __future__ import annotations

from typing import Mapping

from recipe_rag.utils.logging import get_logger

logger = get_logger("recipe_rag.services.personalization")


class ProfileWeightScorer:
    def __init__(
        self,
        weights: Mapping[str, float] | None = None,
        item_weights: Mapping[str, Mapping[str, float]] | None = None,
    ):
        # weights: user_id -> global profile weight
        # item_weights: user_id -> {source_id -> per-recipe affinity}
        self.weights: dict[str, float] = dict(weights or {})
        self.item_weights: dict[str, dict[str, float]] = {
            uid: dict(items) for uid, items in (item_weights or {}).items()
        }

    def set_weight(self, user_id: str, weight: float) -> None:
        self.weights[user_id] = weight

    async def score(self, user_id: str, source_id: str, base_score: float) -> float:
        weight = self.weights.get(user_id)
        if weight is None:
            return base_score

        affinity = self.item_weights.get(user_id, {}).get(source_id, 1.0)
        return max(0.0, min(1.0, base_score * weight * affinity))
