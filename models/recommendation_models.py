# models/recommendation_models.py

from __future__ import annotations

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict

Level = Literal["high", "medium", "low"]

# impact / effort の数値化（priority = impact - effort）
LEVEL_SCORES = {"high": 3, "medium": 2, "low": 1}


class Recommendation(BaseModel):
    """
    改善提案 1 件。
    - priority は LLM が省略することがあるため Optional。
      Recommender ステージで compute_priorities() により必ず埋められる。
    """

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    category: str
    impact: Level
    effort: Level
    priority: Optional[int] = None

    def computed_priority(self) -> int:
        return LEVEL_SCORES[self.impact] - LEVEL_SCORES[self.effort]
