# models/audit_models.py

from __future__ import annotations

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from models.analysis_models import AnalysisResult
from models.performance_models import CombinedPerformance
from models.recommendation_models import Recommendation
from models.score_models import ScoreSet

StageSource = Literal["llm", "fallback"]


class AIAnalysisOutput(BaseModel):
    """3 ステージ（Analyzer / Storyteller / Recommender）の最終出力。"""

    analysis: AnalysisResult
    narrative: str
    recommendations: List[Recommendation]

    # ステージ名 → 出力元（LLM かフォールバックか）
    stage_sources: Dict[str, StageSource] = Field(default_factory=dict)


class AuditResult(BaseModel):
    """1 リクエスト分の監査結果。永続化はしない。"""

    scores: ScoreSet
    analysis: AnalysisResult
    narrative: str
    recommendations: List[Recommendation]
    performance: Optional[CombinedPerformance] = None
