# models/performance_models.py

from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class PerformanceScores(BaseModel):
    performance: Optional[int] = None
    accessibility: Optional[int] = None
    best_practices: Optional[int] = None
    seo: Optional[int] = None


class PerformanceMetrics(BaseModel):
    """Lighthouse の主要メトリクス（numericValue そのまま。ms 単位、cls のみ無次元）。"""

    fcp: float = 0
    lcp: float = 0
    cls: float = 0
    tbt: float = 0
    si: float = 0


class Opportunity(BaseModel):
    id: str
    title: str = ""
    description: str = ""
    savings: float = 0


class PageSpeedResult(BaseModel):
    """mobile / desktop どちらか一方の PageSpeed 結果。"""

    strategy: str
    scores: PerformanceScores
    metrics: PerformanceMetrics
    opportunities: List[Opportunity] = Field(default_factory=list)
    analysis_timestamp: Optional[str] = None


class CombinedPerformance(BaseModel):
    mobile: Optional[PageSpeedResult] = None
    desktop: Optional[PageSpeedResult] = None
    average: PerformanceScores
    overall_score: Optional[int] = None
    has_both_results: bool = False
