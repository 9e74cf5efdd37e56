# app/api/routes.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from urllib.parse import urlparse

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.config import Settings, get_settings
from app.errors import InputError
from app.graph.lg_workflow import run_audit
from models.analysis_models import AnalysisResult
from models.audit_models import AuditResult
from models.page_models import PageModel
from models.performance_models import CombinedPerformance, Opportunity, PerformanceMetrics, PerformanceScores
from models.recommendation_models import Recommendation
from models.score_models import ScoreSet, ScoringResult
from services.pagespeed_client import format_metric, performance_label

logger = logging.getLogger(__name__)

router = APIRouter()


# --------- Request / Response モデル ---------


class AuditRequest(BaseModel):
    # 未指定も 400 で返したいので Optional にしてハンドラ側で検証する
    url: Optional[str] = None


class PerformanceBlock(BaseModel):
    overall: Optional[int] = None
    mobile: Optional[PerformanceScores] = None
    desktop: Optional[PerformanceScores] = None
    metrics: Optional[PerformanceMetrics] = None
    opportunities: List[Opportunity] = []
    has_both_results: bool = False
    rating: Dict[str, str] = {}
    # 表示用の整形済みメトリクス（"850ms" / "1.23s" / "0.051"）
    display_metrics: Dict[str, str] = {}


class AuditMetadata(BaseModel):
    h1: Optional[str] = None
    meta_description: str = ""
    image_count: int = 0
    cta_count: int = 0
    form_count: int = 0


class AuditResponse(BaseModel):
    url: str
    title: str
    timestamp: str
    scores: ScoreSet
    performance: Optional[PerformanceBlock] = None
    analysis: AnalysisResult
    narrative: str
    recommendations: List[Recommendation]
    metadata: AuditMetadata


class HealthResponse(BaseModel):
    status: str = "ok"
    llm_configured: bool
    pagespeed_key_configured: bool
    fallback_strategy: str


# --------- 変換ヘルパ ---------


def validate_url(url: Optional[str]) -> str:
    if not url or not url.strip():
        raise InputError("URL is required")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InputError("Invalid URL format")
    return url


def format_metrics(metrics: PerformanceMetrics) -> Dict[str, str]:
    return {
        "fcp": format_metric(metrics.fcp, "time"),
        "lcp": format_metric(metrics.lcp, "time"),
        "cls": format_metric(metrics.cls, "cls"),
        "tbt": format_metric(metrics.tbt, "time"),
        "si": format_metric(metrics.si, "time"),
    }


def to_performance_block(perf: Optional[CombinedPerformance]) -> Optional[PerformanceBlock]:
    """metrics / opportunities は mobile を優先し、無ければ desktop を使う。"""
    if perf is None:
        return None
    primary = perf.mobile or perf.desktop
    return PerformanceBlock(
        overall=perf.overall_score,
        mobile=perf.mobile.scores if perf.mobile else None,
        desktop=perf.desktop.scores if perf.desktop else None,
        metrics=primary.metrics if primary else None,
        opportunities=primary.opportunities if primary else [],
        has_both_results=perf.has_both_results,
        rating=performance_label(perf.overall_score),
        display_metrics=format_metrics(primary.metrics) if primary else {},
    )


def build_response(page: PageModel, scoring: ScoringResult, result: AuditResult) -> AuditResponse:
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return AuditResponse(
        url=page.url,
        title=page.title,
        timestamp=timestamp,
        scores=result.scores,
        performance=to_performance_block(result.performance),
        analysis=result.analysis,
        narrative=result.narrative,
        recommendations=result.recommendations,
        metadata=AuditMetadata(
            h1=page.headings.h1[0] if page.headings.h1 else None,
            meta_description=page.meta_description,
            image_count=len(page.images),
            cta_count=scoring.details.cta.primary_cta_count,
            form_count=len(page.forms),
        ),
    )


# --------- エンドポイント ---------


@router.post("/audit", response_model=AuditResponse)
def api_audit(payload: AuditRequest, settings: Settings = Depends(get_settings)) -> AuditResponse:
    """
    1 URL の UX 監査を実行するメインAPI。

    1) クロール → PageModel
    2) スコアリング（決定的）
    3) Analyzer → Storyteller ∥ Recommender（LLM、失敗時はフォールバック）
    4) PageSpeed（任意、AI と並列）
    """
    url = validate_url(payload.url)
    logger.info("[api.audit] start url=%s", url)

    state = run_audit(url, settings)

    logger.info(
        "[api.audit] done url=%s total=%s nodes=%s",
        url,
        state["result"].scores.total,
        state.get("current_node"),
    )
    return build_response(state["page"], state["scoring"], state["result"])


@router.get("/health", response_model=HealthResponse)
def api_health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        llm_configured=bool(settings.openai_api_key),
        pagespeed_key_configured=bool(settings.pagespeed_api_key),
        fallback_strategy=settings.fallback_strategy,
    )
