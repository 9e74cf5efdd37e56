# agents/recommender_agent.py

from __future__ import annotations

import logging
from typing import List, Sequence

from agents.prompts import build_recommender_prompt
from agents.response_parser import keep_valid_items, parse_json_response
from models.analysis_models import AnalysisResult
from models.page_models import PageModel
from models.recommendation_models import Recommendation
from models.score_models import ScoringResult
from models.stage_models import StageResult
from services.llm_client import ModelGateway

logger = logging.getLogger(__name__)

STAGE = "recommender"


# ============================================================
# priority の補完と並び替え（LLM / フォールバック共通）
# ============================================================

def compute_priorities(recommendations: Sequence[Recommendation]) -> List[Recommendation]:
    """priority が無い項目だけ impact - effort で埋めた新しいリストを返す。"""
    return [
        rec if rec.priority is not None else rec.model_copy(update={"priority": rec.computed_priority()})
        for rec in recommendations
    ]


def sort_by_priority(recommendations: Sequence[Recommendation]) -> List[Recommendation]:
    """priority の降順。sorted() は安定ソートなので同点は元の順序を保つ。"""
    return sorted(recommendations, key=lambda r: r.priority or 0, reverse=True)


# ============================================================
# 公開関数
# ============================================================

def run_recommender(
    gateway: ModelGateway,
    page: PageModel,
    scoring: ScoringResult,
    analysis: AnalysisResult,
) -> StageResult:
    """
    Stage 3: Analyzer の指摘から改善提案を生成する。
    成功時の value は priority 補完・並び替え済みの List[Recommendation]。
    """
    prompt = build_recommender_prompt(page, scoring, analysis)
    response = gateway.generate(prompt, stage=STAGE)
    if not response.ok:
        return response

    parsed = parse_json_response(response.value, required_arrays=["recommendations"])
    if not parsed.ok:
        return parsed

    items = keep_valid_items(parsed.value["recommendations"], Recommendation, "recommendation")
    if not items:
        return StageResult.invalid("no valid recommendations in response")

    recommendations = sort_by_priority(compute_priorities(items))
    logger.info("[recommender] LLM recommendations=%s", len(recommendations))
    return StageResult.success(recommendations)
