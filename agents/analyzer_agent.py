# agents/analyzer_agent.py

from __future__ import annotations

import logging

from agents.prompts import build_analyzer_prompt
from agents.response_parser import keep_valid_items, parse_json_response
from models.analysis_models import AnalysisResult, Issue, Strength
from models.page_models import PageModel
from models.score_models import ScoringResult
from models.stage_models import StageResult
from services.llm_client import ModelGateway

logger = logging.getLogger(__name__)

STAGE = "analyzer"


def run_analyzer(gateway: ModelGateway, page: PageModel, scoring: ScoringResult) -> StageResult:
    """
    Stage 1: スコア・フラグ・根拠データから issues / strengths を抽出する。
    - 応答は issues と strengths の両方が配列である JSON オブジェクトでなければ失敗
    - 個々の要素の形式不備はその要素だけ捨てる
    """
    prompt = build_analyzer_prompt(page, scoring)
    response = gateway.generate(prompt, stage=STAGE)
    if not response.ok:
        return response

    parsed = parse_json_response(response.value, required_arrays=["issues", "strengths"])
    if not parsed.ok:
        return parsed

    analysis = AnalysisResult(
        issues=keep_valid_items(parsed.value["issues"], Issue, "issue"),
        strengths=keep_valid_items(parsed.value["strengths"], Strength, "strength"),
    )
    logger.info(
        "[analyzer] LLM issues=%s strengths=%s",
        len(analysis.issues),
        len(analysis.strengths),
    )
    return StageResult.success(analysis)
