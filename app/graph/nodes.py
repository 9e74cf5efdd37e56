# app/graph/nodes.py
from __future__ import annotations

import logging
from typing import List, Optional

from agents.scoring_agent import calculate_scores
from agents.scoring_rules import ScoringRules
from app.errors import ScoringError
from app.graph.lg_state import AuditState
from app.graph.orchestrator import AnalysisOrchestrator
from models.audit_models import AIAnalysisOutput, AuditResult
from models.performance_models import CombinedPerformance
from services.crawler import fetch_html
from services.html_parser import parse_page
from services.pagespeed_client import Fetcher, get_combined_pagespeed

logger = logging.getLogger(__name__)


def _log_progress(state: AuditState, node: str, message: str) -> AuditState:
    """
    進捗ログを state に積むユーティリティ。
    current_node は 500 エラー時の step としても使う。
    """
    line = f"[{node}] {message}"

    messages: List[str] = list(state.get("progress_messages", []))
    messages.append(line)

    state["progress_messages"] = messages
    state["current_node"] = node

    logger.info(line)
    return state


# ---------- Crawl ノード ----------


def crawl_node(state: AuditState, timeout: float, max_chars: int) -> AuditState:
    """URL を取得して PageModel に変換する。失敗は CrawlError のまま上に投げる。"""
    state = _log_progress(state, "crawling", "start: fetching HTML")

    url = state["url"]
    html = fetch_html(url, timeout=timeout, max_chars=max_chars)
    state["page"] = parse_page(url, html)

    state = _log_progress(state, "crawling", f"done: html_length={len(html)}")
    return state


# ---------- Scoring ノード ----------


def scoring_node(state: AuditState, rules: ScoringRules) -> AuditState:
    """
    純粋計算なので正常な PageModel なら失敗しない。
    失敗した場合は不変条件違反として ScoringError（500）にする。
    """
    state = _log_progress(state, "scoring", "start: calculating scores")

    try:
        scoring = calculate_scores(state["page"], rules)
    except Exception as e:  # noqa: BLE001
        logger.exception("[scoring_node] invariant violation")
        raise ScoringError(f"Scoring failed: {e}") from e

    state["scoring"] = scoring
    s = scoring.scores
    state = _log_progress(
        state,
        "scoring",
        f"done: total={s.total} content={s.content} layout={s.layout} cta={s.cta} "
        f"accessibility={s.accessibility} flags={scoring.flags.active()}",
    )
    return state


# ---------- Performance（AI と並列） ----------


def performance_task(url: str, fetch: Optional[Fetcher]) -> Optional[CombinedPerformance]:
    """
    別スレッドで実行される。state には触らず、結果だけを返す。
    失敗はすべて None（エンリッチメント無し）として吸収する。
    """
    if fetch is None:
        return None
    try:
        return get_combined_pagespeed(url, fetch)
    except Exception as e:  # noqa: BLE001
        logger.warning("[performance_task] PageSpeed failed, continuing without it: %s", e)
        return None


# ---------- AI 分析ノード ----------


def ai_analysis_node(state: AuditState, orchestrator: AnalysisOrchestrator) -> AuditState:
    state = _log_progress(state, "ai_analysis", "start: analyzer -> storyteller / recommender")

    output: AIAnalysisOutput = orchestrator.run(state["page"], state["scoring"])
    state["ai_output"] = output

    state = _log_progress(state, "ai_analysis", f"done: sources={output.stage_sources}")
    return state


# ---------- 組み立て ----------


def assemble_node(state: AuditState, performance: Optional[CombinedPerformance]) -> AuditState:
    state = _log_progress(state, "assemble", "start: building audit result")

    output: AIAnalysisOutput = state["ai_output"]
    state["performance"] = performance
    state["result"] = AuditResult(
        scores=state["scoring"].scores,
        analysis=output.analysis,
        narrative=output.narrative,
        recommendations=output.recommendations,
        performance=performance,
    )

    state = _log_progress(state, "assemble", f"done: performance={'YES' if performance else 'NO'}")
    return state
