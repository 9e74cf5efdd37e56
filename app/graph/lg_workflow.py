# app/graph/lg_workflow.py
from __future__ import annotations

import concurrent.futures
import logging
from typing import Optional

from agents.fallback_agent import FallbackSynthesizer, get_fallback_synthesizer
from agents.scoring_rules import DEFAULT_RULES, ScoringRules
from app.config import Settings
from app.errors import AuditError, PipelineError
from app.graph import nodes
from app.graph.lg_state import AuditState, create_initial_state
from app.graph.orchestrator import AnalysisOrchestrator
from services.llm_client import ModelGateway, build_gateway
from services.pagespeed_client import Fetcher, PageSpeedClient

logger = logging.getLogger(__name__)


def build_rules(settings: Settings) -> ScoringRules:
    return DEFAULT_RULES.extended(
        action_verbs=settings.extra_action_verbs,
        placeholder_phrases=settings.extra_placeholder_phrases,
    )


def build_performance_fetcher(settings: Settings) -> Optional[Fetcher]:
    if not settings.pagespeed_enabled:
        return None
    client = PageSpeedClient(
        api_key=settings.pagespeed_api_key,
        timeout=settings.pagespeed_timeout_seconds,
    )
    return client.fetch


def run_audit(
    url: str,
    settings: Settings,
    gateway: Optional[ModelGateway] = None,
    fallback: Optional[FallbackSynthesizer] = None,
    performance_fetcher: Optional[Fetcher] = None,
) -> AuditState:
    """
    /api/audit 用のワークフロー。

    crawling → scoring → (ai_analysis ∥ performance) → assemble

    - gateway / fallback / performance_fetcher は省略時に settings から組み立てる
    - PageSpeed は AI チェーンと依存関係が無いので別スレッドで並走させ、最後に待ち合わせる
    """
    logger.info("[lg_workflow] run_audit start url=%s", url)

    gateway = gateway or build_gateway(settings)
    fallback = fallback or get_fallback_synthesizer(settings.fallback_strategy)
    if performance_fetcher is None:
        performance_fetcher = build_performance_fetcher(settings)

    state = create_initial_state(url)

    try:
        # 1) クロール → PageModel
        state = nodes.crawl_node(
            state,
            timeout=settings.crawl_timeout_seconds,
            max_chars=settings.crawl_max_chars,
        )

        # 2) スコアリング（純粋計算）
        state = nodes.scoring_node(state, build_rules(settings))

        # 3) PageSpeed（並列）+ AI 3 ステージ
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            performance_future = pool.submit(nodes.performance_task, url, performance_fetcher)

            orchestrator = AnalysisOrchestrator(gateway=gateway, fallback=fallback)
            state = nodes.ai_analysis_node(state, orchestrator)

            performance = performance_future.result()

        # 4) 組み立て
        state = nodes.assemble_node(state, performance)

    except AuditError:
        raise
    except Exception as e:
        # どのノードで落ちたかを 500 応答の step に載せる
        raise PipelineError(str(e), step=state.get("current_node") or "unknown") from e

    logger.info(
        "[lg_workflow] run_audit done url=%s total=%s current_node=%s",
        url,
        state["result"].scores.total,
        state.get("current_node"),
    )
    return state
