# app/graph/orchestrator.py
from __future__ import annotations

import concurrent.futures
import logging
from typing import Callable, Tuple

from agents.analyzer_agent import run_analyzer
from agents.fallback_agent import FallbackSynthesizer
from agents.recommender_agent import run_recommender
from agents.storyteller_agent import run_storyteller
from models.audit_models import AIAnalysisOutput, StageSource
from models.page_models import PageModel
from models.score_models import ScoringResult
from models.stage_models import StageResult
from services.llm_client import ModelGateway

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """
    Analyzer → (Storyteller ∥ Recommender) の 3 ステージを実行する。

    - Storyteller と Recommender はどちらも Analyzer の結果だけに依存するので並列に走らせる
    - 各ステージの失敗（transport / validation_failed）はそのステージのフォールバックで置き換え、
      呼び出し元には決して伝播させない
    - gateway / fallback はリクエストごとに外から渡す（モジュール共有の状態は持たない）
    """

    def __init__(self, gateway: ModelGateway, fallback: FallbackSynthesizer) -> None:
        self.gateway = gateway
        self.fallback = fallback

    def _resolve(
        self,
        stage: str,
        result: StageResult,
        fallback: Callable[[], object],
    ) -> Tuple[object, StageSource]:
        if result.ok:
            logger.info("[orchestrator] stage=%s source=llm", stage)
            return result.value, "llm"

        logger.warning(
            "[orchestrator] stage=%s fallback=%s reason=%s detail=%s",
            stage,
            self.fallback.name,
            result.failure.kind,
            result.failure.detail,
        )
        return fallback(), "fallback"

    def _call(self, stage: str, fn: Callable[..., StageResult], *args) -> StageResult:
        """ゲートウェイ実装の想定外の例外も transport 失敗として扱う。"""
        try:
            return fn(self.gateway, *args)
        except Exception as e:  # noqa: BLE001
            logger.exception("[orchestrator] stage=%s raised unexpectedly", stage)
            return StageResult.transport_error(f"{type(e).__name__}: {e}")

    def run(self, page: PageModel, scoring: ScoringResult) -> AIAnalysisOutput:
        # ----- Stage 1: Analyzer -----
        analysis, analyzer_source = self._resolve(
            "analyzer",
            self._call("analyzer", run_analyzer, page, scoring),
            lambda: self.fallback.analyze(scoring),
        )

        # ----- Stage 2 / 3: Storyteller ∥ Recommender -----
        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as pool:
            story_future = pool.submit(self._call, "storyteller", run_storyteller, page, scoring, analysis)
            rec_future = pool.submit(self._call, "recommender", run_recommender, page, scoring, analysis)
            story_result = story_future.result()
            rec_result = rec_future.result()

        narrative, storyteller_source = self._resolve(
            "storyteller",
            story_result,
            lambda: self.fallback.narrate(scoring, analysis),
        )
        recommendations, recommender_source = self._resolve(
            "recommender",
            rec_result,
            lambda: self.fallback.recommend(scoring, analysis),
        )

        return AIAnalysisOutput(
            analysis=analysis,
            narrative=narrative,
            recommendations=recommendations,
            stage_sources={
                "analyzer": analyzer_source,
                "storyteller": storyteller_source,
                "recommender": recommender_source,
            },
        )
