# services/pagespeed_client.py
from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from models.performance_models import (
    CombinedPerformance,
    Opportunity,
    PageSpeedResult,
    PerformanceMetrics,
    PerformanceScores,
)
from services.numbers import average, round_half_up

logger = logging.getLogger(__name__)

PAGESPEED_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]

OPPORTUNITY_AUDITS = [
    "render-blocking-resources",
    "unused-css-rules",
    "unused-javascript",
    "modern-image-formats",
    "offscreen-images",
    "unminified-css",
    "unminified-javascript",
]

MAX_OPPORTUNITIES = 3

Fetcher = Callable[[str, str], Optional[PageSpeedResult]]


# ------------------------------------------------------------------
# レスポンス解析
# ------------------------------------------------------------------
def _category_score(categories: Dict[str, Any], key: str) -> Optional[int]:
    score = (categories.get(key) or {}).get("score")
    if score is None:
        return None
    return round_half_up(score * 100)


def parse_pagespeed_data(data: Dict[str, Any], strategy: str) -> PageSpeedResult:
    """PageSpeed API の JSON から必要なスコア・メトリクス・改善機会だけを抜き出す。"""
    lighthouse = data["lighthouseResult"]
    categories = lighthouse.get("categories") or {}
    audits = lighthouse.get("audits") or {}

    scores = PerformanceScores(
        performance=_category_score(categories, "performance"),
        accessibility=_category_score(categories, "accessibility"),
        best_practices=_category_score(categories, "best-practices"),
        seo=_category_score(categories, "seo"),
    )

    def numeric(audit_id: str) -> float:
        return (audits.get(audit_id) or {}).get("numericValue") or 0

    metrics = PerformanceMetrics(
        fcp=numeric("first-contentful-paint"),
        lcp=numeric("largest-contentful-paint"),
        cls=numeric("cumulative-layout-shift"),
        tbt=numeric("total-blocking-time"),
        si=numeric("speed-index"),
    )

    opportunities: List[Opportunity] = []
    for audit_id in OPPORTUNITY_AUDITS:
        audit = audits.get(audit_id)
        if not audit or audit.get("score") is None or audit["score"] >= 1:
            continue
        opportunities.append(
            Opportunity(
                id=audit_id,
                title=audit.get("title", "") or "",
                description=audit.get("description", "") or "",
                savings=audit.get("numericValue") or 0,
            )
        )

    # 削減見込みの大きい順（同値は定義順のまま）
    opportunities.sort(key=lambda o: o.savings, reverse=True)

    return PageSpeedResult(
        strategy=strategy,
        scores=scores,
        metrics=metrics,
        opportunities=opportunities[:MAX_OPPORTUNITIES],
        analysis_timestamp=data.get("analysisUTCTimestamp"),
    )


# ------------------------------------------------------------------
# API 呼び出し
# ------------------------------------------------------------------
class PageSpeedClient:
    def __init__(self, api_key: Optional[str] = None, timeout: float = 30.0) -> None:
        self.api_key = api_key
        self.timeout = timeout

    def fetch(self, url: str, strategy: str = "mobile") -> Optional[PageSpeedResult]:
        """
        1 strategy 分の PageSpeed を取得する。
        - エラー時は None（呼び出し元は None をそのまま「データ無し」として扱う）
        """
        params: List[tuple] = [("url", url), ("strategy", strategy)]
        params.extend(("category", c) for c in CATEGORIES)
        if self.api_key:
            params.append(("key", self.api_key))

        logger.info("[pagespeed] Request start: strategy=%s url=%s key=%s", strategy, url, bool(self.api_key))

        try:
            resp = requests.get(PAGESPEED_API_URL, params=params, timeout=self.timeout)
            resp.raise_for_status()
            return parse_pagespeed_data(resp.json(), strategy)
        except requests.RequestException as e:
            logger.warning("[pagespeed] Request failed: strategy=%s error=%s", strategy, e)
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("[pagespeed] Unexpected response: strategy=%s error=%s", strategy, e)
            return None


def combine_results(
    mobile: Optional[PageSpeedResult],
    desktop: Optional[PageSpeedResult],
) -> Optional[CombinedPerformance]:
    """mobile / desktop の平均を取る。両方 None なら None。"""
    if mobile is None and desktop is None:
        return None

    results = [r for r in (mobile, desktop) if r is not None]

    def avg(field: str) -> Optional[int]:
        return average([getattr(r.scores, field) for r in results])

    avg_scores = PerformanceScores(
        performance=avg("performance"),
        accessibility=avg("accessibility"),
        best_practices=avg("best_practices"),
        seo=avg("seo"),
    )

    return CombinedPerformance(
        mobile=mobile,
        desktop=desktop,
        average=avg_scores,
        overall_score=avg_scores.performance,
        has_both_results=mobile is not None and desktop is not None,
    )


def get_combined_pagespeed(url: str, fetch: Fetcher) -> Optional[CombinedPerformance]:
    """
    mobile / desktop を並列に取得して平均する。
    どちらの呼び出しもそれぞれのタイムアウトで打ち切られ、失敗は None になる。
    """
    with concurrent.futures.ThreadPoolExecutor(max_workers=2) as pool:
        mobile_future = pool.submit(fetch, url, "mobile")
        desktop_future = pool.submit(fetch, url, "desktop")
        mobile = _result_or_none(mobile_future, "mobile")
        desktop = _result_or_none(desktop_future, "desktop")

    combined = combine_results(mobile, desktop)
    logger.info(
        "[pagespeed] combined url=%s mobile=%s desktop=%s overall=%s",
        url,
        mobile is not None,
        desktop is not None,
        combined.overall_score if combined else None,
    )
    return combined


def _result_or_none(future: concurrent.futures.Future, strategy: str) -> Optional[PageSpeedResult]:
    try:
        return future.result()
    except Exception as e:  # noqa: BLE001
        logger.warning("[pagespeed] %s fetch raised: %s", strategy, e)
        return None


# ------------------------------------------------------------------
# 表示用ヘルパ
# ------------------------------------------------------------------
def format_metric(value: Optional[float], kind: str) -> str:
    """ms → '850ms' / '1.23s'、cls → 小数 3 桁。値が無ければ 'N/A'。"""
    if not value:
        return "N/A"
    if kind == "time":
        return f"{round_half_up(value)}ms" if value < 1000 else f"{value / 1000:.2f}s"
    if kind == "cls":
        return f"{value:.3f}"
    return str(value)


def performance_label(score: Optional[int]) -> Dict[str, str]:
    if score is not None and score >= 90:
        return {"label": "Excellent", "color": "green"}
    if score is not None and score >= 50:
        return {"label": "Needs Improvement", "color": "orange"}
    return {"label": "Poor", "color": "red"}
