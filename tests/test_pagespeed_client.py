# tests/test_pagespeed_client.py
import pytest
import requests

from models.performance_models import PageSpeedResult, PerformanceMetrics, PerformanceScores
from services import pagespeed_client
from services.pagespeed_client import (
    PageSpeedClient,
    combine_results,
    format_metric,
    get_combined_pagespeed,
    parse_pagespeed_data,
    performance_label,
)


def _result(strategy, performance, seo=None):
    return PageSpeedResult(
        strategy=strategy,
        scores=PerformanceScores(performance=performance, accessibility=None, best_practices=None, seo=seo),
        metrics=PerformanceMetrics(fcp=0, lcp=0, cls=0, tbt=0, si=0),
        opportunities=[],
    )


SAMPLE = {
    "analysisUTCTimestamp": "2024-01-01T00:00:00Z",
    "lighthouseResult": {
        "categories": {
            "performance": {"score": 0.875},
            "accessibility": {"score": 0.9},
            "best-practices": {"score": None},
            "seo": {"score": 1},
        },
        "audits": {
            "first-contentful-paint": {"numericValue": 850.2},
            "largest-contentful-paint": {"numericValue": 2400},
            "cumulative-layout-shift": {"numericValue": 0.05},
            "render-blocking-resources": {"score": 0.5, "title": "Render", "numericValue": 300},
            "unused-css-rules": {"score": 0.3, "title": "CSS", "numericValue": 900},
            "unused-javascript": {"score": 0.2, "title": "JS", "numericValue": 1200},
            "modern-image-formats": {"score": 0.4, "title": "Images", "numericValue": 100},
            "offscreen-images": {"score": 1, "title": "Offscreen", "numericValue": 5000},
            "unminified-css": {"score": None, "title": "Minify", "numericValue": 9999},
        },
    },
}


def test_parse_pagespeed_data():
    result = parse_pagespeed_data(SAMPLE, "mobile")

    assert result.scores.performance == 88
    assert result.scores.best_practices is None
    assert result.scores.seo == 100
    assert result.metrics.fcp == pytest.approx(850.2)
    assert result.metrics.tbt == 0
    # score >= 1 / None の監査は除外、削減量の大きい順に 3 件
    assert [o.id for o in result.opportunities] == ["unused-javascript", "unused-css-rules", "render-blocking-resources"]


def test_combine_uses_desktop_when_mobile_missing():
    combined = combine_results(None, _result("desktop", 72))

    assert combined.overall_score == 72
    assert combined.has_both_results is False


def test_combine_both_missing_is_none():
    assert combine_results(None, None) is None


def test_combine_averages_half_up():
    combined = combine_results(_result("mobile", 80, seo=None), _result("desktop", 91, seo=90))

    assert combined.overall_score == 86
    assert combined.average.seo == 90
    assert combined.has_both_results is True


def test_get_combined_pagespeed_tolerates_failing_strategy():
    def fetch(url, strategy):
        if strategy == "mobile":
            raise RuntimeError("quota")
        return _result(strategy, 60)

    combined = get_combined_pagespeed("https://example.com", fetch)

    assert combined.mobile is None
    assert combined.overall_score == 60


def test_client_returns_none_on_request_error(monkeypatch):
    def fake_get(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(pagespeed_client.requests, "get", fake_get)

    assert PageSpeedClient().fetch("https://example.com", "mobile") is None


@pytest.mark.parametrize(
    "value, kind, expected",
    [
        (None, "time", "N/A"),
        (0, "time", "N/A"),
        (850.4, "time", "850ms"),
        (2346, "time", "2.35s"),
        (0.0512, "cls", "0.051"),
    ],
)
def test_format_metric(value, kind, expected):
    assert format_metric(value, kind) == expected


def test_performance_label():
    assert performance_label(95)["label"] == "Excellent"
    assert performance_label(50)["color"] == "orange"
    assert performance_label(49)["label"] == "Poor"
    assert performance_label(None)["label"] == "Poor"
