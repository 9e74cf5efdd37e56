# tests/test_api_routes.py
import pytest
from fastapi.testclient import TestClient

from app.api.routes import to_performance_block
from app.config import Settings, get_settings
from app.errors import CrawlError
from app.graph import nodes
from app.main import app
from models.performance_models import PageSpeedResult, PerformanceMetrics, PerformanceScores
from services.pagespeed_client import combine_results

GOOD_HTML = """
<html><head><title>Acme</title>
<meta name="description" content="Acme helps product teams build and ship better web experiences faster."></head>
<body>
  <h1>Start shipping better products</h1>
  <h2>Why Acme</h2>
  <p>Our platform helps teams ship faster with fewer bugs.</p>
  <p>Collaborate with your whole team in one place, in real time.</p>
  <button>Get started now</button>
  <img src="/hero.png" alt="Hero">
</body></html>
"""


@pytest.fixture
def client(monkeypatch):
    app.dependency_overrides[get_settings] = lambda: Settings(
        openai_api_key=None,
        pagespeed_api_key=None,
        fallback_strategy="default",
        pagespeed_enabled=False,
    )
    monkeypatch.setattr(nodes, "fetch_html", lambda url, timeout, max_chars: GOOD_HTML)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_missing_url(client):
    resp = client.post("/api/audit", json={})

    assert resp.status_code == 400
    assert resp.json() == {"error": "URL is required"}


def test_missing_body(client):
    resp = client.post("/api/audit")

    assert resp.status_code == 400


@pytest.mark.parametrize("url", ["not a url", "ftp://example.com", "https://"])
def test_invalid_url(client, url):
    resp = client.post("/api/audit", json={"url": url})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid URL format"}


def test_crawl_error(client, monkeypatch):
    def fail(url, timeout, max_chars):
        raise CrawlError("HTTP 404")

    monkeypatch.setattr(nodes, "fetch_html", fail)

    resp = client.post("/api/audit", json={"url": "https://example.com"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "HTTP 404", "step": "crawling"}


def test_audit_success_with_fallbacks(client):
    resp = client.post("/api/audit", json={"url": "https://example.com"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["url"] == "https://example.com"
    assert body["title"] == "Acme"
    assert body["timestamp"].endswith("Z")
    assert set(body["scores"]) == {"content", "layout", "cta", "accessibility", "total"}
    assert body["performance"] is None
    assert body["narrative"].strip()
    assert len(body["recommendations"]) >= 1
    assert body["metadata"] == {
        "h1": "Start shipping better products",
        "meta_description": "Acme helps product teams build and ship better web experiences faster.",
        "image_count": 1,
        "cta_count": 1,
        "form_count": 0,
    }


def test_unexpected_failure_reports_step(client, monkeypatch):
    def broken(state, performance):
        raise ValueError("broken assemble")

    monkeypatch.setattr(nodes, "assemble_node", broken)

    resp = client.post("/api/audit", json={"url": "https://example.com"})

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Internal server error",
        "message": "broken assemble",
        "step": "ai_analysis",
    }


def test_health(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "llm_configured": False,
        "pagespeed_key_configured": False,
        "fallback_strategy": "default",
    }


def test_performance_block_includes_display_metrics():
    desktop = PageSpeedResult(
        strategy="desktop",
        scores=PerformanceScores(performance=92),
        metrics=PerformanceMetrics(fcp=850.4, lcp=2346, cls=0.0512, tbt=0, si=1200),
    )

    block = to_performance_block(combine_results(None, desktop))

    assert block.overall == 92
    assert block.rating == {"label": "Excellent", "color": "green"}
    assert block.display_metrics == {
        "fcp": "850ms",
        "lcp": "2.35s",
        "cls": "0.051",
        "tbt": "N/A",
        "si": "1.20s",
    }
    assert to_performance_block(None) is None
