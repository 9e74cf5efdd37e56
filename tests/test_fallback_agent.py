# tests/test_fallback_agent.py
import pytest

from agents.fallback_agent import (
    DetailedFallbackSynthesizer,
    FallbackSynthesizer,
    USER_TESTING_RECOMMENDATION,
    get_fallback_synthesizer,
)
from agents.scoring_agent import calculate_scores, weighted_total
from models.analysis_models import AnalysisResult, Issue
from models.score_models import (
    AccessibilityDetails,
    ContentDetails,
    CtaDetails,
    DetailSet,
    FlagSet,
    LayoutDetails,
    ScoreSet,
    ScoringResult,
)


def _scoring(content, layout, cta, accessibility, **flags):
    return ScoringResult(
        scores=ScoreSet(
            content=content,
            layout=layout,
            cta=cta,
            accessibility=accessibility,
            total=weighted_total(content, layout, cta, accessibility),
        ),
        flags=FlagSet(**flags),
        details=DetailSet(
            content=ContentDetails(),
            layout=LayoutDetails(),
            cta=CtaDetails(),
            accessibility=AccessibilityDetails(),
        ),
    )


@pytest.fixture
def fallback():
    return FallbackSynthesizer()


def test_bare_page_has_critical_h1_and_cta_issues(fallback, bare_page):
    analysis = fallback.analyze(calculate_scores(bare_page))

    critical = [(i.category, i.evidence) for i in analysis.issues if i.severity == "critical"]
    assert ("content", "H1 count = 0") in critical
    assert ("cta", "CTA count = 0") in critical
    assert analysis.strengths == []


def test_high_scores_become_strengths(fallback, good_page):
    analysis = fallback.analyze(calculate_scores(good_page))

    assert analysis.issues == []
    assert {s.category for s in analysis.strengths} == {"content", "layout", "cta", "accessibility"}


def test_generic_strength_when_best_score_is_at_least_60(fallback):
    analysis = fallback.analyze(_scoring(65, 55, 60, 45))

    assert len(analysis.strengths) == 1
    assert analysis.strengths[0].category == "general"


def test_no_strength_when_everything_is_low(fallback):
    assert fallback.analyze(_scoring(59, 40, 30, 20)).strengths == []


@pytest.mark.parametrize("score", [95, 70, 45, 10])
def test_narrative_is_never_empty(fallback, score):
    scoring = _scoring(score, score, score, score)
    narrative = fallback.narrate(scoring, fallback.analyze(scoring))

    assert narrative.strip()
    assert f"{score}/100" in narrative


def test_narrative_mentions_critical_count(fallback, bare_page):
    scoring = calculate_scores(bare_page)
    analysis = fallback.analyze(scoring)

    narrative = fallback.narrate(scoring, analysis)

    assert f"**{len(analysis.issues)} masalah**" in narrative
    assert "masalah kritis" in narrative


def test_no_issues_gives_single_user_testing_recommendation(fallback, good_page):
    scoring = calculate_scores(good_page)

    recs = fallback.recommend(scoring, AnalysisResult())

    assert recs == [USER_TESTING_RECOMMENDATION]
    assert recs[0].priority == 0


def test_recommendations_are_deduplicated_and_sorted(fallback, bare_page):
    scoring = calculate_scores(bare_page)

    recs = fallback.recommend(scoring, fallback.analyze(scoring))

    titles = [r.title for r in recs]
    assert len(titles) == len(set(titles))
    assert titles == [
        "Perbaiki Struktur Konten",
        "Optimalkan Call-to-Action",
        "Tingkatkan Hierarki Visual",
        "Perbaiki Aksesibilitas Dasar",
    ]
    priorities = [r.priority for r in recs]
    assert priorities == sorted(priorities, reverse=True)


def test_duplicate_title_keeps_highest_impact(fallback, good_page):
    analysis = AnalysisResult(issues=[
        Issue(category="layout", severity="minor", description="a"),
        Issue(category="layout", severity="critical", description="b"),
        Issue(category="layout", severity="major", description="c"),
    ])

    recs = fallback.recommend(calculate_scores(good_page), analysis)

    assert len(recs) == 1
    assert recs[0].impact == "high"
    assert recs[0].priority == 1


def test_detailed_strategy_uses_details(bare_page):
    detailed = get_fallback_synthesizer("detailed")
    scoring = calculate_scores(bare_page)

    recs = detailed.recommend(scoring, detailed.analyze(scoring))

    assert isinstance(detailed, DetailedFallbackSynthesizer)
    titles = [r.title for r in recs]
    assert "Tambahkan Heading Utama (H1)" in titles
    assert "Tambahkan Call-to-Action Utama" in titles
    assert "Tingkatkan Ukuran Font" in titles
    assert recs[0].priority == 2


def test_unknown_strategy_falls_back_to_default():
    synthesizer = get_fallback_synthesizer("nope")
    assert type(synthesizer) is FallbackSynthesizer


def test_no_primary_cta_is_critical_even_with_high_scores(fallback):
    analysis = fallback.analyze(_scoring(95, 95, 95, 95, no_primary_cta=True))

    assert ("cta", "critical") in [(i.category, i.severity) for i in analysis.issues]
