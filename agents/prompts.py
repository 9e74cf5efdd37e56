# agents/prompts.py

"""
3 つの AI ステージ（Analyzer / Storyteller / Recommender）のプロンプト。
同じ入力からは常に同じ文字列を生成する。
"""

from __future__ import annotations

import json

from models.analysis_models import AnalysisResult
from models.page_models import PageModel
from models.score_models import ScoringResult


def _details_json(model) -> str:
    return json.dumps(model.model_dump(exclude_none=True), ensure_ascii=False, indent=2)


def build_analyzer_prompt(page: PageModel, scoring: ScoringResult) -> str:
    scores, details = scoring.scores, scoring.details
    h1 = page.headings.h1[0] if page.headings.h1 else "None"
    flags = "\n".join(f"- {name}: true" for name in scoring.flags.active()) or "- (none)"

    return f"""
You are a UX Analysis Expert. Analyze this website audit data and identify specific issues.

## Website Data:
- URL: {page.url}
- Title: {page.title}
- H1: {h1}

## Scores (0-100):
- Content Clarity: {scores.content}
- Layout & Hierarchy: {scores.layout}
- Actionability/CTA: {scores.cta}
- Accessibility (WCAG-lite): {scores.accessibility}
- TOTAL: {scores.total}

## Detected Flags:
{flags}

## Score Details:
Content: {_details_json(details.content)}
Layout: {_details_json(details.layout)}
CTA: {_details_json(details.cta)}
Accessibility: {_details_json(details.accessibility)}

## Your Task:
Identify 5-10 specific UX issues based on:
1. Low scores (below 70)
2. Active flags
3. Missing elements or poor practices

For each issue, provide:
- category: "content" | "layout" | "cta" | "accessibility"
- severity: "critical" | "major" | "minor"
- description: Brief, specific problem (1 sentence, in Indonesian)
- evidence: What data shows this (reference scores/flags)

Also identify 2-3 strengths/good practices.

Return ONLY valid JSON (no markdown, no explanation):
{{
  "issues": [
    {{"category": "...", "severity": "...", "description": "...", "evidence": "..."}}
  ],
  "strengths": [
    {{"category": "...", "description": "..."}}
  ]
}}
""".strip()


def build_storyteller_prompt(page: PageModel, scoring: ScoringResult, analysis: AnalysisResult) -> str:
    scores = scoring.scores
    issues = "\n".join(f"- [{i.severity}] {i.description}" for i in analysis.issues) or "- (none)"
    strengths = "\n".join(f"- {s.description}" for s in analysis.strengths) or "- (none)"

    return f"""
You are a UX Storyteller. Create a clear, friendly narrative overview for non-technical users.

## Website:
- {page.title} ({page.url})

## Overall Score: {scores.total}/100
- Content: {scores.content}/100
- Layout: {scores.layout}/100
- CTA: {scores.cta}/100
- Accessibility: {scores.accessibility}/100

## Issues Found:
{issues}

## Strengths:
{strengths}

## Your Task:
Write a 3-4 paragraph overview in Indonesian that:
1. Starts with the overall impression (good/needs improvement)
2. Highlights the main problems affecting user experience
3. Mentions what's working well
4. Ends with encouragement and next steps

Tone: Professional but friendly, empathetic, solution-focused.
Avoid jargon. Make it actionable.

Return ONLY the narrative text (no JSON, no markdown formatting):
""".strip()


def build_recommender_prompt(page: PageModel, scoring: ScoringResult, analysis: AnalysisResult) -> str:
    scores, details = scoring.scores, scoring.details
    a11y = details.accessibility
    issues = "\n".join(
        f"{idx}. [{i.severity}] {i.category}: {i.description}"
        for idx, i in enumerate(analysis.issues, start=1)
    ) or "(no issues found)"

    return f"""
You are a UX Solutions Architect. Create actionable recommendations to fix identified issues.

## Website Context:
- URL: {page.url}
- Current Score: {scores.total}/100

## Issues to Address:
{issues}

## Current State Details:
- H1 count: {len(page.headings.h1)}
- CTA count: {details.cta.primary_cta_count}
- Images with alt: {a11y.images_with_alt}/{a11y.total_images}
- Font size: {a11y.body_font_size}px
- Form inputs with labels: {a11y.inputs_with_labels}/{a11y.total_inputs}

## Your Task:
Generate 5-8 prioritized recommendations. For each:
- title: Clear action to take (4-8 words)
- description: Specific how-to (1-2 sentences, in Indonesian)
- category: Which area it fixes
- impact: "high" | "medium" | "low" (business/user impact)
- effort: "low" | "medium" | "high" (implementation difficulty)
- priority: Calculate as (impact score - effort score), where high=3, medium=2, low=1

Focus on:
1. Critical/major issues first
2. Quick wins (high impact, low effort)
3. Specific, actionable advice (not generic "improve UX")

Return ONLY valid JSON (no markdown):
{{
  "recommendations": [
    {{"title": "...", "description": "...", "category": "...", "impact": "...", "effort": "...", "priority": 0}}
  ]
}}

Sort by priority (highest first).
""".strip()
