# agents/scoring_agent.py

from __future__ import annotations

from typing import List, Tuple

from agents.scoring_rules import DEFAULT_RULES, ScoringRules
from models.page_models import PageModel
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
from services.contrast import passes_contrast
from services.numbers import clamp, round_half_up

# ============================================================
# パラメータ
# ============================================================

# 合計スコアの重み（%）: Content 30 / Layout 25 / CTA 25 / Accessibility 20
WEIGHTS = {"content": 30, "layout": 25, "cta": 25, "accessibility": 20}

H1_MAX_LENGTH = 90
H1_PARTIAL_LENGTH = 120
TITLE_MAX_LENGTH = 70
META_MIN_LENGTH, META_MAX_LENGTH = 50, 160

GOOD_TEXT_RATIO = 15
PARTIAL_TEXT_RATIO = 5
LOW_TEXT_RATIO = 10

MAX_OPTIMAL_CTAS = 3
MAX_ACCEPTABLE_CTAS = 5
MAX_IMAGES = 10
MIN_FONT_SIZE = 14
GOOD_FONT_SIZE = 16


# ============================================================
# ユーティリティ
# ============================================================

def weighted_total(content: int, layout: int, cta: int, accessibility: int) -> int:
    """
    重み付き合計を整数演算で四捨五入する。
    浮動小数で 0.30 などを掛けると x.5 の境界がぶれるため。
    """
    n = (
        content * WEIGHTS["content"]
        + layout * WEIGHTS["layout"]
        + cta * WEIGHTS["cta"]
        + accessibility * WEIGHTS["accessibility"]
    )
    return (n + 50) // 100


def collect_ctas(page: PageModel, rules: ScoringRules) -> List[Tuple[str, str]]:
    """ボタン全部 + 動詞を含むリンクを (text, kind) のリストで返す。"""
    ctas = [(b.text, "button") for b in page.buttons]
    ctas.extend((l.text, "link") for l in page.links if rules.has_action_verb(l.text))
    return ctas


# ============================================================
# サブスコア
# ============================================================

def score_content(page: PageModel, rules: ScoringRules) -> Tuple[int, ContentDetails]:
    score = 0
    d = {}

    # 1. H1（最大 40）
    h1 = page.headings.h1[0] if page.headings.h1 else ""
    d["has_h1"] = bool(h1)
    if h1:
        score += 20
        if len(h1) <= H1_MAX_LENGTH:
            score += 10
            d["h1_length_good"] = True
        elif len(h1) <= H1_PARTIAL_LENGTH:
            score += 5
        if rules.has_action_verb(h1):
            score += 10
            d["h1_has_action"] = True

    # 2. meta description（最大 15）
    if page.meta_description:
        score += 10
        if META_MIN_LENGTH <= len(page.meta_description) <= META_MAX_LENGTH:
            score += 5
            d["meta_description_optimal"] = True

    # 3. テキスト比率（最大 10）
    ratio = page.text_stats.text_ratio
    if ratio >= GOOD_TEXT_RATIO:
        score += 10
        d["good_text_ratio"] = True
    elif ratio >= PARTIAL_TEXT_RATIO:
        score += 5

    # 4. プレースホルダ（-10）
    sample = " ".join(
        [page.title, page.meta_description, *page.headings.h1, *page.paragraphs[:5]]
    )
    d["has_placeholder"] = rules.has_placeholder_text(sample)
    if d["has_placeholder"]:
        score -= 10

    # 5. 段落数（最大 10）
    para_count = len(page.paragraphs)
    if 2 <= para_count <= 10:
        score += 10
        d["good_paragraph_count"] = True
    elif para_count == 1 or para_count > 20:
        pass
    else:
        score += 5

    # 6. title（最大 15）
    if page.title:
        score += 10
        if len(page.title) <= TITLE_MAX_LENGTH:
            score += 5
            d["title_length_good"] = True

    return clamp(score), ContentDetails(**d)


def score_layout(page: PageModel, rules: ScoringRules) -> Tuple[int, LayoutDetails]:
    score = 0
    d = {}

    # 1. 見出し構造（最大 35）
    h1_count = len(page.headings.h1)
    h2_count = len(page.headings.h2)
    h3_count = len(page.headings.h3)

    if h1_count == 1:
        score += 15
        d["single_h1"] = True
    elif h1_count == 0:
        d["no_h1"] = True
    else:
        score += 5
        d["multiple_h1"] = True

    if h2_count > 0 or h3_count > 0:
        score += 15
        d["has_subheadings"] = True

    if h1_count > 0 and h2_count > 0:
        score += 5
        d["proper_hierarchy"] = True

    # 2. CTA 密度（最大 25、多すぎると -10）
    total_ctas = len(collect_ctas(page, rules))
    d["total_cta_count"] = total_ctas
    if 1 <= total_ctas <= MAX_OPTIMAL_CTAS:
        score += 15
        d["optimal_cta_density"] = True
    elif total_ctas > MAX_ACCEPTABLE_CTAS:
        score -= 10
        d["too_many_ctas"] = True
    elif total_ctas > MAX_OPTIMAL_CTAS:
        score += 10

    # 3. コンテンツ構成（最大 20）
    if len(page.paragraphs) >= 3:
        score += 10
        d["has_content_blocks"] = True
    if 1 <= len(page.forms) <= 2:
        score += 10
        d["has_forms"] = True

    # 4. 画像（最大 20）
    image_count = len(page.images)
    if 1 <= image_count <= MAX_IMAGES:
        score += 20
        d["good_image_count"] = True
    elif image_count > MAX_IMAGES:
        score += 10
        d["many_images"] = True

    return clamp(score), LayoutDetails(**d)


def score_cta(page: PageModel, rules: ScoringRules) -> Tuple[int, CtaDetails]:
    score = 0
    ctas = collect_ctas(page, rules)
    d = {
        "primary_cta_count": len(ctas),
        "cta_examples": [text for text, _ in ctas[:3]],
    }

    # 1. CTA の有無（最大 20）
    if ctas:
        score += 20
        d["has_primary_cta"] = True

    # 2. 文言の質（最大 30）: 2 語以上 + 動詞
    quality = sum(
        1 for text, _ in ctas
        if len(text.split()) >= 2 and rules.has_action_verb(text)
    )
    if quality > 0:
        score += 15
        d["has_quality_ctas"] = True
        if quality >= len(ctas) * 0.5:
            score += 15
            d["most_ctas_quality"] = True

    # 3. 競合（最大 30、多すぎると -10）
    if 1 <= len(ctas) <= MAX_OPTIMAL_CTAS:
        score += 30
        d["optimal_cta_count"] = True
    elif len(ctas) > MAX_ACCEPTABLE_CTAS:
        score -= 10
        d["too_many_competing_ctas"] = True
    elif len(ctas) > MAX_OPTIMAL_CTAS:
        score += 15

    # 4. ネイティブボタン（最大 20）
    if page.buttons:
        score += 20
        d["uses_buttons"] = True
    elif ctas:
        score += 10

    return clamp(score), CtaDetails(**d)


def _rate_points(rate: float, steps: List[Tuple[float, int]]) -> int:
    for threshold, points in steps:
        if rate >= threshold:
            return points
    return 0


def score_accessibility(page: PageModel) -> Tuple[int, AccessibilityDetails]:
    score = 0
    d = {}

    # 1. コントラスト（最大 60）
    pairs = page.css_summary.color_pairs_sample
    passing = sum(1 for p in pairs if passes_contrast(p.fg, p.bg))
    d["contrast_checks"] = len(pairs)
    d["passing_contrast"] = passing
    d["low_contrast_count"] = len(pairs) - passing
    if pairs:
        points = _rate_points(passing / len(pairs), [(0.8, 60), (0.5, 40), (0.25, 20)])
        score += points
        d["good_contrast"] = points == 60
    else:
        score += 30
        d["no_contrast_data"] = True

    # 2. alt テキスト（最大 20）
    total_images = len(page.images)
    with_alt = sum(1 for img in page.images if img.alt and img.alt.lower() != "image")
    d["total_images"] = total_images
    d["images_with_alt"] = with_alt
    if total_images:
        alt_rate = with_alt / total_images
        d["missing_alt_percentage"] = round_half_up((1 - alt_rate) * 100)
        points = _rate_points(alt_rate, [(0.8, 20), (0.5, 10)])
        score += points
        d["good_alt_coverage"] = points == 20
    else:
        score += 10
        d["no_images"] = True

    # 3. フォントサイズ（最大 10）
    font_size = page.css_summary.body_font_size_px
    d["body_font_size"] = font_size
    if font_size >= GOOD_FONT_SIZE:
        score += 10
        d["good_font_size"] = True
    elif font_size >= MIN_FONT_SIZE:
        score += 5

    # 4. フォームラベル（最大 10）
    inputs = [field for form in page.forms for field in form.inputs]
    labelled = sum(1 for field in inputs if field.has_label)
    d["total_inputs"] = len(inputs)
    d["inputs_with_labels"] = labelled
    if inputs:
        points = _rate_points(labelled / len(inputs), [(0.8, 10), (0.5, 5)])
        score += points
        d["good_form_labels"] = points == 10
    else:
        score += 5
        d["no_forms"] = True

    return clamp(score), AccessibilityDetails(**d)


# ============================================================
# メインロジック
# ============================================================

def extract_flags(page: PageModel, details: DetailSet) -> FlagSet:
    missing_alt = details.accessibility.missing_alt_percentage
    return FlagSet(
        multiple_h1=len(page.headings.h1) > 1,
        no_h1=len(page.headings.h1) == 0,
        low_contrast=details.accessibility.low_contrast_count > 0,
        no_primary_cta=details.cta.primary_cta_count == 0,
        low_text_ratio=page.text_stats.text_ratio < LOW_TEXT_RATIO,
        placeholder_text_detected=details.content.has_placeholder,
        missing_alt_text=missing_alt is not None and missing_alt > 50,
        too_many_ctas=details.cta.primary_cta_count > MAX_ACCEPTABLE_CTAS,
        small_font=page.css_summary.body_font_size_px < MIN_FONT_SIZE,
        no_meta_description=not page.meta_description,
    )


def calculate_scores(page: PageModel, rules: ScoringRules = DEFAULT_RULES) -> ScoringResult:
    """
    PageModel から 4 つのサブスコア・合計・フラグ・根拠データを計算する。
    外部アクセスも乱数も使わない純粋関数。
    """
    content, content_details = score_content(page, rules)
    layout, layout_details = score_layout(page, rules)
    cta, cta_details = score_cta(page, rules)
    accessibility, accessibility_details = score_accessibility(page)

    details = DetailSet(
        content=content_details,
        layout=layout_details,
        cta=cta_details,
        accessibility=accessibility_details,
    )

    scores = ScoreSet(
        content=content,
        layout=layout,
        cta=cta,
        accessibility=accessibility,
        total=weighted_total(content, layout, cta, accessibility),
    )

    return ScoringResult(scores=scores, flags=extract_flags(page, details), details=details)
