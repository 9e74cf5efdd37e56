# models/score_models.py

from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ScoreSet(BaseModel):
    """4 カテゴリのサブスコアと加重合計（すべて 0〜100 の整数）。"""

    model_config = ConfigDict(frozen=True)

    content: int = Field(..., ge=0, le=100)
    layout: int = Field(..., ge=0, le=100)
    cta: int = Field(..., ge=0, le=100)
    accessibility: int = Field(..., ge=0, le=100)
    total: int = Field(..., ge=0, le=100)

    def sub_scores(self) -> List[int]:
        return [self.content, self.layout, self.cta, self.accessibility]


# ------------------------------
# カテゴリ別の根拠データ（DetailSet）
# ------------------------------


class ContentDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_h1: bool = False
    h1_length_good: bool = False
    h1_has_action: bool = False
    meta_description_optimal: bool = False
    good_text_ratio: bool = False
    has_placeholder: bool = False
    good_paragraph_count: bool = False
    title_length_good: bool = False


class LayoutDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    single_h1: bool = False
    no_h1: bool = False
    multiple_h1: bool = False
    has_subheadings: bool = False
    proper_hierarchy: bool = False
    total_cta_count: int = 0
    optimal_cta_density: bool = False
    too_many_ctas: bool = False
    has_content_blocks: bool = False
    has_forms: bool = False
    good_image_count: bool = False
    many_images: bool = False


class CtaDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary_cta_count: int = 0
    cta_examples: List[str] = Field(default_factory=list)
    has_primary_cta: bool = False
    has_quality_ctas: bool = False
    most_ctas_quality: bool = False
    optimal_cta_count: bool = False
    too_many_competing_ctas: bool = False
    uses_buttons: bool = False


class AccessibilityDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    contrast_checks: int = 0
    passing_contrast: int = 0
    low_contrast_count: int = 0
    good_contrast: bool = False
    no_contrast_data: bool = False

    total_images: int = 0
    images_with_alt: int = 0
    # 画像が 0 枚のときは None（割合を定義できない）
    missing_alt_percentage: Optional[int] = None
    good_alt_coverage: bool = False
    no_images: bool = False

    body_font_size: int = 16
    good_font_size: bool = False

    total_inputs: int = 0
    inputs_with_labels: int = 0
    good_form_labels: bool = False
    no_forms: bool = False


class DetailSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: ContentDetails
    layout: LayoutDetails
    cta: CtaDetails
    accessibility: AccessibilityDetails


class FlagSet(BaseModel):
    """
    AI プロンプトとフォールバックのルールを駆動する真偽値シグナル。
    同じ PageModel からは常に同じ FlagSet が得られる。
    """

    model_config = ConfigDict(frozen=True)

    multiple_h1: bool = False
    no_h1: bool = False
    low_contrast: bool = False
    no_primary_cta: bool = False
    low_text_ratio: bool = False
    placeholder_text_detected: bool = False
    missing_alt_text: bool = False
    too_many_ctas: bool = False
    small_font: bool = False
    no_meta_description: bool = False

    def active(self) -> List[str]:
        """True になっているフラグ名をフィールド定義順で返す。"""
        return [name for name, value in self.model_dump().items() if value]


class ScoringResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    scores: ScoreSet
    flags: FlagSet
    details: DetailSet
