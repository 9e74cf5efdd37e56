# models/page_models.py

from __future__ import annotations

from typing import List
from pydantic import BaseModel, ConfigDict, Field


class _FrozenModel(BaseModel):
    """クロール結果は一度作ったら書き換えない（スコアリング側は読み取り専用）。"""

    model_config = ConfigDict(frozen=True)


class Headings(_FrozenModel):
    h1: List[str] = Field(default_factory=list)
    h2: List[str] = Field(default_factory=list)
    h3: List[str] = Field(default_factory=list)


class LinkItem(_FrozenModel):
    text: str
    href: str = ""


class ButtonItem(_FrozenModel):
    text: str
    # "button"（<button> / role=button）か "submit"（input[type=submit], a.btn 等）
    type: str = "button"


class FormInput(_FrozenModel):
    type: str = "text"
    name: str = ""
    label: str = ""
    has_label: bool = False


class FormItem(_FrozenModel):
    id: str = ""
    inputs: List[FormInput] = Field(default_factory=list)


class ImageItem(_FrozenModel):
    src: str = ""
    alt: str = ""


class ColorPair(_FrozenModel):
    """コントラスト計算用の前景色 / 背景色ペア（hex 文字列）。"""

    fg: str
    bg: str
    element: str = "body"


class CssSummary(_FrozenModel):
    body_font_size_px: int = 16
    colors: List[str] = Field(default_factory=list)
    color_pairs_sample: List[ColorPair] = Field(default_factory=list)


class TextStats(_FrozenModel):
    total_text_length: int = 0
    html_length: int = 0
    # body テキスト長 / HTML 長 のパーセンテージ（小数 2 桁）
    text_ratio: float = 0.0


class PageModel(_FrozenModel):
    """
    1ページ分のクロール結果。
    ScoringEngine / PromptBuilder はこのモデルだけを入力として扱う。
    """

    url: str
    title: str = ""
    meta_description: str = ""

    headings: Headings = Field(default_factory=Headings)

    # 20 文字以下の段落はパーサ側で除外済み
    paragraphs: List[str] = Field(default_factory=list)

    links: List[LinkItem] = Field(default_factory=list)
    buttons: List[ButtonItem] = Field(default_factory=list)
    forms: List[FormItem] = Field(default_factory=list)
    images: List[ImageItem] = Field(default_factory=list)

    css_summary: CssSummary = Field(default_factory=CssSummary)
    text_stats: TextStats = Field(default_factory=TextStats)
