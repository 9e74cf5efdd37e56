# tests/conftest.py
from typing import Dict, List, Optional, Union

import pytest

from models.page_models import (
    ButtonItem,
    ColorPair,
    CssSummary,
    FormInput,
    FormItem,
    Headings,
    ImageItem,
    LinkItem,
    PageModel,
    TextStats,
)
from models.stage_models import StageResult


class FakeGateway:
    """
    ステージ名 → 応答テキスト（または StageResult）の固定表で答えるゲートウェイ。
    表に無いステージは transport エラーになる。
    """

    def __init__(self, responses: Optional[Dict[str, Union[str, StageResult]]] = None) -> None:
        self.responses = responses or {}
        self.calls: List[str] = []

    def generate(self, prompt: str, *, stage: str = "") -> StageResult:
        self.calls.append(stage)
        response = self.responses.get(stage)
        if response is None:
            return StageResult.transport_error("unreachable")
        if isinstance(response, StageResult):
            return response
        return StageResult.success(response)


@pytest.fixture
def good_page() -> PageModel:
    """ほぼ満点になる、よく出来たランディングページ。"""
    return PageModel(
        url="https://example.com/",
        title="Example - Build better products",
        meta_description="Example helps product teams build, test and ship better web experiences every single week.",
        headings=Headings(
            h1=["Start building better products today"],
            h2=["Features", "Pricing"],
            h3=["Fast", "Secure"],
        ),
        paragraphs=[
            "Our platform helps teams ship faster with fewer bugs.",
            "Collaborate with your whole team in one place, in real time.",
            "Trusted by more than ten thousand companies worldwide.",
        ],
        links=[
            LinkItem(text="Pricing", href="/pricing"),
            LinkItem(text="Start free trial", href="/signup"),
        ],
        buttons=[ButtonItem(text="Get started now", type="button")],
        forms=[
            FormItem(
                id="signup",
                inputs=[
                    FormInput(type="email", name="email", label="Email", has_label=True),
                    FormInput(type="password", name="password", label="Password", has_label=True),
                ],
            )
        ],
        images=[
            ImageItem(src="/hero.png", alt="Dashboard screenshot"),
            ImageItem(src="/team.png", alt="Our team"),
        ],
        css_summary=CssSummary(
            body_font_size_px=16,
            color_pairs_sample=[
                ColorPair(fg="#000000", bg="#ffffff", element="body"),
                ColorPair(fg="#222222", bg="#ffffff", element="h1"),
            ],
        ),
        text_stats=TextStats(total_text_length=2000, html_length=10000, text_ratio=20.0),
    )


@pytest.fixture
def bare_page() -> PageModel:
    """H1 なし・meta なし・CTA なし・画像なし・12px フォントのページ。"""
    return PageModel(
        url="https://bare.example.com/",
        title="",
        meta_description="",
        headings=Headings(),
        paragraphs=[],
        links=[LinkItem(text="About", href="/about")],
        buttons=[],
        forms=[],
        images=[],
        # 色ペア無し → コントラストは中立の 30 点
        css_summary=CssSummary(body_font_size_px=12, color_pairs_sample=[]),
        text_stats=TextStats(total_text_length=100, html_length=10000, text_ratio=1.0),
    )


@pytest.fixture
def fake_gateway():
    """FakeGateway(responses) を作るファクトリ。"""
    return FakeGateway
