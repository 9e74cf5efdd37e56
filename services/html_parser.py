# services/html_parser.py

from __future__ import annotations

import re
from typing import Dict, List, Optional
import logging

from bs4 import BeautifulSoup, Tag

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

logger = logging.getLogger(__name__)

# 20 文字以下の段落はナビゲーション断片などとみなして除外
MIN_PARAGRAPH_LENGTH = 20

BUTTON_SELECTOR = 'button, input[type="submit"], a.btn, a.button, [role="button"]'

DEFAULT_BODY_FG = "#000000"
DEFAULT_BODY_BG = "#ffffff"
DEFAULT_FONT_SIZE_PX = 16
MAX_COLORS = 10

_COLOR_TOKEN_RE = re.compile(r"#[0-9a-fA-F]{3,6}|rgb\([^)]+\)|rgba\([^)]+\)")
_RGB_RE = re.compile(r"rgba?\((\d+),\s*(\d+),\s*(\d+)")


def _text(tag: Tag) -> str:
    # strip=True は子要素間の空白まで消すので、外側だけ trim する
    return tag.get_text().strip()


def _inline_style(tag: Optional[Tag]) -> Dict[str, str]:
    """style 属性を {property: value} に分解する（外部 CSS は見ない）。"""
    if tag is None:
        return {}
    style = tag.get("style") or ""
    result: Dict[str, str] = {}
    for decl in style.split(";"):
        if ":" not in decl:
            continue
        prop, value = decl.split(":", 1)
        result[prop.strip().lower()] = value.strip()
    return result


def _extract_color(css_color: Optional[str]) -> Optional[str]:
    """CSS の色指定を hex に寄せる。hex / rgb() / rgba() 以外は None。"""
    if not css_color:
        return None
    if css_color.startswith("#"):
        return css_color

    m = _RGB_RE.search(css_color)
    if m:
        r, g, b = (min(255, int(v)) for v in m.groups())
        return f"#{r:02x}{g:02x}{b:02x}"
    return None


def _parse_font_size(value: Optional[str]) -> int:
    m = re.match(r"\s*(\d+)", value or "")
    size = int(m.group(1)) if m else 0
    return size or DEFAULT_FONT_SIZE_PX


def _extract_css_info(soup: BeautifulSoup) -> CssSummary:
    """
    インライン style からコントラスト判定用の色ペアとフォントサイズを集める。
    - body + 最初の h1 / p / button / a の 5 要素をサンプリング
    """
    colors: List[str] = []
    for el in soup.find_all(style=True):
        for token in _COLOR_TOKEN_RE.findall(el.get("style") or ""):
            if token not in colors:
                colors.append(token)

    body_style = _inline_style(soup.body)
    body_bg = _extract_color(body_style.get("background-color")) or DEFAULT_BODY_BG
    body_fg = _extract_color(body_style.get("color")) or DEFAULT_BODY_FG

    pairs: List[ColorPair] = [ColorPair(fg=body_fg, bg=body_bg, element="body")]
    for tag_name in ("h1", "p", "button", "a"):
        el = soup.find(tag_name)
        if el is None:
            continue
        style = _inline_style(el)
        fg = _extract_color(style.get("color")) or body_fg
        bg = _extract_color(style.get("background-color")) or body_bg
        pairs.append(ColorPair(fg=fg, bg=bg, element=tag_name))

    return CssSummary(
        body_font_size_px=_parse_font_size(body_style.get("font-size")),
        colors=colors[:MAX_COLORS],
        color_pairs_sample=pairs,
    )


def _extract_buttons(soup: BeautifulSoup) -> List[ButtonItem]:
    buttons: List[ButtonItem] = []
    for el in soup.select(BUTTON_SELECTOR):
        text = _text(el) or (el.get("value") or "").strip()
        if not text:
            continue
        is_button = el.name == "button" or el.get("role") == "button"
        buttons.append(ButtonItem(text=text, type="button" if is_button else "submit"))
    return buttons


def _find_label(soup: BeautifulSoup, field: Tag) -> Optional[Tag]:
    wrapping = field.find_parent("label")
    if wrapping is not None:
        return wrapping
    field_id = field.get("id")
    if field_id:
        return soup.find("label", attrs={"for": field_id})
    return None


def _extract_forms(soup: BeautifulSoup) -> List[FormItem]:
    forms: List[FormItem] = []
    for idx, form in enumerate(soup.find_all("form")):
        inputs: List[FormInput] = []
        for field in form.find_all(["input", "textarea", "select"]):
            label = _find_label(soup, field)
            inputs.append(
                FormInput(
                    type=field.get("type") or "text",
                    name=field.get("name") or "",
                    label=_text(label) if label is not None else "",
                    has_label=label is not None,
                )
            )
        forms.append(FormItem(id=form.get("id") or f"form_{idx}", inputs=inputs))
    return forms


def _text_stats(soup: BeautifulSoup, html: str) -> TextStats:
    root = soup.body or soup
    text_length = len(root.get_text().strip())
    html_length = len(html)
    ratio = round(text_length / html_length * 100, 2) if html_length else 0.0
    return TextStats(total_text_length=text_length, html_length=html_length, text_ratio=ratio)


def parse_page(url: str, html: str) -> PageModel:
    """
    HTML文字列を解析して PageModel を生成する。
    ※ ここではネットワークアクセスは行わない（fetch_html で取得済み前提）
    """
    soup = BeautifulSoup(html, "html.parser")

    title = _text(soup.title) if soup.title else ""
    meta_desc_tag = soup.find("meta", attrs={"name": "description"})
    meta_description = (meta_desc_tag.get("content") or "") if meta_desc_tag else ""

    headings = Headings(
        h1=[_text(h) for h in soup.find_all("h1")],
        h2=[_text(h) for h in soup.find_all("h2")],
        h3=[_text(h) for h in soup.find_all("h3")],
    )

    paragraphs = [
        text for text in (_text(p) for p in soup.find_all("p"))
        if len(text) > MIN_PARAGRAPH_LENGTH
    ]

    links = [
        LinkItem(text=_text(a), href=a.get("href") or "")
        for a in soup.find_all("a")
        if _text(a)
    ]

    images = [
        ImageItem(src=img.get("src") or "", alt=img.get("alt") or "")
        for img in soup.find_all("img")
    ]

    page = PageModel(
        url=url,
        title=title,
        meta_description=meta_description,
        headings=headings,
        paragraphs=paragraphs,
        links=links,
        buttons=_extract_buttons(soup),
        forms=_extract_forms(soup),
        images=images,
        css_summary=_extract_css_info(soup),
        text_stats=_text_stats(soup, html),
    )

    logger.info(
        "[html_parser] parsed url=%s h1=%s paragraphs=%s links=%s buttons=%s images=%s",
        url,
        len(headings.h1),
        len(paragraphs),
        len(links),
        len(page.buttons),
        len(images),
    )
    return page
