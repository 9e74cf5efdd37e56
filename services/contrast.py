# services/contrast.py

"""
WCAG 2.1 の相対輝度 / コントラスト比の計算。
色は hex 文字列（#rgb / #rrggbb）で受け取る。
"""

from __future__ import annotations

from typing import Optional, Tuple

# hex として解釈できない色は中間値として扱う
NEUTRAL_LUMINANCE = 0.5

# WCAG AA（通常テキスト）
MIN_CONTRAST_RATIO = 4.5


def parse_hex_color(color: str) -> Optional[Tuple[int, int, int]]:
    """'#1a2b3c' / '#abc' を (r, g, b) に変換する。解釈できなければ None。"""
    if not color or not color.startswith("#"):
        return None
    value = color[1:]
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        return None
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError:
        return None


def _linearize(channel: float) -> float:
    if channel <= 0.03928:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def relative_luminance(color: str) -> float:
    rgb = parse_hex_color(color)
    if rgb is None:
        return NEUTRAL_LUMINANCE

    r, g, b = (_linearize(c / 255) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(color1: str, color2: str) -> float:
    l1 = relative_luminance(color1)
    l2 = relative_luminance(color2)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def passes_contrast(fg: str, bg: str, threshold: float = MIN_CONTRAST_RATIO) -> bool:
    return contrast_ratio(fg, bg) >= threshold
