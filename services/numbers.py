# services/numbers.py

import math
from typing import Optional, Sequence


def round_half_up(value: float) -> int:
    """0.5 は常に切り上げ（Python の round() は偶数丸めなので使わない）。"""
    return int(math.floor(value + 0.5))


def clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def average(values: Sequence[Optional[float]]) -> Optional[int]:
    """None を除いた平均（四捨五入）。有効値が無ければ None。"""
    valid = [v for v in values if v is not None]
    if not valid:
        return None
    return round_half_up(sum(valid) / len(valid))
