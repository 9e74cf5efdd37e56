# agents/response_parser.py

"""
LLM 応答のパース / 検証。
失敗は例外ではなく StageResult.invalid(...) として返す。
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Sequence

from models.stage_models import StageResult

logger = logging.getLogger(__name__)

# ```json / ``` のフェンスを除去する
_FENCE_RE = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)


def extract_json_object(text: str) -> StageResult:
    """
    応答テキストから JSON オブジェクトを取り出す。
    1) コードフェンスを除去
    2) 最初の '{' から最後の '}' までを切り出して json.loads
    """
    cleaned = _FENCE_RE.sub("", (text or "").strip())

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end < start:
        return StageResult.invalid("No JSON object found in response")

    try:
        data = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        logger.warning("[response_parser] JSON parse error: %s raw=%r", e, (text or "")[:500])
        return StageResult.invalid(f"invalid JSON: {e.msg}")

    if not isinstance(data, dict):
        return StageResult.invalid("JSON root is not an object")
    return StageResult.success(data)


def parse_json_response(text: str, required_arrays: Sequence[str]) -> StageResult:
    """JSON を取り出し、required_arrays の各キーが配列であることを確認する。"""
    result = extract_json_object(text)
    if not result.ok:
        return result

    data: Dict[str, Any] = result.value
    for key in required_arrays:
        if not isinstance(data.get(key), list):
            return StageResult.invalid(f"'{key}' is missing or not an array")
    return result


def parse_text_response(text: str) -> StageResult:
    """Storyteller 用。空文字だけは失敗扱い（ナラティブは必ず非空にする）。"""
    narrative = (text or "").strip()
    if not narrative:
        return StageResult.invalid("empty narrative")
    return StageResult.success(narrative)


def keep_valid_items(raw_items: List[Any], model_cls, label: str) -> List[Any]:
    """
    配列の各要素を pydantic モデルに変換する。
    形式が崩れた要素は捨てる（1 件の不備でステージ全体を落とさない）。
    """
    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        try:
            items.append(model_cls.model_validate(_normalize_keys(raw)))
        except ValueError as e:
            logger.warning("[response_parser] drop invalid %s item: %s", label, e)
    return items


def _normalize_keys(raw: Dict[str, Any]) -> Dict[str, Any]:
    """列挙値系のフィールドは小文字に寄せる（"High" → "high" など）。"""
    normalized = dict(raw)
    for key in ("category", "severity", "impact", "effort"):
        value = normalized.get(key)
        if isinstance(value, str):
            normalized[key] = value.strip().lower()
    return normalized
