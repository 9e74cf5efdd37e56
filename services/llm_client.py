# services/llm_client.py

from __future__ import annotations

import logging
from typing import Protocol

from openai import OpenAI, OpenAIError

from app.config import Settings
from models.stage_models import StageResult

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-mini"


class ModelGateway(Protocol):
    """プロンプト 1 件を生成モデルに投げ、生テキストか transport エラーを返す。"""

    def generate(self, prompt: str, *, stage: str = "") -> StageResult:
        ...


class OpenAIGateway:
    """
    OpenAI Chat Completions を使うゲートウェイ。
    リトライはしない（1 回失敗したら即フォールバック）。
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout: float = 30.0,
        temperature: float = 0.4,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self._client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def generate(self, prompt: str, *, stage: str = "") -> StageResult:
        logger.info("[llm_client] call start stage=%s model=%s", stage, self.model)
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.warning("[llm_client] call failed stage=%s error=%s", stage, e)
            return StageResult.transport_error(f"{type(e).__name__}: {e}")

        usage = getattr(resp, "usage", None)
        content = resp.choices[0].message.content or ""
        logger.info(
            "[llm_client] response stage=%s length=%s total_tokens=%s",
            stage,
            len(content),
            getattr(usage, "total_tokens", None) if usage else None,
        )
        return StageResult.success(content)


class UnavailableGateway:
    """OPENAI_API_KEY 未設定時に使う。常に transport エラーを返す。"""

    def generate(self, prompt: str, *, stage: str = "") -> StageResult:
        return StageResult.transport_error("OPENAI_API_KEY が設定されていません")


def build_gateway(settings: Settings) -> ModelGateway:
    """Settings から 1 リクエスト分のゲートウェイを組み立てる。"""
    if not settings.openai_api_key:
        logger.warning("[llm_client] OPENAI_API_KEY が未設定のため全ステージをフォールバックで処理します")
        return UnavailableGateway()
    return OpenAIGateway(
        api_key=settings.openai_api_key,
        model=settings.openai_model or DEFAULT_MODEL,
        timeout=settings.llm_timeout_seconds,
    )
