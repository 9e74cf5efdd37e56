# app/config.py

from functools import lru_cache
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリ全体で使う設定クラス。
    .env から環境変数を読み込み、属性として参照できるようにする。
    """

    # ---------- OpenAI（Analyzer / Storyteller / Recommender） ----------
    # 未設定の場合、3 ステージとも決定的フォールバックで応答する
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    llm_timeout_seconds: float = 30.0

    # ---------- PageSpeed Insights ----------
    # キー無しでも匿名枠で呼べる（レート制限は厳しい）
    pagespeed_api_key: str | None = None
    pagespeed_enabled: bool = True
    pagespeed_timeout_seconds: float = 30.0

    # ---------- クローラ ----------
    crawl_timeout_seconds: float = 8.0
    crawl_max_chars: int = 400_000

    # ---------- スコアリング / フォールバック ----------
    # "default": 指摘カテゴリ単位の提案 / "detailed": スコアと根拠データ単位の提案
    fallback_strategy: Literal["default", "detailed"] = "default"

    # 例: EXTRA_ACTION_VERBS='["kontak", "pesan"]'
    extra_action_verbs: List[str] = []
    extra_placeholder_phrases: List[str] = []

    log_level: str = "INFO"

    # ---------- Pydantic Settings 設定 ----------
    model_config = SettingsConfigDict(
        env_file=".env",            # .env を読む
        env_file_encoding="utf-8",
        extra="ignore",             # 定義外の環境変数があっても無視（エラーにしない）
    )


@lru_cache
def get_settings() -> Settings:
    """Settings をシングルトン的に使うためのヘルパ。"""
    return Settings()


# 他のモジュールからは `from app.config import settings` で利用
settings = get_settings()
