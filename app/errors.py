# app/errors.py

from __future__ import annotations


class AuditError(Exception):
    """監査パイプラインの境界を越えて呼び出し元に返すエラーの基底クラス。"""

    step: str = "unknown"

    def __init__(self, message: str, step: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if step is not None:
            self.step = step


class InputError(AuditError):
    """URL 未指定・不正な URL。どのステージも実行しない。"""

    step = "validation"


class CrawlError(AuditError):
    """タイムアウト・非 2xx・サイズ超過。スコアリング前に停止する。"""

    step = "crawling"


class ScoringError(AuditError):
    """正常な PageModel では発生しないはずの不変条件違反（500 扱い）。"""

    step = "scoring"


class PipelineError(AuditError):
    """上記以外の想定外エラー。step には失敗したノード名が入る（500 扱い）。"""
