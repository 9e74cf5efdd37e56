# app/graph/lg_state.py
from __future__ import annotations

from typing import Any, Dict


class AuditState(Dict[str, Any]):
    """
    監査ワークフローの「状態」コンテナ。
    実体はただの dict だが、型ヒントとして分かりやすくするためのラッパ。

    主なキー:
      url, page (PageModel), scoring (ScoringResult), ai_output (AIAnalysisOutput),
      performance (CombinedPerformance | None), result (AuditResult),
      progress_messages, current_node
    """
    pass


def create_initial_state(url: str) -> AuditState:
    """ワークフロー開始時の初期 state を作成。リクエストごとに新しく作る。"""
    state: AuditState = AuditState()
    state["url"] = url
    state["progress_messages"] = []  # 各ノードからのログ的メッセージ
    state["current_node"] = None
    return state
