# models/stage_models.py

from __future__ import annotations

from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict

FailureKind = Literal["transport", "validation_failed"]


class StageFailure(BaseModel):
    """
    ステージ失敗の理由。
    - transport: 通信エラー / タイムアウト / クォータ超過 / キー未設定
    - validation_failed: 応答は返ったが期待する形になっていない
    """

    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    detail: str = ""


class StageResult(BaseModel):
    """Ok(value) | Err(failure)。例外ではなく値で失敗を受け渡す。"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = None
    failure: Optional[StageFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: Any) -> "StageResult":
        return cls(value=value)

    @classmethod
    def transport_error(cls, detail: str) -> "StageResult":
        return cls(failure=StageFailure(kind="transport", detail=detail))

    @classmethod
    def invalid(cls, detail: str) -> "StageResult":
        return cls(failure=StageFailure(kind="validation_failed", detail=detail))
