# agents/scoring_rules.py

from __future__ import annotations

from typing import FrozenSet, Iterable

from pydantic import BaseModel, ConfigDict

# 英語 + インドネシア語の CTA 動詞（部分一致で判定）
DEFAULT_ACTION_VERBS: FrozenSet[str] = frozenset({
    "start", "mulai", "get", "dapatkan", "try", "coba",
    "join", "gabung", "sign up", "daftar", "register",
    "download", "unduh", "buy", "beli", "subscribe",
    "learn", "pelajari", "discover", "temukan", "explore",
    "create", "buat", "build", "bangun", "boost", "tingkatkan",
})

DEFAULT_PLACEHOLDER_PHRASES: FrozenSet[str] = frozenset({
    "lorem ipsum",
    "dolor sit amet",
    "consectetur adipiscing",
    "placeholder",
    "sample text",
    "dummy text",
})


class ScoringRules(BaseModel):
    """
    ScoringEngine が使う文字列ルックアップ表。
    ロケールを増やしたいときはスコア計算を触らずにここへ語を足す。
    """

    model_config = ConfigDict(frozen=True)

    action_verbs: FrozenSet[str] = DEFAULT_ACTION_VERBS
    placeholder_phrases: FrozenSet[str] = DEFAULT_PLACEHOLDER_PHRASES

    def has_action_verb(self, text: str) -> bool:
        lower = (text or "").lower()
        return any(verb in lower for verb in self.action_verbs)

    def has_placeholder_text(self, text: str) -> bool:
        lower = (text or "").lower()
        return any(phrase in lower for phrase in self.placeholder_phrases)

    def extended(
        self,
        action_verbs: Iterable[str] = (),
        placeholder_phrases: Iterable[str] = (),
    ) -> "ScoringRules":
        return ScoringRules(
            action_verbs=self.action_verbs | {v.lower() for v in action_verbs if v},
            placeholder_phrases=self.placeholder_phrases | {p.lower() for p in placeholder_phrases if p},
        )


DEFAULT_RULES = ScoringRules()
