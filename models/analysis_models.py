# models/analysis_models.py

from typing import List, Literal
from pydantic import BaseModel, ConfigDict, Field

Category = Literal["content", "layout", "cta", "accessibility"]
Severity = Literal["critical", "major", "minor"]


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Category
    severity: Severity
    description: str
    evidence: str = ""


class Strength(BaseModel):
    model_config = ConfigDict(frozen=True)

    # 4 カテゴリ以外に、フォールバック時の "general" も入りうる
    category: str
    description: str


class AnalysisResult(BaseModel):
    """Analyzer ステージの出力。Storyteller / Recommender の入力にもなる。"""

    model_config = ConfigDict(frozen=True)

    issues: List[Issue] = Field(default_factory=list)
    strengths: List[Strength] = Field(default_factory=list)

    def count_by_severity(self, severity: str) -> int:
        return sum(1 for i in self.issues if i.severity == severity)
