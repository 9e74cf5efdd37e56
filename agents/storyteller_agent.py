# agents/storyteller_agent.py

from agents.prompts import build_storyteller_prompt
from agents.response_parser import parse_text_response
from models.analysis_models import AnalysisResult
from models.page_models import PageModel
from models.score_models import ScoringResult
from models.stage_models import StageResult
from services.llm_client import ModelGateway

STAGE = "storyteller"


def run_storyteller(
    gateway: ModelGateway,
    page: PageModel,
    scoring: ScoringResult,
    analysis: AnalysisResult,
) -> StageResult:
    """Stage 2: 非エンジニア向けのナラティブ（自由テキスト）を生成する。"""
    prompt = build_storyteller_prompt(page, scoring, analysis)
    response = gateway.generate(prompt, stage=STAGE)
    if not response.ok:
        return response
    return parse_text_response(response.value)
