"""Final screening output: deterministic signals fused with the AI opinion."""

from pydantic import BaseModel, ConfigDict

from models.schemas.job import WeightProfile
from models.schemas.skill_match import DeterministicSignalBundle, EvidenceItem


class ConfidenceBreakdown(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_confidence: float = 0.0
    data_completeness: float = 0.0
    coverage_confidence: float = 0.0
    final_confidence: float = 0.0


class Coverage(BaseModel):
    required_coverage: float = 0.0
    preferred_coverage: float = 0.0
    experience_match: float = 0.0


class FusionWeights(BaseModel):
    deterministic_weight: float = 1.0
    ai_weight: float = 0.0


class FusedResult(BaseModel):
    """Auditable, versioned fit score.

    ``deterministic_signals`` carries the full bundle the score was
    derived from; ``explainability`` records how much the AI contributed.
    """
    model_config = ConfigDict(protected_namespaces=())

    model_version: str
    fit_score: int = 0
    confidence: ConfidenceBreakdown = ConfidenceBreakdown()
    coverage: Coverage = Coverage()
    strengths: list[EvidenceItem] = []
    gaps: list[EvidenceItem] = []
    risk_flags: list[str] = []
    recommendation: str = ""
    explainability: FusionWeights = FusionWeights()
    scoring_weights: WeightProfile
    role_model: str = "default"
    prompt_hash: str = ""
    timestamp: str = ""
    deterministic_signals: DeterministicSignalBundle
    ai_raw_response: str = ""
