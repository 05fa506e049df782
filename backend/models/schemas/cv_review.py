"""CV-quality scoring and hybrid CV review outputs."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.schemas.skill_match import EvidenceItem


class CvWeights(BaseModel):
    """Dimension weights for the overall CV score; must sum to 1.0."""
    structure: float = Field(default=0.2, ge=0, le=1)
    skill_density: float = Field(default=0.2, ge=0, le=1)
    experience_depth: float = Field(default=0.2, ge=0, le=1)
    achievements: float = Field(default=0.2, ge=0, le=1)
    clarity: float = Field(default=0.2, ge=0, le=1)

    @model_validator(mode="after")
    def _check_sum(self):
        total = sum(self.model_dump().values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"CV weights must sum to 1.0, got {total:.4f}")
        return self


class CvBreakdown(BaseModel):
    """Five sub-scores, each 0-20."""
    structure: int = 0
    skill_density: int = 0
    experience_depth: int = 0
    achievements: int = 0
    clarity: int = 0


class CvConfidence(BaseModel):
    data_completeness: float = 0.0
    structural_confidence: float = 0.0


class CvQualityResult(BaseModel):
    overall_score: int = 0  # 0-100
    breakdown: CvBreakdown = CvBreakdown()
    risk_flags: list[str] = []
    confidence: CvConfidence = CvConfidence()
    diagnostics: dict[str, dict[str, Any]] = {}


class CvInsights(BaseModel):
    """Qualitative interpretation; never alters the numeric score."""
    model_config = ConfigDict(protected_namespaces=())

    executive_summary: str = ""
    strengths: list[EvidenceItem] = []
    improvements: list[EvidenceItem] = []
    seniority_estimate: str = "Mid"
    hiring_readiness: str = "Needs Review"
    model_confidence: float = 0.55


class CvReviewConfidence(CvConfidence):
    ai_confidence: float = 0.0
    final_confidence: float = 0.0


class CvReviewAudit(BaseModel):
    scoring_version: str = ""
    scoring_weights: CvWeights = CvWeights()
    prompt_hash: str = ""
    deterministic_diagnostics: dict[str, dict[str, Any]] = {}
    ai_raw_response: str = ""
    ai_used: bool = False


class CvReviewResult(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_version: str
    overall_score: int = 0
    breakdown: CvBreakdown = CvBreakdown()
    ai_insights: CvInsights = CvInsights()
    risk_flags: list[str] = []
    confidence: CvReviewConfidence = CvReviewConfidence()
    audit: CvReviewAudit = CvReviewAudit()
