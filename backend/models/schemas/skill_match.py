"""Deterministic skill-match output: the trusted evidence pool for fusion."""

from pydantic import BaseModel, ConfigDict

from models.schemas.job import WeightProfile


class EvidenceItem(BaseModel):
    """A strength or gap claim with the text backing it."""
    label: str
    evidence: str = ""


class DeterministicSignalBundle(BaseModel):
    """Rule-based candidate/job match signals.

    All ratios are rounded to 3 decimals and lie in [0, 1];
    ``fit_score`` lies in [0, 100].
    """
    model_config = ConfigDict(protected_namespaces=())

    role_model: str = "default"
    scoring_weights: WeightProfile

    # Normalized skill lists
    candidate_skills: list[str] = []
    required_skills: list[str] = []
    preferred_skills: list[str] = []
    matched_required: list[str] = []
    missing_required: list[str] = []
    matched_preferred: list[str] = []
    missing_preferred: list[str] = []

    required_coverage: float = 0.0
    preferred_coverage: float = 0.0
    experience_match: float = 0.0
    min_experience: float = 0.0
    candidate_experience: float = 0.0
    experience_gap: float = 0.0

    fit_score: int = 0
    hiring_recommendation: str = ""  # Strong / Moderate / Weak Match

    model_confidence: float = 0.0
    data_completeness: float = 0.0
    coverage_confidence: float = 0.0
    confidence: float = 0.0  # 35/65 blend of completeness and coverage

    strengths: list[EvidenceItem] = []
    gaps: list[EvidenceItem] = []
    risk_flags: list[str] = []
    recommendation: str = ""
    scoring_model_version: str = ""


class AuditRecord(BaseModel):
    """Flat record a persistence layer appends after a skill match."""
    model_config = ConfigDict(protected_namespaces=())

    id: str
    timestamp: str
    candidate_name: str = ""
    skills: str = ""
    experience_years: float = 0.0
    selected_job: str = ""
    fit_score: int = 0
    matched_required_skills: str = ""
    missing_required_skills: str = ""
    cv_text: str = ""
    required_coverage: float = 0.0
    preferred_coverage: float = 0.0
    experience_match: float = 0.0
    confidence_score: float = 0.0
    scoring_model_version: str = ""
