"""Pydantic contracts passed between the scoring stages."""

from models.schemas.ai_opinion import AIOpinion, OpinionDecode
from models.schemas.candidate import Candidate, EmploymentEntry, ParsedCv
from models.schemas.cv_review import CvInsights, CvQualityResult, CvReviewResult, CvWeights
from models.schemas.fused_result import FusedResult
from models.schemas.job import Job, WeightProfile
from models.schemas.skill_match import AuditRecord, DeterministicSignalBundle, EvidenceItem

__all__ = [
    "AuditRecord",
    "AIOpinion",
    "OpinionDecode",
    "Candidate",
    "EmploymentEntry",
    "ParsedCv",
    "CvInsights",
    "CvQualityResult",
    "CvReviewResult",
    "CvWeights",
    "FusedResult",
    "Job",
    "WeightProfile",
    "DeterministicSignalBundle",
    "EvidenceItem",
]
