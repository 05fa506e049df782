"""Language-model opinion after boundary validation."""

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from models.schemas.skill_match import EvidenceItem


class AIOpinion(BaseModel):
    """A validated AI opinion. Only produced by ``fusion.decode_opinion``."""
    model_config = ConfigDict(protected_namespaces=())

    fit_score: int = Field(ge=0, le=100)
    model_confidence: float = Field(ge=0, le=1)
    strengths: list[EvidenceItem] = []
    gaps: list[EvidenceItem] = []
    risk_flags: list[str] = []
    recommendation: str = ""


class OpinionDecode(BaseModel):
    """Outcome of decoding an untrusted payload.

    ``opinion`` is set only when ``status == "opinion"``.
    """
    status: Literal["opinion", "absent", "malformed"]
    opinion: AIOpinion | None = None
    reason: str = ""


class RawOpinionScores(BaseModel):
    """Range-checked numeric fields of the raw payload."""
    fit_score: float = Field(
        ge=0, le=100, allow_inf_nan=False,
        validation_alias=AliasChoices("fitScore", "fit_score"),
    )
    confidence: float = Field(
        ge=0, le=1, allow_inf_nan=False,
        validation_alias=AliasChoices("modelConfidence", "model_confidence", "confidence"),
    )
