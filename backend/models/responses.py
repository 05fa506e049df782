from pydantic import BaseModel

from models.schemas.candidate import ParsedCv
from models.schemas.skill_match import AuditRecord, DeterministicSignalBundle


class HealthResponse(BaseModel):
    status: str = "ok"
    gemini_configured: bool = False
    ontology_size: int = 0


class ParseCvResponse(BaseModel):
    parsed: ParsedCv
    degraded: bool = False  # no text could be read


class SkillMatchResponse(BaseModel):
    parsed: ParsedCv
    result: DeterministicSignalBundle
    audit: AuditRecord
