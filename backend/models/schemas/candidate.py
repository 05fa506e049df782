"""Candidate records consumed by the scorers."""

from pydantic import BaseModel, Field, field_validator


class EmploymentEntry(BaseModel):
    """A single role in a candidate's employment history, oldest first."""
    title: str = ""
    company: str = ""
    tenure_months: float = Field(default=0.0, allow_inf_nan=False)

    @field_validator("title", "company", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("tenure_months", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0.0 if value is None else value


class Candidate(BaseModel):
    """Candidate profile as supplied by the calling layer.

    ``experience_years`` stays ``None`` when the caller did not state it,
    so "not provided" is distinguishable from an explicit zero.
    """
    name: str = ""
    email: str = ""
    role: str = ""  # stated/current role, used for domain matching
    summary: str = ""
    experience_years: float | None = Field(default=None, allow_inf_nan=False)
    skills: list[str] = []
    experience_history: list[EmploymentEntry] = []
    resume_text: str = ""
    education: str = ""
    certifications: list[str] = []

    @field_validator("name", "email", "role", "summary", "resume_text", "education", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("skills", "certifications", mode="before")
    @classmethod
    def _coerce_string_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value if v is not None]

    @field_validator("experience_history", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return [] if value is None else value


class ParsedCv(BaseModel):
    """Explicit-only extraction from resume text (no inferred skills)."""
    name: str = ""
    experience_years: float = 0.0
    skills: list[str] = []
    work_experience_roles: list[str] = []
    education: str = ""
    certifications: list[str] = []

    def to_candidate(self, base: Candidate | None = None) -> Candidate:
        """Merge parsed fields over the caller's candidate record."""
        base = base or Candidate()
        # 0 parsed years with nothing stated upstream stays "not provided"
        years = self.experience_years
        if base.experience_years is None and years <= 0:
            years = None
        return base.model_copy(update={
            "name": self.name,
            "experience_years": years,
            "skills": list(self.skills),
            "education": self.education,
            "certifications": list(self.certifications),
        })
