"""Job records and the role-model weight profiles applied to them."""

from pydantic import BaseModel, Field, field_validator, model_validator


class Job(BaseModel):
    id: str = ""
    title: str = ""
    department: str = ""
    description: str = ""
    min_experience: float = Field(default=0.0, allow_inf_nan=False)
    required_skills: list[str] = []
    preferred_skills: list[str] = []

    @field_validator("id", "title", "department", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else str(value)

    @field_validator("min_experience", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0.0 if value is None else value

    @field_validator("required_skills", "preferred_skills", mode="before")
    @classmethod
    def _coerce_string_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value if v is not None]


class WeightProfile(BaseModel):
    """Four skill-match weights; must sum to 1.0."""
    required_weight: float = Field(ge=0, le=1)
    preferred_weight: float = Field(ge=0, le=1)
    experience_weight: float = Field(ge=0, le=1)
    soft_skill_weight: float = Field(default=0.0, ge=0, le=1)

    @model_validator(mode="after")
    def _check_sum(self):
        total = (
            self.required_weight
            + self.preferred_weight
            + self.experience_weight
            + self.soft_skill_weight
        )
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"weight profile must sum to 1.0, got {total:.4f}")
        return self
