from pydantic import BaseModel, Field

from models.schemas.candidate import Candidate
from models.schemas.cv_review import CvWeights
from models.schemas.job import Job


class ParseCvRequest(BaseModel):
    resume_text: str = Field(..., max_length=50000, description="Plain text resume content")
    candidate: Candidate = Candidate()


class SkillMatchRequest(BaseModel):
    resume_text: str = Field("", max_length=50000, description="Plain text resume content")
    candidate: Candidate = Candidate()
    job: Job


class ScreenRequest(BaseModel):
    candidate: Candidate
    job: Job


class CvReviewRequest(BaseModel):
    resume_text: str = Field("", max_length=50000, description="Plain text resume content")
    candidate: Candidate = Candidate()
    job: Job | None = None
    weights: CvWeights | None = None
