import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_ontology, get_role_selector
from config import settings
from models.requests import CvReviewRequest, ParseCvRequest, ScreenRequest, SkillMatchRequest
from models.responses import HealthResponse, ParseCvResponse, SkillMatchResponse
from models.schemas.candidate import Candidate
from models.schemas.cv_review import CvReviewResult
from models.schemas.fused_result import FusedResult
from services import cv_review, llm_client, pdf_parser, screening
from services.cv_parser import parse_cv_strict
from services.ontology import SkillOntology
from services.role_models import RoleModelSelector

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health", response_model=HealthResponse)
async def health(ontology: SkillOntology = Depends(get_ontology)):
    return HealthResponse(
        status="ok",
        gemini_configured=llm_client.is_configured(),
        ontology_size=len(ontology),
    )


@router.post("/rie/parse-cv-strict", response_model=ParseCvResponse)
@limiter.limit("30/minute")
async def parse_cv(
    request: Request,
    body: ParseCvRequest,
    ontology: SkillOntology = Depends(get_ontology),
):
    parsed = parse_cv_strict(body.resume_text, ontology, body.candidate)
    return ParseCvResponse(parsed=parsed, degraded=not body.resume_text.strip())


@router.post("/rie/parse-cv-strict/upload", response_model=ParseCvResponse)
@limiter.limit("10/minute")
async def parse_cv_upload(
    request: Request,
    resume_file: UploadFile = File(...),
    candidate_name: str = Form(""),
    ontology: SkillOntology = Depends(get_ontology),
):
    # Validate file type
    if not resume_file.filename or not resume_file.filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Only PDF files are accepted")

    # Read and validate size
    content = await resume_file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )

    # Extract text from PDF
    try:
        resume_text = pdf_parser.extract_text(content)
    except Exception:
        logger.exception("PDF extraction failed for %s", resume_file.filename)
        raise HTTPException(status_code=400, detail="Could not parse PDF file")

    if not resume_text.strip():
        raise HTTPException(status_code=400, detail="No text could be extracted from PDF")

    parsed = parse_cv_strict(resume_text, ontology, Candidate(name=candidate_name))
    return ParseCvResponse(parsed=parsed)


@router.post("/rie/skill-match", response_model=SkillMatchResponse)
@limiter.limit("30/minute")
async def skill_match(
    request: Request,
    body: SkillMatchRequest,
    ontology: SkillOntology = Depends(get_ontology),
    selector: RoleModelSelector = Depends(get_role_selector),
):
    candidate = body.candidate
    if body.resume_text:
        candidate = candidate.model_copy(update={"resume_text": body.resume_text})
    parsed, bundle, audit = screening.run_skill_match(candidate, body.job, ontology, selector)
    return SkillMatchResponse(parsed=parsed, result=bundle, audit=audit)


@router.post("/ai/screen", response_model=FusedResult)
@limiter.limit("10/minute")
async def ai_screen(
    request: Request,
    body: ScreenRequest,
    ontology: SkillOntology = Depends(get_ontology),
    selector: RoleModelSelector = Depends(get_role_selector),
):
    return await screening.screen(body.candidate, body.job, ontology, selector)


@router.post("/ai/cv-review", response_model=CvReviewResult)
@limiter.limit("10/minute")
async def ai_cv_review(
    request: Request,
    body: CvReviewRequest,
    ontology: SkillOntology = Depends(get_ontology),
):
    resume_text = body.resume_text or body.candidate.resume_text
    if not resume_text.strip():
        raise HTTPException(status_code=400, detail="Resume text is required for a CV review")
    return await cv_review.review_cv(
        resume_text, body.candidate, ontology, job=body.job, weights=body.weights
    )
