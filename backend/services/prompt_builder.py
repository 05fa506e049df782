"""All prompt templates for Gemini API calls.

User prompts are JSON documents of structured inputs only; the prompt hash
identifies the exact system+user pair sent, for audit.
"""

import hashlib
import json

from models.schemas.candidate import Candidate
from models.schemas.cv_review import CvQualityResult
from models.schemas.job import Job
from models.schemas.skill_match import DeterministicSignalBundle

SCREENING_SYSTEM_PROMPT = " ".join([
    "You are a senior hiring panel analyst producing evidence-bound hiring feedback.",
    "Use ONLY the provided structured inputs: matchedSkills, missingSkills, experienceSummary and jobTitle.",
    "Do NOT infer new skills, expand abbreviations into new competencies, assume certifications,"
    " or reinterpret the numeric scoring signals.",
    "Do NOT introduce bias related to gender, ethnicity, geography, education prestige or organization names.",
    "strengths must be drawn from matchedSkills and gaps from missingSkills.",
    "Return strict JSON only with schema:",
    '{"fitScore": integer 0-100, "modelConfidence": number 0-1,'
    ' "strengths": [{"label": string, "evidence": string}],'
    ' "gaps": [{"label": string, "evidence": string}],'
    ' "riskFlags": [string], "recommendation": string}.',
    "The recommendation must be 2-4 neutral sentences referencing only the provided evidence.",
    "If the data is insufficient, prefer omission over speculation.",
])

CV_REVIEW_SYSTEM_PROMPT = " ".join([
    "You are the AI interpretation layer of a recruiting CV review.",
    "You are not allowed to generate the final numeric score.",
    "Only use evidence from the provided resume text, candidate fields and deterministic diagnostics.",
    "Do not invent any claim, certification, language proficiency or achievement.",
    "Return strict JSON only with keys: executiveSummary, strengths, improvements,"
    " seniorityEstimate, hiringReadiness, modelConfidence.",
    "strengths and improvements must be arrays of objects {label, evidence}. Max 5 each.",
])


def _dumps(payload: dict) -> str:
    return json.dumps(payload, sort_keys=True, ensure_ascii=False)


def prompt_hash(system_prompt: str, user_prompt: str) -> str:
    """First 16 hex chars of SHA-256 over ``system + "\\n" + user``."""
    digest = hashlib.sha256(f"{system_prompt}\n{user_prompt}".encode("utf-8"))
    return digest.hexdigest()[:16]


def _experience_summary(bundle: DeterministicSignalBundle) -> str:
    years = f"{bundle.candidate_experience:g}"
    if bundle.experience_gap <= 0:
        return f"Experience meets minimum requirement ({years} years)."
    return f"Experience is below minimum requirement ({years} years)."


def build_screening_prompts(job: Job, bundle: DeterministicSignalBundle) -> tuple[str, str]:
    """Screening call: deterministic evidence in, AI opinion out."""
    user_prompt = _dumps({
        "jobTitle": job.title,
        "matchedSkills": bundle.matched_required + bundle.matched_preferred,
        "missingSkills": bundle.missing_required + bundle.missing_preferred,
        "experienceSummary": _experience_summary(bundle),
        "scoringContext": {
            "requiredCoverage": bundle.required_coverage,
            "preferredCoverage": bundle.preferred_coverage,
            "experienceMatch": bundle.experience_match,
            "deterministicFitScore": bundle.fit_score,
        },
    })
    return SCREENING_SYSTEM_PROMPT, user_prompt


def build_cv_review_prompts(
    resume_text: str,
    candidate: Candidate,
    quality: CvQualityResult,
    job: Job | None = None,
) -> tuple[str, str]:
    """CV review call: interpretation only, the score is already fixed."""
    user_prompt = _dumps({
        "parsedResumeText": resume_text,
        "candidate": candidate.model_dump(exclude={"resume_text"}),
        "optionalJobContext": job.model_dump() if job else None,
        "deterministic": {
            "overallScore": quality.overall_score,
            "breakdown": quality.breakdown.model_dump(),
            "diagnostics": quality.diagnostics,
            "riskFlags": quality.risk_flags,
        },
    })
    return CV_REVIEW_SYSTEM_PROMPT, user_prompt
