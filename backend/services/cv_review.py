"""Orchestrator: hybrid CV review.

The deterministic CV-quality score is final. The AI layer may only add a
qualitative interpretation (summary, strengths, improvements, seniority,
readiness), and only with claims that can be traced back to the resume,
the candidate record or the job context. Without a usable AI reply the
review is filled from the deterministic sub-scores.
"""

import logging
from collections.abc import Mapping
from typing import Any

from models.schemas.candidate import Candidate
from models.schemas.cv_review import (
    CvInsights,
    CvQualityResult,
    CvReviewAudit,
    CvReviewConfidence,
    CvReviewResult,
    CvWeights,
)
from models.schemas.job import Job
from models.schemas.skill_match import EvidenceItem
from services import llm_client, prompt_builder
from services.cv_quality import SUBSCORE_MAX, score_cv
from services.ontology import SkillOntology, skill_tokens
from services.scoring_utils import cap_unique, clamp, round3

logger = logging.getLogger(__name__)

MODEL_VERSION = "RIE-CV-v2.0"

MAX_INSIGHT_ITEMS = 5
DEFAULT_AI_CONFIDENCE = 0.55
FALLBACK_AI_CONFIDENCE = 0.4

W_DATA_COMPLETENESS = 0.35
W_STRUCTURAL = 0.35
W_AI = 0.30

FALLBACK_SUMMARY = (
    "Deterministic CV review generated due to unavailable or low-confidence AI interpretation."
)
GENERIC_STRENGTH = EvidenceItem(
    label="Relevant skills present",
    evidence="Detected from candidate skills and resume context",
)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _insight_items(raw_items: Any) -> list[EvidenceItem]:
    if not isinstance(raw_items, list):
        return []
    items = []
    for raw in raw_items:
        if isinstance(raw, Mapping):
            label, evidence = _text(raw.get("label")), _text(raw.get("evidence"))
        elif isinstance(raw, str):
            label, evidence = raw.strip(), ""
        else:
            continue
        if label:
            items.append(EvidenceItem(label=label, evidence=evidence))
    return cap_unique(items, MAX_INSIGHT_ITEMS, key=lambda i: i.label.lower())


def _confidence(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return DEFAULT_AI_CONFIDENCE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_AI_CONFIDENCE
    if number != number:  # NaN
        return DEFAULT_AI_CONFIDENCE
    return round3(clamp(number, 0, 1))


def sanitize_insights(raw: Any) -> CvInsights | None:
    """Coerce an untrusted payload into insights; no executive summary -> None."""
    if not isinstance(raw, Mapping):
        return None
    summary = _text(raw.get("executiveSummary"))
    if not summary:
        return None
    return CvInsights(
        executive_summary=summary,
        strengths=_insight_items(raw.get("strengths")),
        improvements=_insight_items(raw.get("improvements")),
        seniority_estimate=_text(raw.get("seniorityEstimate")) or "Mid",
        hiring_readiness=_text(raw.get("hiringReadiness")) or "Needs Review",
        model_confidence=_confidence(raw.get("modelConfidence")),
    )


def review_evidence_pool(resume_text: str, candidate: Candidate, job: Job | None) -> set[str]:
    pool = set(skill_tokens(resume_text))
    pool.update(skill_tokens(candidate.role))
    for skill in candidate.skills:
        pool.update(skill_tokens(skill))
    if job is not None:
        for skill in [*job.required_skills, *job.preferred_skills]:
            pool.update(skill_tokens(skill))
    return pool


def guard_insights(
    insights: CvInsights | None,
    pool: set[str],
    quality: CvQualityResult,
) -> CvInsights | None:
    """Drop untraceable claims; nothing traceable at all discards the insights."""
    if insights is None:
        return None

    def backed(item: EvidenceItem) -> bool:
        return any(t in pool for t in skill_tokens(f"{item.label} {item.evidence}"))

    strengths = [s for s in insights.strengths if backed(s)]
    improvements = [i for i in insights.improvements if backed(i)]
    if not strengths and not improvements:
        return None

    if not strengths:
        strengths = [GENERIC_STRENGTH]
    if not improvements:
        improvements = [
            EvidenceItem(label=flag, evidence="Deterministic risk signal")
            for flag in quality.risk_flags[:3]
        ]
    return insights.model_copy(update={"strengths": strengths, "improvements": improvements})


def fallback_insights(quality: CvQualityResult) -> CvInsights:
    scores = quality.breakdown.model_dump()
    # sorted() is stable, so ties keep dimension order
    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    lowest = sorted(scores.items(), key=lambda kv: kv[1])

    def item(name: str, value: int) -> EvidenceItem:
        return EvidenceItem(label=name, evidence=f"Deterministic sub-score {value}/{SUBSCORE_MAX}")

    depth = quality.breakdown.experience_depth
    if depth >= 14:
        seniority = "Senior"
    elif depth >= 9:
        seniority = "Mid"
    else:
        seniority = "Junior"

    if quality.overall_score >= 75:
        readiness = "Interview Ready"
    elif quality.overall_score >= 55:
        readiness = "Screening Recommended"
    else:
        readiness = "Needs Development"

    return CvInsights(
        executive_summary=FALLBACK_SUMMARY,
        strengths=[item(k, v) for k, v in ranked[:2]],
        improvements=[item(k, v) for k, v in lowest[:2]],
        seniority_estimate=seniority,
        hiring_readiness=readiness,
        model_confidence=FALLBACK_AI_CONFIDENCE,
    )


def merge_review(
    quality: CvQualityResult,
    insights: CvInsights,
    audit: CvReviewAudit,
) -> CvReviewResult:
    ai_confidence = round3(clamp(insights.model_confidence, 0, 1))
    final_confidence = round3(clamp(
        quality.confidence.data_completeness * W_DATA_COMPLETENESS
        + quality.confidence.structural_confidence * W_STRUCTURAL
        + ai_confidence * W_AI,
        0,
        1,
    ))
    return CvReviewResult(
        model_version=MODEL_VERSION,
        overall_score=quality.overall_score,
        breakdown=quality.breakdown,
        ai_insights=insights,
        risk_flags=list(quality.risk_flags),
        confidence=CvReviewConfidence(
            data_completeness=quality.confidence.data_completeness,
            structural_confidence=quality.confidence.structural_confidence,
            ai_confidence=ai_confidence,
            final_confidence=final_confidence,
        ),
        audit=audit,
    )


async def review_cv(
    resume_text: str,
    candidate: Candidate,
    ontology: SkillOntology,
    job: Job | None = None,
    weights: CvWeights | None = None,
) -> CvReviewResult:
    """Deterministic CV score plus an evidence-guarded AI interpretation."""
    weights = weights or CvWeights()
    text = resume_text or candidate.resume_text
    quality = score_cv(text, candidate, ontology, weights=weights, job=job)

    system_prompt, user_prompt = prompt_builder.build_cv_review_prompts(text, candidate, quality, job)
    raw_text = await llm_client.generate(system_prompt, user_prompt)

    insights = guard_insights(
        sanitize_insights(llm_client.parse_json(raw_text)),
        review_evidence_pool(text, candidate, job),
        quality,
    )
    ai_used = insights is not None
    if not ai_used:
        if raw_text:
            logger.info("AI CV insights discarded, falling back to deterministic review")
        insights = fallback_insights(quality)

    audit = CvReviewAudit(
        scoring_version=MODEL_VERSION,
        scoring_weights=weights,
        prompt_hash=prompt_builder.prompt_hash(system_prompt, user_prompt),
        deterministic_diagnostics=quality.diagnostics,
        ai_raw_response=raw_text or "",
        ai_used=ai_used,
    )
    return merge_review(quality, insights, audit)
