"""Deterministic CV-quality scorer.

Five independent 0-20 sub-scores combined into a 0-100 overall score:

    structure         summary, skills list, quantified hits, length
    skill_density     unique canonical skills, domain consistency, repeats
    experience_depth  years, seniority progression, tenure, role coherence
    achievements      quantified results, impact verbs, business outcomes
    clarity           sentence length, buzzwords, overly long sentences
"""

import re
from typing import Any

from models.schemas.candidate import Candidate, EmploymentEntry
from models.schemas.cv_review import CvBreakdown, CvConfidence, CvQualityResult, CvWeights
from models.schemas.job import Job
from services.ontology import SkillOntology
from services.scoring_utils import clamp, round3, round_score
from services.text_signals import (
    BUSINESS_OUTCOME_TERMS,
    BUZZWORDS,
    IMPACT_VERBS,
    count_quantified,
    count_terms,
    count_words,
    split_sentences,
    tokenize,
)

SUBSCORE_MAX = 20

# Dimension -> (threshold, flag); a sub-score below threshold raises the flag
RISK_THRESHOLDS: dict[str, tuple[int, str]] = {
    "structure": (10, "Weak CV structure"),
    "achievements": (8, "Low quantified achievement evidence"),
    "skill_density": (8, "Low skill density or domain alignment"),
    "experience_depth": (8, "Shallow or incoherent experience depth"),
    "clarity": (8, "Clarity/professionalism concerns"),
}

_SENIORITY_RANKS: list[tuple[re.Pattern, int]] = [
    (re.compile(r"\b(?:principal|staff|director|head|vp|chief)\b"), 5),
    (re.compile(r"\b(?:lead|senior|sr)\b"), 4),
    (re.compile(r"\b(?:mid|intermediate|engineer ii|analyst ii)\b"), 3),
    (re.compile(r"\b(?:junior|jr|associate|intern|trainee)\b"), 1),
]


def seniority_rank(title: str) -> int:
    t = (title or "").lower()
    for pattern, rank in _SENIORITY_RANKS:
        if pattern.search(t):
            return rank
    return 2


def _subscore(value: float) -> int:
    return round_score(value, 0, SUBSCORE_MAX)


def evaluate_structure(text: str, candidate: Candidate) -> tuple[int, dict[str, Any]]:
    words = count_words(text)
    measurable_hits = count_quantified(text)
    has_summary = len(candidate.summary.strip()) >= 40
    has_skills = any(s.strip() for s in candidate.skills)
    optimal_length = 250 <= words <= 900

    if optimal_length:
        length_points = 6
    elif words < 120:
        length_points = 1
    else:
        length_points = 3

    score = (
        (4 if has_summary else 0)
        + (4 if has_skills else 0)
        + clamp(measurable_hits * 1.5, 0, 6)
        + length_points
    )
    return _subscore(score), {
        "has_summary": has_summary,
        "has_skills_section": has_skills,
        "measurable_hits": measurable_hits,
        "has_measurable_achievements": measurable_hits >= 2,
        "words": words,
        "optimal_length": optimal_length,
    }


def evaluate_skill_density(
    candidate: Candidate, ontology: SkillOntology, job: Job | None
) -> tuple[int, dict[str, Any]]:
    role = candidate.role or (job.title if job else "")
    role_tokens = set(tokenize(role))
    raw_skills = [s for s in candidate.skills if s.strip()]
    skills = ontology.normalize_list(raw_skills, limit=len(raw_skills))
    unique_count = len(skills)
    repeated = max(0, len(raw_skills) - unique_count)

    domain_hits = sum(1 for s in skills if any(t in role_tokens for t in tokenize(s)))
    domain_consistency = domain_hits / unique_count if unique_count else 0.0

    score = (
        clamp(unique_count * 0.9, 0, 10)
        + clamp(domain_consistency * 6, 0, 6)
        + clamp(4 - repeated, 0, 4)
    )
    return _subscore(score), {
        "unique_count": unique_count,
        "repeated_penalty": repeated,
        "domain_consistency": round3(domain_consistency),
        "canonical_skills": skills,
    }


def _progression(history: list[EmploymentEntry], years: float) -> float:
    if len(history) < 2:
        return 0.7 if years > 3 else 0.5
    steps_up = sum(
        1 for prev, cur in zip(history, history[1:])
        if seniority_rank(cur.title) >= seniority_rank(prev.title)
    )
    return steps_up / (len(history) - 1)


def evaluate_experience_depth(candidate: Candidate) -> tuple[int, dict[str, Any]]:
    history = candidate.experience_history
    years = max(0.0, candidate.experience_years) if candidate.experience_years is not None else 0.0

    years_score = clamp(years * 1.2, 0, 8)

    progression = _progression(history, years)
    progression_score = clamp(progression * 4, 0, 4)

    if history:
        avg_tenure = sum(max(0.0, h.tenure_months) for h in history) / len(history)
    else:
        avg_tenure = years * 12
    stability_score = clamp(avg_tenure / 12, 0, 4)

    role_tokens = set(tokenize(candidate.role))
    if history:
        coherent = sum(1 for h in history if any(t in role_tokens for t in tokenize(h.title)))
        coherence = coherent / len(history)
    else:
        coherence = 0.6 if candidate.role.strip() else 0.4
    coherence_score = clamp(coherence * 4, 0, 4)

    score = years_score + progression_score + stability_score + coherence_score
    return _subscore(score), {
        "years": years,
        "progression": round3(progression),
        "avg_tenure_months": round3(avg_tenure),
        "coherence": round3(coherence),
    }


def evaluate_achievements(text: str) -> tuple[int, dict[str, Any]]:
    quantified = count_quantified(text)
    impact_verb_hits = count_terms(text, IMPACT_VERBS)
    business_outcome_hits = count_terms(text, BUSINESS_OUTCOME_TERMS)

    score = (
        clamp(quantified * 1.0, 0, 8)
        + clamp(impact_verb_hits * 0.8, 0, 6)
        + clamp(business_outcome_hits * 1.0, 0, 6)
    )
    return _subscore(score), {
        "quantified": quantified,
        "impact_verb_hits": impact_verb_hits,
        "business_outcome_hits": business_outcome_hits,
    }


def evaluate_clarity(text: str) -> tuple[int, dict[str, Any]]:
    sentences = split_sentences(text)
    words = count_words(text)
    avg_sentence_len = words / len(sentences) if sentences else float(words)

    buzzword_hits = count_terms(text, BUZZWORDS)
    if sentences:
        long_ratio = sum(1 for s in sentences if count_words(s) > 30) / len(sentences)
    else:
        long_ratio = 0.0

    # Readability peaks at 18 words per sentence
    readability = clamp(10 - abs(18 - avg_sentence_len) * 0.5, 0, 10)
    professionalism = clamp(10 - buzzword_hits * 1.2 - long_ratio * 5, 0, 10)

    return _subscore(readability + professionalism), {
        "avg_sentence_len": round3(avg_sentence_len),
        "buzzword_hits": buzzword_hits,
        "long_sentence_ratio": round3(long_ratio),
    }


def score_cv(
    resume_text: str,
    candidate: Candidate,
    ontology: SkillOntology,
    weights: CvWeights | None = None,
    job: Job | None = None,
) -> CvQualityResult:
    """Score CV quality from resume text and the candidate record."""
    weights = weights or CvWeights()
    text = resume_text or ""

    structure, structure_diag = evaluate_structure(text, candidate)
    skill_density, density_diag = evaluate_skill_density(candidate, ontology, job)
    experience_depth, depth_diag = evaluate_experience_depth(candidate)
    achievements, achievements_diag = evaluate_achievements(text)
    clarity, clarity_diag = evaluate_clarity(text)

    breakdown = CvBreakdown(
        structure=structure,
        skill_density=skill_density,
        experience_depth=experience_depth,
        achievements=achievements,
        clarity=clarity,
    )
    scores = breakdown.model_dump()
    weight_map = weights.model_dump()
    overall = sum(scores[k] / SUBSCORE_MAX * weight_map[k] for k in scores) * 100

    populated = [
        bool(text.strip()),
        bool(candidate.name.strip()),
        bool(candidate.role.strip()),
        any(s.strip() for s in candidate.skills),
        bool(candidate.experience_history),
    ]
    data_completeness = sum(populated) / len(populated)
    structural_confidence = clamp(
        structure / SUBSCORE_MAX * 0.5 + clarity / SUBSCORE_MAX * 0.5, 0, 1
    )

    risk_flags = [
        flag for dim, (threshold, flag) in RISK_THRESHOLDS.items()
        if scores[dim] < threshold
    ]

    return CvQualityResult(
        overall_score=round_score(overall),
        breakdown=breakdown,
        risk_flags=risk_flags,
        confidence=CvConfidence(
            data_completeness=round3(data_completeness),
            structural_confidence=round3(structural_confidence),
        ),
        diagnostics={
            "structure": structure_diag,
            "skill_density": density_diag,
            "experience_depth": depth_diag,
            "achievements": achievements_diag,
            "clarity": clarity_diag,
        },
    )
