"""Deterministic skill-match scorer.

Normalizes candidate and job skills through the ontology, measures
required/preferred coverage and experience fit, and weights them with the
role model selected for the job. The resulting bundle is the trusted
evidence pool the fusion layer checks AI claims against.
"""

from datetime import datetime, timezone

from models.schemas.candidate import Candidate, ParsedCv
from models.schemas.job import Job
from models.schemas.skill_match import AuditRecord, DeterministicSignalBundle, EvidenceItem
from services.ontology import SkillOntology, skill_tokens
from services.role_models import RoleModelSelector
from services.scoring_utils import cap_unique, clamp, round3, round_score

SCORING_MODEL_VERSION = "RIE-SkillMatch-v1.1"

# Fixed confidence of the rule-based model itself
DETERMINISTIC_MODEL_CONFIDENCE = 0.65

# Neutral values when the job leaves a dimension unconstrained
NEUTRAL_COVERAGE = 0.5
NEUTRAL_EXPERIENCE_MATCH = 0.8

MAX_EVIDENCE_ITEMS = 4
MAX_RISK_FLAGS = 6
INCOMPLETE_PROFILE_THRESHOLD = 0.6

RISK_LOW_REQUIRED = "Low required-skill coverage"
RISK_EXPERIENCE = "Experience below requirement"
RISK_INCOMPLETE = "Incomplete candidate profile"


def match_tokens(skill: str) -> list[str]:
    """Tokens used to match a skill; short skills ("go", "c#") match whole."""
    tokens = skill_tokens(skill)
    if tokens:
        return tokens
    whole = skill.strip().lower()
    return [whole] if whole else []


def _label_key(item: EvidenceItem) -> str:
    return item.label.strip().lower()


def pick_hiring_recommendation(score: int) -> str:
    if score >= 75:
        return "Strong Match"
    if score >= 50:
        return "Moderate Match"
    return "Weak Match"


def _recommendation(fit_score: int) -> str:
    if fit_score >= 80:
        return "Strong fit. Fast-track to interview with scenario-based validation."
    if fit_score >= 60:
        return "Moderate fit. Continue with structured screening focused on missing skills."
    return "Partial fit. Consider alternate role mapping or targeted upskilling plan."


def _data_completeness(candidate: Candidate, candidate_skills: list[str], required: list[str]) -> float:
    """Fraction of the six expected profile fields that are populated."""
    populated = [
        bool(candidate.name.strip()),
        bool(candidate.email.strip()),
        bool(candidate.role.strip()),
        candidate.experience_years is not None,
        len(candidate_skills) > 0,
        len(required) > 0,
    ]
    return sum(populated) / len(populated)


def evaluate_skill_match(
    candidate: Candidate,
    job: Job,
    ontology: SkillOntology,
    selector: RoleModelSelector | None = None,
) -> DeterministicSignalBundle:
    """Score candidate/job fit from skills and experience alone."""
    selector = selector or RoleModelSelector()
    role_key, weights = selector.select_weights(job)

    candidate_skills = ontology.normalize_list(candidate.skills)
    required = ontology.normalize_list(job.required_skills)
    preferred = ontology.normalize_list(job.preferred_skills)

    candidate_tokens = set(skill_tokens(candidate.role))
    for skill in candidate_skills:
        candidate_tokens.update(match_tokens(skill))

    def _is_matched(skill: str) -> bool:
        return any(t in candidate_tokens for t in match_tokens(skill))

    matched_required = [s for s in required if _is_matched(s)]
    missing_required = [s for s in required if s not in matched_required]
    matched_preferred = [s for s in preferred if _is_matched(s)]
    missing_preferred = [s for s in preferred if s not in matched_preferred]

    required_coverage = len(matched_required) / len(required) if required else NEUTRAL_COVERAGE
    preferred_coverage = len(matched_preferred) / len(preferred) if preferred else NEUTRAL_COVERAGE

    min_experience = max(0.0, job.min_experience)
    years = max(0.0, candidate.experience_years) if candidate.experience_years is not None else 0.0
    if min_experience > 0:
        experience_match = clamp(years / min_experience, 0, 1)
    else:
        experience_match = NEUTRAL_EXPERIENCE_MATCH
    experience_gap = max(0.0, min_experience - years)

    soft_skill_term = 1.0 if matched_preferred else 0.6
    raw_fit = (
        required_coverage * weights.required_weight
        + preferred_coverage * weights.preferred_weight
        + experience_match * weights.experience_weight
        + soft_skill_term * weights.soft_skill_weight
    ) * 100
    fit_score = round_score(raw_fit)

    data_completeness = clamp(_data_completeness(candidate, candidate_skills, required), 0, 1)
    coverage_confidence = clamp(
        required_coverage * 0.7 + preferred_coverage * 0.2 + experience_match * 0.1, 0, 1
    )
    confidence = clamp(data_completeness * 0.35 + coverage_confidence * 0.65, 0, 1)

    extra_skills = [s for s in candidate_skills if s not in matched_required and s not in matched_preferred]
    strengths = cap_unique(
        [EvidenceItem(label=s, evidence="Mapped from candidate.skills (required)") for s in matched_required]
        + [EvidenceItem(label=s, evidence="Mapped from candidate.skills (preferred)") for s in matched_preferred]
        + [EvidenceItem(label=s, evidence="Listed in candidate profile") for s in extra_skills[:2]],
        MAX_EVIDENCE_ITEMS,
        key=_label_key,
    )

    gap_items = [EvidenceItem(label=s, evidence="Required but missing") for s in missing_required]
    gap_items += [EvidenceItem(label=s, evidence="Preferred but missing") for s in missing_preferred]
    if experience_gap > 0:
        gap_items.append(
            EvidenceItem(label="experience", evidence=f"Experience short by {experience_gap:g} year(s)")
        )
    gaps = cap_unique(gap_items, MAX_EVIDENCE_ITEMS, key=_label_key)

    risk_flags: list[str] = []
    if required_coverage < 0.5:
        risk_flags.append(RISK_LOW_REQUIRED)
    if experience_gap > 0:
        risk_flags.append(RISK_EXPERIENCE)
    if data_completeness < INCOMPLETE_PROFILE_THRESHOLD:
        risk_flags.append(RISK_INCOMPLETE)

    return DeterministicSignalBundle(
        role_model=role_key,
        scoring_weights=weights,
        candidate_skills=candidate_skills,
        required_skills=required,
        preferred_skills=preferred,
        matched_required=matched_required,
        missing_required=missing_required,
        matched_preferred=matched_preferred,
        missing_preferred=missing_preferred,
        required_coverage=round3(required_coverage),
        preferred_coverage=round3(preferred_coverage),
        experience_match=round3(experience_match),
        min_experience=min_experience,
        candidate_experience=years,
        experience_gap=round3(experience_gap),
        fit_score=fit_score,
        hiring_recommendation=pick_hiring_recommendation(fit_score),
        model_confidence=DETERMINISTIC_MODEL_CONFIDENCE,
        data_completeness=round3(data_completeness),
        coverage_confidence=round3(coverage_confidence),
        confidence=round3(confidence),
        strengths=strengths,
        gaps=gaps,
        risk_flags=cap_unique(risk_flags, MAX_RISK_FLAGS, key=str.lower),
        recommendation=_recommendation(fit_score),
        scoring_model_version=SCORING_MODEL_VERSION,
    )


def build_audit_record(
    resume_text: str,
    parsed: ParsedCv,
    job: Job,
    bundle: DeterministicSignalBundle,
    now: datetime | None = None,
) -> AuditRecord:
    """Flatten a skill-match result into a row for the review log."""
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    name = parsed.name or "unknown"
    return AuditRecord(
        id=f"{name}-{timestamp}",
        timestamp=timestamp,
        candidate_name=parsed.name,
        skills=", ".join(parsed.skills),
        experience_years=parsed.experience_years,
        selected_job=job.title,
        fit_score=bundle.fit_score,
        matched_required_skills=", ".join(bundle.matched_required),
        missing_required_skills=", ".join(bundle.missing_required),
        cv_text=resume_text,
        required_coverage=bundle.required_coverage,
        preferred_coverage=bundle.preferred_coverage,
        experience_match=bundle.experience_match,
        confidence_score=bundle.confidence,
        scoring_model_version=bundle.scoring_model_version,
    )
