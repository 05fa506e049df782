"""AI fusion layer: blend an untrusted AI opinion with deterministic signals.

The raw language-model payload is decoded once at the boundary into an
``OpinionDecode`` (opinion / absent / malformed). Only a validated
``AIOpinion`` ever reaches ``fuse``; everything else takes the
deterministic-only path.

AI strengths and gaps survive only when evidence-backed: at least one of
their tokens must appear in the deterministic evidence pool (strength and
gap labels plus matched/missing skill lists).
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from models.schemas.ai_opinion import AIOpinion, OpinionDecode, RawOpinionScores
from models.schemas.fused_result import ConfidenceBreakdown, Coverage, FusedResult, FusionWeights
from models.schemas.skill_match import DeterministicSignalBundle, EvidenceItem
from services.ontology import skill_tokens
from services.scoring_utils import cap_unique, clamp, round3, round_score

logger = logging.getLogger(__name__)

MODEL_VERSION = "RIE-v2.1"

# Fixed blend constants
AI_WEIGHT = 0.7
DETERMINISTIC_WEIGHT = 0.3
FINAL_MODEL_WEIGHT = 0.45
FINAL_COMPLETENESS_WEIGHT = 0.25
FINAL_COVERAGE_WEIGHT = 0.30

MAX_CLAIMS = 4
MAX_RISK_FLAGS = 6
MIN_BACKED_CLAIMS = 2
GENERIC_EVIDENCE = "AI inferred from provided data"
GAP_EVIDENCE = "Missing or weak evidence"
# Filled in for bare-string claims; never counts as evidence
PLACEHOLDER_EVIDENCE = frozenset({GENERIC_EVIDENCE.lower(), GAP_EVIDENCE.lower()})


# ---------------------------------------------------------------------------
# Boundary decode
# ---------------------------------------------------------------------------

def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _label_key(item: EvidenceItem) -> str:
    return item.label.lower()


def _evidence_items(raw_items: Any, placeholder: str = GENERIC_EVIDENCE) -> list[EvidenceItem]:
    """Normalize claims into ``{label, evidence}``; bare strings get ``placeholder`` evidence."""
    if not isinstance(raw_items, list):
        return []
    items: list[EvidenceItem] = []
    for raw in raw_items:
        if isinstance(raw, str):
            label, evidence = raw.strip(), placeholder
        elif isinstance(raw, Mapping):
            label = _text(raw.get("label"))
            evidence = _text(raw.get("evidence")) or _text(raw.get("reason")) or placeholder
        else:
            continue
        if label:
            items.append(EvidenceItem(label=label, evidence=evidence))
    return cap_unique(items, MAX_CLAIMS, key=_label_key)


def decode_opinion(raw: Any) -> OpinionDecode:
    """Validate an untrusted AI payload.

    Absent when ``raw`` is None; malformed when it is not an object or its
    score/confidence are missing, non-numeric or out of range.
    """
    if raw is None:
        return OpinionDecode(status="absent", reason="no AI payload")
    if not isinstance(raw, Mapping):
        return OpinionDecode(status="malformed", reason="payload is not an object")

    numeric = {
        k: raw[k] for k in ("fitScore", "fit_score", "modelConfidence", "model_confidence", "confidence")
        if k in raw
    }
    if any(isinstance(v, bool) for v in numeric.values()):
        return OpinionDecode(status="malformed", reason="boolean where a number was expected")
    try:
        scores = RawOpinionScores.model_validate(numeric)
    except ValidationError as e:
        return OpinionDecode(status="malformed", reason=f"invalid score fields: {e.error_count()} error(s)")

    raw_flags = raw.get("riskFlags", raw.get("risk_flags"))
    flags = [_text(f) for f in raw_flags] if isinstance(raw_flags, list) else []
    recommendation = raw.get("recommendation")

    opinion = AIOpinion(
        fit_score=round_score(scores.fit_score),
        model_confidence=round3(scores.confidence),
        strengths=_evidence_items(raw.get("strengths")),
        gaps=_evidence_items(raw.get("gaps"), GAP_EVIDENCE),
        risk_flags=cap_unique(flags, MAX_RISK_FLAGS, key=str.lower),
        recommendation=recommendation.strip() if isinstance(recommendation, str) else "",
    )
    return OpinionDecode(status="opinion", opinion=opinion)


# ---------------------------------------------------------------------------
# Evidence grounding
# ---------------------------------------------------------------------------

def evidence_pool(bundle: DeterministicSignalBundle) -> set[str]:
    texts: list[str] = [s.label for s in bundle.strengths]
    texts += [g.label for g in bundle.gaps]
    texts += bundle.matched_required + bundle.missing_required
    texts += bundle.matched_preferred + bundle.missing_preferred
    pool: set[str] = set()
    for text in texts:
        pool.update(skill_tokens(text))
    return pool


def is_evidence_backed(item: EvidenceItem, pool: set[str]) -> bool:
    """True when a token the AI supplied (label or its own evidence) is in the pool."""
    text = item.label
    if item.evidence.strip().lower() not in PLACEHOLDER_EVIDENCE:
        text = f"{text} {item.evidence}"
    return any(t in pool for t in skill_tokens(text))


def filter_claims(
    claims: Iterable[EvidenceItem],
    pool: set[str],
    fallback: list[EvidenceItem],
) -> list[EvidenceItem]:
    """Keep evidence-backed claims; fewer than two survivors -> ``fallback`` wholesale."""
    backed = cap_unique(
        (c for c in claims if is_evidence_backed(c, pool)), MAX_CLAIMS, key=_label_key
    )
    if len(backed) < MIN_BACKED_CLAIMS:
        return list(fallback)
    return backed


# ---------------------------------------------------------------------------
# Fusion
# ---------------------------------------------------------------------------

def _timestamp(now: datetime | None) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def _deterministic_only(
    bundle: DeterministicSignalBundle,
    prompt_hash: str,
    ai_raw_response: str,
    now: datetime | None,
) -> FusedResult:
    return FusedResult(
        model_version=MODEL_VERSION,
        fit_score=bundle.fit_score,
        confidence=ConfidenceBreakdown(
            model_confidence=bundle.model_confidence,
            data_completeness=bundle.data_completeness,
            coverage_confidence=bundle.coverage_confidence,
            final_confidence=bundle.confidence,
        ),
        coverage=Coverage(
            required_coverage=bundle.required_coverage,
            preferred_coverage=bundle.preferred_coverage,
            experience_match=bundle.experience_match,
        ),
        strengths=list(bundle.strengths),
        gaps=list(bundle.gaps),
        risk_flags=list(bundle.risk_flags),
        recommendation=bundle.recommendation,
        explainability=FusionWeights(deterministic_weight=1.0, ai_weight=0.0),
        scoring_weights=bundle.scoring_weights,
        role_model=bundle.role_model,
        prompt_hash=prompt_hash,
        timestamp=_timestamp(now),
        deterministic_signals=bundle,
        ai_raw_response=ai_raw_response,
    )


def fuse(
    bundle: DeterministicSignalBundle,
    opinion: AIOpinion | None,
    prompt_hash: str = "",
    ai_raw_response: str = "",
    now: datetime | None = None,
) -> FusedResult:
    """Combine deterministic signals with a validated AI opinion (or none)."""
    if opinion is None:
        return _deterministic_only(bundle, prompt_hash, ai_raw_response, now)

    fit_score = round_score(
        opinion.fit_score * AI_WEIGHT + bundle.fit_score * DETERMINISTIC_WEIGHT
    )
    model_confidence = round3(clamp(
        opinion.model_confidence * AI_WEIGHT + bundle.model_confidence * DETERMINISTIC_WEIGHT, 0, 1
    ))
    final_confidence = round3(clamp(
        model_confidence * FINAL_MODEL_WEIGHT
        + bundle.data_completeness * FINAL_COMPLETENESS_WEIGHT
        + bundle.coverage_confidence * FINAL_COVERAGE_WEIGHT,
        0,
        1,
    ))

    pool = evidence_pool(bundle)
    strengths = filter_claims(opinion.strengths, pool, bundle.strengths)
    gaps = filter_claims(opinion.gaps, pool, bundle.gaps)
    dropped = (len(opinion.strengths) + len(opinion.gaps)) - sum(
        1 for c in [*opinion.strengths, *opinion.gaps] if is_evidence_backed(c, pool)
    )
    if dropped:
        logger.info("Dropped %d AI claim(s) without deterministic evidence", dropped)

    return FusedResult(
        model_version=MODEL_VERSION,
        fit_score=fit_score,
        confidence=ConfidenceBreakdown(
            model_confidence=model_confidence,
            data_completeness=bundle.data_completeness,
            coverage_confidence=bundle.coverage_confidence,
            final_confidence=final_confidence,
        ),
        coverage=Coverage(
            required_coverage=bundle.required_coverage,
            preferred_coverage=bundle.preferred_coverage,
            experience_match=bundle.experience_match,
        ),
        strengths=strengths,
        gaps=gaps,
        risk_flags=cap_unique(
            [*bundle.risk_flags, *opinion.risk_flags], MAX_RISK_FLAGS, key=str.lower
        ),
        recommendation=opinion.recommendation or bundle.recommendation,
        explainability=FusionWeights(
            deterministic_weight=DETERMINISTIC_WEIGHT, ai_weight=AI_WEIGHT
        ),
        scoring_weights=bundle.scoring_weights,
        role_model=bundle.role_model,
        prompt_hash=prompt_hash,
        timestamp=_timestamp(now),
        deterministic_signals=bundle,
        ai_raw_response=ai_raw_response,
    )
