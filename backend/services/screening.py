"""Orchestrator: hybrid candidate screening.

Pipeline:
1. Strict CV parse (explicit fields only), merged over the candidate record
2. Deterministic skill match against the job's role model
3. Evidence-bound screening prompt (at most one Gemini call, no retry)
4. Boundary decode of the AI payload
5. Fusion into the final result
"""

import logging

from models.schemas.candidate import Candidate, ParsedCv
from models.schemas.fused_result import FusedResult
from models.schemas.job import Job
from models.schemas.skill_match import AuditRecord, DeterministicSignalBundle
from services import llm_client, prompt_builder
from services.cv_parser import parse_cv_strict
from services.fusion import decode_opinion, fuse
from services.ontology import SkillOntology
from services.role_models import RoleModelSelector
from services.skill_match import build_audit_record, evaluate_skill_match

logger = logging.getLogger(__name__)


def prepare_candidate(candidate: Candidate, ontology: SkillOntology) -> tuple[ParsedCv, Candidate]:
    """Parse the candidate's resume text strictly and merge it over the record."""
    parsed = parse_cv_strict(candidate.resume_text, ontology, candidate)
    return parsed, parsed.to_candidate(candidate)


def run_skill_match(
    candidate: Candidate,
    job: Job,
    ontology: SkillOntology,
    selector: RoleModelSelector | None = None,
) -> tuple[ParsedCv, DeterministicSignalBundle, AuditRecord]:
    parsed, merged = prepare_candidate(candidate, ontology)
    bundle = evaluate_skill_match(merged, job, ontology, selector)
    audit = build_audit_record(candidate.resume_text, parsed, job, bundle)
    logger.info(
        "Skill match for %r against %r: fit=%d role_model=%s",
        parsed.name or "unknown", job.title, bundle.fit_score, bundle.role_model,
    )
    return parsed, bundle, audit


async def screen(
    candidate: Candidate,
    job: Job,
    ontology: SkillOntology,
    selector: RoleModelSelector | None = None,
) -> FusedResult:
    """Score a candidate against a job, blending in an AI opinion when available."""
    _, bundle, _ = run_skill_match(candidate, job, ontology, selector)

    system_prompt, user_prompt = prompt_builder.build_screening_prompts(job, bundle)
    digest = prompt_builder.prompt_hash(system_prompt, user_prompt)

    raw_text = await llm_client.generate(system_prompt, user_prompt)
    decoded = decode_opinion(llm_client.parse_json(raw_text))
    if decoded.status == "malformed":
        logger.warning("Discarding malformed AI opinion: %s", decoded.reason)
    elif decoded.status == "absent":
        logger.info("No AI opinion available, using deterministic result")
    else:
        logger.info("Fusing AI opinion (prompt %s) with deterministic signals", digest)

    return fuse(bundle, decoded.opinion, prompt_hash=digest, ai_raw_response=raw_text or "")
