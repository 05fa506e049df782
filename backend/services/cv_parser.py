"""Strict CV parsing: explicit fields only, nothing inferred.

Fields supplied by the caller take precedence over anything read from
the resume text.
"""

import re

from models.schemas.candidate import Candidate, ParsedCv
from services.ontology import SkillOntology
from services.text_signals import (
    SECTION_HEADINGS,
    extract_experience_years,
    extract_inline_list,
    extract_name,
    extract_role_lines,
    extract_section_block,
    strip_bullet,
)

_SKILL_KEYS = ["skills", "technical skills", "core skills"]
_EXPERIENCE_KEYS = SECTION_HEADINGS["experience"]
_EDUCATION_KEYS = ["education"]
_CERTIFICATION_KEYS = ["certifications", "certificates"]


def extract_explicit_skills(text: str, ontology: SkillOntology) -> list[str]:
    inline = extract_inline_list(text, _SKILL_KEYS)
    if inline:
        return ontology.normalize_list(inline)

    block = extract_section_block(text, _SKILL_KEYS)
    if not block:
        return []
    parts = [strip_bullet(p) for p in re.split(r"\r?\n|[;,|]", block)]
    return ontology.normalize_list(p for p in parts if p)


def extract_explicit_roles(text: str) -> list[str]:
    block = extract_section_block(text, _EXPERIENCE_KEYS)
    return extract_role_lines(block) if block else []


def extract_explicit_education(text: str) -> str:
    inline = extract_inline_list(text, _EDUCATION_KEYS)
    if inline:
        return " | ".join(inline)
    return extract_section_block(text, _EDUCATION_KEYS)


def extract_explicit_certifications(text: str) -> list[str]:
    inline = extract_inline_list(text, _CERTIFICATION_KEYS)
    if inline:
        return inline
    block = extract_section_block(text, _CERTIFICATION_KEYS)
    return [strip_bullet(line) for line in block.splitlines() if strip_bullet(line)]


def parse_cv_strict(
    resume_text: str,
    ontology: SkillOntology,
    candidate: Candidate | None = None,
) -> ParsedCv:
    candidate = candidate or Candidate()
    text = (resume_text or "").strip()

    skills = extract_explicit_skills(text, ontology)
    if not skills:
        skills = ontology.normalize_list(candidate.skills)

    if candidate.experience_years is not None:
        years = max(0.0, candidate.experience_years)
    else:
        years = extract_experience_years(text)

    if candidate.experience_history:
        roles = [e.title for e in candidate.experience_history if e.title]
    else:
        roles = extract_explicit_roles(text)

    return ParsedCv(
        name=candidate.name or extract_name(text),
        experience_years=years,
        skills=skills,
        work_experience_roles=roles,
        education=candidate.education or extract_explicit_education(text),
        certifications=extract_explicit_certifications(text) or list(candidate.certifications),
    )
