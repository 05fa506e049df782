"""Skill ontology: canonical skill names and their synonyms.

The synonym table is built once (usually from ``settings.ontology_path``)
and passed to the scorers, so tests can use synthetic ontologies.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from services.scoring_utils import cap_unique
from services.text_signals import tokenize

logger = logging.getLogger(__name__)

DEFAULT_MAX_SKILLS = 50

# Dropped before ontology lookup and evidence matching
STOPWORDS: frozenset[str] = frozenset({
    "and", "or", "the", "a", "an", "to", "of", "for", "with", "in", "on", "at",
    "by", "from", "as", "is", "are", "this", "that", "be", "will", "we", "you",
    "our", "your", "candidate", "job",
})


def skill_tokens(text: str | None) -> list[str]:
    """Tokens longer than two characters that are not stop-words."""
    return [t for t in tokenize(text) if len(t) > 2 and t not in STOPWORDS]


class SkillOntology:
    """Read-only case-insensitive synonym -> canonical skill lookup."""

    def __init__(
        self,
        synonyms: Mapping[str, Iterable[str]],
        max_skills: int = DEFAULT_MAX_SKILLS,
    ) -> None:
        index: dict[str, str] = {}
        for canonical, variants in synonyms.items():
            canonical = str(canonical).strip()
            if not canonical:
                continue
            if isinstance(variants, str):
                variants = [variants]
            for variant in [canonical, *(variants or [])]:
                key = str(variant).strip().lower()
                if not key:
                    continue
                existing = index.get(key)
                if existing is not None and existing != canonical:
                    raise ValueError(
                        f"synonym {key!r} maps to both {existing!r} and {canonical!r}"
                    )
                index[key] = canonical
        self._index = index
        self._canonical = frozenset(index.values())
        self.max_skills = max_skills

    @classmethod
    def from_json(cls, path: str | Path, max_skills: int = DEFAULT_MAX_SKILLS) -> "SkillOntology":
        """Load a ``{canonical: [synonym, ...]}`` JSON file."""
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"ontology file {path} must contain a JSON object")
        ontology = cls(data, max_skills=max_skills)
        logger.info(
            "Loaded skill ontology from %s (%d canonical skills, %d synonyms)",
            path, len(ontology._canonical), len(ontology._index),
        )
        return ontology

    def __len__(self) -> int:
        return len(self._canonical)

    def __contains__(self, skill: object) -> bool:
        return isinstance(skill, str) and skill.strip().lower() in self._index

    def normalize(self, raw_skill: str | None) -> str:
        """Map a raw skill string to its canonical name.

        Exact synonym match wins, then the first mapped token, then the
        lower-cased trimmed input. Empty input gives ''.
        """
        raw = "" if raw_skill is None else str(raw_skill).strip().lower()
        if not raw:
            return ""
        exact = self._index.get(raw)
        if exact is not None:
            return exact
        for token in skill_tokens(raw):
            mapped = self._index.get(token)
            if mapped is not None:
                return mapped
        return raw

    def normalize_list(self, skills: Iterable[str] | None, limit: int | None = None) -> list[str]:
        """Normalize, drop empties, dedupe case-insensitively, cap at ``limit``."""
        size = self.max_skills if limit is None else limit
        normalized = (self.normalize(s) for s in (skills or []))
        return cap_unique(normalized, size, key=lambda s: s.lower())
