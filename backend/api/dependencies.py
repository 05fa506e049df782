"""Shared dependencies for API routes.

The ontology and role-model tables are read-only and built once per
process; tests swap them through ``app.dependency_overrides``.
"""

from functools import lru_cache

from config import settings
from services.ontology import SkillOntology
from services.role_models import RoleModelSelector


@lru_cache(maxsize=1)
def get_ontology() -> SkillOntology:
    return SkillOntology.from_json(settings.ontology_path, settings.max_normalized_skills)


@lru_cache(maxsize=1)
def get_role_selector() -> RoleModelSelector:
    return RoleModelSelector()
