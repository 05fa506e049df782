"""Role-model selection: which weight profile scores a given job."""

import re
from collections.abc import Mapping
from typing import NamedTuple

from models.schemas.job import Job, WeightProfile

DEFAULT_PROFILES: dict[str, WeightProfile] = {
    "counseling": WeightProfile(
        required_weight=0.5, preferred_weight=0.15, experience_weight=0.2, soft_skill_weight=0.15,
    ),
    "tech": WeightProfile(
        required_weight=0.6, preferred_weight=0.2, experience_weight=0.2, soft_skill_weight=0.0,
    ),
    "default": WeightProfile(
        required_weight=0.55, preferred_weight=0.2, experience_weight=0.2, soft_skill_weight=0.05,
    ),
}

# First match wins: counseling vocabulary is checked before tech.
_RULES: list[tuple[str, re.Pattern]] = [
    ("counseling", re.compile(r"counsel|therap|psycholog|wellness|mental")),
    ("tech", re.compile(r"engineer|developer|software|frontend|backend|devops|data")),
]


class RoleModel(NamedTuple):
    key: str
    weights: WeightProfile


class RoleModelSelector:
    """Keyword-driven choice between named weight profiles."""

    def __init__(self, profiles: Mapping[str, WeightProfile] | None = None) -> None:
        profiles = dict(DEFAULT_PROFILES if profiles is None else profiles)
        missing = {key for key, _ in _RULES} | {"default"}
        missing -= profiles.keys()
        if missing:
            raise ValueError(f"missing weight profiles: {', '.join(sorted(missing))}")
        self._profiles = profiles

    @property
    def profiles(self) -> dict[str, WeightProfile]:
        return dict(self._profiles)

    def select_weights(self, job: Job) -> RoleModel:
        context = f"{job.title} {job.department} {job.description}".lower()
        for key, pattern in _RULES:
            if pattern.search(context):
                return RoleModel(key, self._profiles[key])
        return RoleModel("default", self._profiles["default"])
