"""Shared test configuration, pytest markers and fixtures."""

import pytest

from models.schemas.candidate import Candidate, EmploymentEntry
from models.schemas.job import Job
from services import llm_client
from services.ontology import SkillOntology
from services.role_models import RoleModelSelector

SAMPLE_RESUME = """Name: Jane Doe
Email: jane.doe@example.com

Summary
Backend engineer with 6 years building Python services on AWS for fintech products.

Skills: Python, AWS, Docker, PostgreSQL

Experience
Role: Software Engineer
Built payment APIs serving 120 users per second and reduced latency by 30%.
Role: Senior Software Engineer
Led a team of 4 engineers and increased revenue by 12% through conversion work.

Education
B.S. Computer Science, State University

Certifications
- AWS Certified Developer
"""


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "property: seeded randomized sweeps over scorer inputs"
    )


@pytest.fixture
def ontology():
    """Small synthetic ontology, independent of the shipped skills table."""
    return SkillOntology({
        "python": ["python3", "py"],
        "aws": ["amazon web services"],
        "docker": ["containers"],
        "kubernetes": ["k8s"],
        "postgresql": ["postgres"],
        "go": ["golang"],
        "counseling": ["counselling"],
    })


@pytest.fixture
def selector():
    return RoleModelSelector()


@pytest.fixture
def candidate():
    return Candidate(
        name="Jane Doe",
        email="jane.doe@example.com",
        role="Software Engineer",
        summary="Backend engineer with 6 years building Python services on AWS for fintech products.",
        experience_years=6,
        skills=["Python", "AWS", "Docker"],
        experience_history=[
            EmploymentEntry(title="Software Engineer", company="Acme", tenure_months=30),
            EmploymentEntry(title="Senior Software Engineer", company="Globex", tenure_months=36),
        ],
        resume_text=SAMPLE_RESUME,
    )


@pytest.fixture
def job():
    return Job(
        id="job-1",
        title="Backend Engineer",
        department="Engineering",
        min_experience=4,
        required_skills=["python", "docker", "kubernetes"],
        preferred_skills=["aws"],
    )


@pytest.fixture
def resume_text():
    return SAMPLE_RESUME


@pytest.fixture
def stub_llm(monkeypatch):
    """Replace the Gemini call; set ``stub_llm.reply`` to the raw text returned."""

    class _Stub:
        reply: str | None = None
        calls: list[tuple[str, str]] = []

    stub = _Stub()
    stub.calls = []

    async def fake_generate(system_prompt, user_prompt):
        stub.calls.append((system_prompt, user_prompt))
        return stub.reply

    monkeypatch.setattr(llm_client, "generate", fake_generate)
    return stub
