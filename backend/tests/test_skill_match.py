import random
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from models.schemas.candidate import Candidate, EmploymentEntry, ParsedCv
from models.schemas.job import Job
from services.skill_match import (
    RISK_EXPERIENCE,
    RISK_INCOMPLETE,
    RISK_LOW_REQUIRED,
    SCORING_MODEL_VERSION,
    build_audit_record,
    evaluate_skill_match,
    match_tokens,
    pick_hiring_recommendation,
)


@pytest.fixture
def scenario_candidate():
    return Candidate(name="Sam", skills=["Python", "AWS"], experience_years=3)


@pytest.fixture
def scenario_job():
    return Job(
        title="Operations Analyst",
        min_experience=2,
        required_skills=["python", "docker"],
        preferred_skills=["aws"],
    )


class TestScenario:
    def test_coverage_and_matches(self, scenario_candidate, scenario_job, ontology):
        bundle = evaluate_skill_match(scenario_candidate, scenario_job, ontology)
        assert bundle.matched_required == ["python"]
        assert bundle.missing_required == ["docker"]
        assert bundle.required_coverage == 0.5
        assert bundle.matched_preferred == ["aws"]
        assert bundle.preferred_coverage == 1.0
        assert bundle.experience_match == 1.0

    def test_fit_score_from_default_profile(self, scenario_candidate, scenario_job, ontology):
        bundle = evaluate_skill_match(scenario_candidate, scenario_job, ontology)
        assert bundle.role_model == "default"
        # 100 * (0.5*0.55 + 1.0*0.2 + 1.0*0.2 + 1.0*0.05) = 72.5, rounded half up
        assert bundle.fit_score == 73
        assert bundle.hiring_recommendation == "Moderate Match"
        assert bundle.scoring_model_version == SCORING_MODEL_VERSION

    def test_evidence_lists(self, scenario_candidate, scenario_job, ontology):
        bundle = evaluate_skill_match(scenario_candidate, scenario_job, ontology)
        assert [s.label for s in bundle.strengths] == ["python", "aws"]
        assert bundle.gaps[0].label == "docker"
        assert bundle.gaps[0].evidence == "Required but missing"
        assert RISK_LOW_REQUIRED not in bundle.risk_flags


class TestNeutralValues:
    def test_empty_required_gives_neutral_coverage(self, candidate, ontology):
        bundle = evaluate_skill_match(candidate, Job(title="Clerk", preferred_skills=["aws"]), ontology)
        assert bundle.required_coverage == 0.5
        assert bundle.missing_required == []

    def test_empty_preferred_gives_neutral_coverage(self, candidate, ontology):
        bundle = evaluate_skill_match(candidate, Job(title="Clerk", required_skills=["python"]), ontology)
        assert bundle.preferred_coverage == 0.5

    def test_zero_min_experience_gives_neutral_match(self, candidate, ontology):
        bundle = evaluate_skill_match(candidate, Job(title="Clerk"), ontology)
        assert bundle.experience_match == 0.8
        assert bundle.experience_gap == 0.0

    def test_empty_candidate_and_job(self, ontology):
        bundle = evaluate_skill_match(Candidate(), Job(), ontology)
        assert 0 <= bundle.fit_score <= 100
        assert RISK_INCOMPLETE in bundle.risk_flags


class TestExperience:
    def test_gap_is_flagged(self, ontology):
        bundle = evaluate_skill_match(
            Candidate(name="A", skills=["python"], experience_years=1),
            Job(title="Engineer", min_experience=4, required_skills=["python"]),
            ontology,
        )
        assert bundle.experience_match == 0.25
        assert bundle.experience_gap == 3.0
        assert RISK_EXPERIENCE in bundle.risk_flags
        assert any(g.label == "experience" for g in bundle.gaps)

    def test_unstated_years_count_as_zero_but_lower_completeness(self, ontology):
        stated = Candidate(name="A", email="a@x", role="Dev", skills=["python"], experience_years=0)
        unstated = stated.model_copy(update={"experience_years": None})
        job = Job(title="Engineer", min_experience=2, required_skills=["python"])
        a = evaluate_skill_match(stated, job, ontology)
        b = evaluate_skill_match(unstated, job, ontology)
        assert a.fit_score == b.fit_score
        assert a.data_completeness > b.data_completeness

    @pytest.mark.parametrize("build", [
        lambda: Job(min_experience=float("inf")),
        lambda: Candidate(experience_years=float("nan")),
        lambda: EmploymentEntry(tenure_months=float("-inf")),
    ])
    def test_non_finite_numbers_rejected(self, build):
        with pytest.raises(ValidationError):
            build()


class TestMatching:
    def test_synonyms_match(self, ontology):
        bundle = evaluate_skill_match(
            Candidate(skills=["k8s", "Amazon Web Services"]),
            Job(title="Engineer", required_skills=["Kubernetes"], preferred_skills=["aws"]),
            ontology,
        )
        assert bundle.matched_required == ["kubernetes"]
        assert bundle.matched_preferred == ["aws"]

    def test_short_skill_matches_whole(self, ontology):
        bundle = evaluate_skill_match(
            Candidate(skills=["Golang"]),
            Job(title="Engineer", required_skills=["go", "c#"]),
            ontology,
        )
        assert bundle.matched_required == ["go"]
        assert bundle.missing_required == ["c#"]

    def test_match_tokens(self):
        assert match_tokens("machine learning") == ["machine", "learning"]
        assert match_tokens("C#") == ["c#"]
        assert match_tokens("  ") == []

    def test_low_coverage_flag(self, ontology):
        bundle = evaluate_skill_match(
            Candidate(skills=["python"]),
            Job(title="Engineer", required_skills=["docker", "kubernetes", "python"]),
            ontology,
        )
        assert RISK_LOW_REQUIRED in bundle.risk_flags


@pytest.mark.parametrize("score,label", [(75, "Strong Match"), (74, "Moderate Match"), (50, "Moderate Match"), (49, "Weak Match")])
def test_hiring_recommendation_bands(score, label):
    assert pick_hiring_recommendation(score) == label


def test_deterministic_scorer_is_idempotent(candidate, job, ontology):
    first = evaluate_skill_match(candidate, job, ontology)
    second = evaluate_skill_match(candidate, job, ontology)
    assert first.model_dump_json() == second.model_dump_json()


@pytest.mark.property
def test_scores_stay_in_range_for_random_inputs(ontology):
    rng = random.Random(1234)
    vocab = ["python", "aws", "docker", "k8s", "go", "rust", "sql", "excel", "", "  ", "C#", "counselling"]
    titles = ["Engineer", "Counselor", "Clerk", "Data Analyst", ""]
    for _ in range(300):
        candidate = Candidate(
            name=rng.choice(["", "Pat"]),
            skills=rng.sample(vocab, rng.randint(0, len(vocab))),
            experience_years=rng.choice([None, -5, 0, rng.uniform(0, 40)]),
        )
        job = Job(
            title=rng.choice(titles),
            min_experience=rng.choice([-1, 0, rng.uniform(0, 20)]),
            required_skills=rng.sample(vocab, rng.randint(0, 5)),
            preferred_skills=rng.sample(vocab, rng.randint(0, 5)),
        )
        bundle = evaluate_skill_match(candidate, job, ontology)
        assert 0 <= bundle.fit_score <= 100
        assert 0 <= bundle.confidence <= 1
        for ratio in (bundle.required_coverage, bundle.preferred_coverage, bundle.experience_match):
            assert 0 <= ratio <= 1


def test_audit_record(scenario_candidate, scenario_job, ontology):
    bundle = evaluate_skill_match(scenario_candidate, scenario_job, ontology)
    parsed = ParsedCv(name="Sam", experience_years=3, skills=["python", "aws"])
    now = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    record = build_audit_record("cv body", parsed, scenario_job, bundle, now=now)
    assert record.id == f"Sam-{now.isoformat()}"
    assert record.skills == "python, aws"
    assert record.matched_required_skills == "python"
    assert record.missing_required_skills == "docker"
    assert record.fit_score == 73
    assert record.selected_job == "Operations Analyst"
    assert record.cv_text == "cv body"
