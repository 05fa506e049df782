import json

import pytest

from models.schemas.candidate import Candidate
from models.schemas.cv_review import CvBreakdown, CvInsights, CvQualityResult
from models.schemas.job import Job
from models.schemas.skill_match import EvidenceItem
from services.cv_review import (
    FALLBACK_AI_CONFIDENCE,
    GENERIC_STRENGTH,
    MODEL_VERSION,
    fallback_insights,
    guard_insights,
    review_cv,
    review_evidence_pool,
    sanitize_insights,
)

AI_REPLY = {
    "executiveSummary": "Solid backend engineer with measurable delivery.",
    "strengths": [
        {"label": "Python services", "evidence": "Built payment APIs"},
        {"label": "Latency work", "evidence": "reduced latency by 30%"},
    ],
    "improvements": [{"label": "Kubernetes", "evidence": "not mentioned"}],
    "seniorityEstimate": "Senior",
    "hiringReadiness": "Interview Ready",
    "modelConfidence": 0.7,
}


def _quality(**scores):
    breakdown = CvBreakdown(**{
        "structure": 10, "skill_density": 10, "experience_depth": 10,
        "achievements": 10, "clarity": 10, **scores,
    })
    return CvQualityResult(
        overall_score=sum(breakdown.model_dump().values()),
        breakdown=breakdown,
        risk_flags=["Weak CV structure", "Low quantified achievement evidence", "Clarity/professionalism concerns", "extra"],
    )


class TestSanitize:
    def test_requires_summary(self):
        assert sanitize_insights({"strengths": ["x"]}) is None
        assert sanitize_insights({"executiveSummary": "   "}) is None
        assert sanitize_insights("not an object") is None

    def test_defaults(self):
        insights = sanitize_insights({"executiveSummary": "ok"})
        assert insights.seniority_estimate == "Mid"
        assert insights.hiring_readiness == "Needs Review"
        assert insights.model_confidence == 0.55

    def test_confidence_clamped(self):
        assert sanitize_insights({"executiveSummary": "ok", "modelConfidence": 7}).model_confidence == 1.0
        assert sanitize_insights({"executiveSummary": "ok", "modelConfidence": "n/a"}).model_confidence == 0.55

    def test_items_capped_and_deduped(self):
        items = [{"label": f"Skill {i}", "evidence": "e"} for i in range(8)] + [{"label": "skill 0"}]
        insights = sanitize_insights({"executiveSummary": "ok", "strengths": items})
        assert len(insights.strengths) == 5


class TestGuard:
    def test_untraceable_insights_discarded(self):
        insights = CvInsights(
            executive_summary="s",
            strengths=[EvidenceItem(label="Charisma", evidence="vibes")],
            improvements=[EvidenceItem(label="Blockchain", evidence="absent")],
        )
        assert guard_insights(insights, {"python"}, _quality()) is None

    def test_empty_lists_backfilled(self):
        insights = CvInsights(
            executive_summary="s",
            strengths=[EvidenceItem(label="Charisma", evidence="vibes")],
            improvements=[EvidenceItem(label="Python testing", evidence="")],
        )
        guarded = guard_insights(insights, {"python"}, _quality())
        assert guarded.strengths == [GENERIC_STRENGTH]
        assert [i.label for i in guarded.improvements] == ["Python testing"]

        insights = insights.model_copy(update={
            "strengths": [EvidenceItem(label="Python", evidence="")],
            "improvements": [],
        })
        guarded = guard_insights(insights, {"python"}, _quality())
        assert [i.label for i in guarded.improvements] == [
            "Weak CV structure", "Low quantified achievement evidence", "Clarity/professionalism concerns",
        ]

    def test_pool_includes_job_skills(self):
        pool = review_evidence_pool("", Candidate(role="Analyst"), Job(required_skills=["Tableau"]))
        assert pool == {"analyst", "tableau"}


class TestFallback:
    def test_top_and_bottom_dimensions(self):
        insights = fallback_insights(_quality(achievements=18, clarity=15, structure=3, experience_depth=4))
        assert [s.label for s in insights.strengths] == ["achievements", "clarity"]
        assert [i.label for i in insights.improvements] == ["structure", "experience_depth"]
        assert insights.strengths[0].evidence == "Deterministic sub-score 18/20"
        assert insights.model_confidence == FALLBACK_AI_CONFIDENCE

    @pytest.mark.parametrize("depth,label", [(14, "Senior"), (13, "Mid"), (9, "Mid"), (8, "Junior")])
    def test_seniority(self, depth, label):
        assert fallback_insights(_quality(experience_depth=depth)).seniority_estimate == label

    def test_readiness(self):
        q = _quality()
        assert fallback_insights(q.model_copy(update={"overall_score": 75})).hiring_readiness == "Interview Ready"
        assert fallback_insights(q.model_copy(update={"overall_score": 55})).hiring_readiness == "Screening Recommended"
        assert fallback_insights(q.model_copy(update={"overall_score": 54})).hiring_readiness == "Needs Development"


class TestReviewCv:
    @pytest.mark.asyncio
    async def test_ai_insights_never_change_score(self, resume_text, candidate, ontology, stub_llm):
        stub_llm.reply = None
        baseline = await review_cv(resume_text, candidate, ontology)
        stub_llm.reply = json.dumps(AI_REPLY)
        hybrid = await review_cv(resume_text, candidate, ontology)

        assert hybrid.overall_score == baseline.overall_score
        assert hybrid.breakdown == baseline.breakdown
        assert hybrid.audit.ai_used is True
        assert baseline.audit.ai_used is False
        assert hybrid.ai_insights.seniority_estimate == "Senior"
        assert hybrid.model_version == MODEL_VERSION

    @pytest.mark.asyncio
    async def test_final_confidence_blend(self, resume_text, candidate, ontology, stub_llm):
        stub_llm.reply = json.dumps(AI_REPLY)
        result = await review_cv(resume_text, candidate, ontology)
        c = result.confidence
        assert c.ai_confidence == 0.7
        expected = c.data_completeness * 0.35 + c.structural_confidence * 0.35 + 0.7 * 0.3
        assert c.final_confidence == pytest.approx(expected, abs=1e-3)

    @pytest.mark.asyncio
    async def test_fallback_when_ai_unavailable(self, resume_text, candidate, ontology, stub_llm):
        result = await review_cv(resume_text, candidate, ontology)
        assert result.confidence.ai_confidence == FALLBACK_AI_CONFIDENCE
        assert result.ai_insights.executive_summary.startswith("Deterministic CV review")
        assert result.audit.ai_raw_response == ""
        assert len(result.audit.prompt_hash) == 16

    @pytest.mark.asyncio
    async def test_audit_carries_diagnostics(self, resume_text, candidate, ontology, stub_llm):
        stub_llm.reply = "not json"
        result = await review_cv(resume_text, candidate, ontology)
        assert set(result.audit.deterministic_diagnostics) == {
            "structure", "skill_density", "experience_depth", "achievements", "clarity",
        }
        assert result.audit.ai_raw_response == "not json"
        assert result.audit.ai_used is False
