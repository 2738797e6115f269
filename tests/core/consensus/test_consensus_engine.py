"""Tests for consensus orchestration.

Validates:
- End-to-end verdicts for approving, rejecting and split panels.
- PENDING below the tier's minimum panel size.
- Result fields: metrics, aggregated findings, expiry, reasoning.
- The quick mean-score-only path.
- Contesting a result with a dispute.
- Engine construction from config, enum or name.
- Skill trust scores derived from panel reputation.
"""

from __future__ import annotations

import dataclasses
from datetime import timedelta

import pytest

from skillquorum.core.consensus import (
    CONSENSUS_CONFIGS,
    ConsensusEngine,
    ConsensusTier,
    ConsensusVerdict,
    Dispute,
    DisputeStatus,
    calculate_consensus,
    contest,
    quick_consensus,
)
from skillquorum.core.reputation import (
    AuditorReputation,
    ExecutionStats,
    ReputationEngine,
    TrustScoreWeights,
)
from skillquorum.exceptions import ConfigurationError, ConsensusError
from tests.helpers import (
    FIXED_NOW,
    approving_panel,
    make_finding,
    make_report,
    rejecting_panel,
    split_panel,
)

BASIC = CONSENSUS_CONFIGS[ConsensusTier.BASIC]


def _dispute(skill_id: str = "skill-1", **kwargs) -> Dispute:
    return Dispute(
        id="d-1",
        skill_id=skill_id,
        creator_id="mallory",
        reason="Evaluators missed a sandbox escape",
        original_verdict=ConsensusVerdict.APPROVED,
        created_at=FIXED_NOW,
        **kwargs,
    )


# ===========================================================================
# Verdict scenarios
# ===========================================================================


class TestScenarios:
    """Three-report panels under the basic tier."""

    def test_agreeing_high_scores_are_approved(self) -> None:
        result = calculate_consensus("skill-1", approving_panel(), BASIC, now=FIXED_NOW)
        assert result.verdict is ConsensusVerdict.APPROVED
        assert result.metrics.score_variance == pytest.approx(20 / 850)
        assert result.metrics.critical_overlap == 1.0
        assert result.metrics.methodology_diversity == 1.0
        assert result.metrics.mean_score == pytest.approx(850.0)
        assert result.metrics.evaluator_count == 3
        assert result.metrics.distinct_methodologies == 3
        assert result.confidence == round(35 * (1 - (20 / 850) / 0.30) + 35 + 20)

    def test_agreeing_low_scores_are_rejected(self) -> None:
        result = calculate_consensus("skill-1", rejecting_panel(), BASIC, now=FIXED_NOW)
        assert result.verdict is ConsensusVerdict.REJECTED
        assert result.metrics.score_variance == pytest.approx(30 / (1090 / 3))
        assert result.metrics.critical_overlap == 1.0

    def test_split_scores_are_inconclusive(self) -> None:
        result = calculate_consensus("skill-1", split_panel(), BASIC, now=FIXED_NOW)
        assert result.verdict is ConsensusVerdict.INCONCLUSIVE
        assert result.metrics.score_variance > BASIC.score_variance_max
        assert "Verdict: INCONCLUSIVE" in result.reasoning

    def test_result_carries_reports_and_findings(self) -> None:
        reports = approving_panel()
        result = calculate_consensus("skill-1", reports, BASIC, now=FIXED_NOW)
        assert result.reports == tuple(reports)
        assert len(result.aggregated_findings) == 1
        assert result.consensus_findings == result.aggregated_findings
        assert result.outlier_findings == ()

    def test_outlier_findings_are_reported(self) -> None:
        shared = make_finding("Shared")
        extra = make_finding("Only one evaluator saw this")
        reports = approving_panel()
        reports[0] = make_report("alice", 860, critical=[shared, extra])
        reports[1] = make_report("bob", 840, critical=[shared])
        result = calculate_consensus("skill-1", reports, BASIC, now=FIXED_NOW)
        assert extra in result.outlier_findings
        assert set(result.aggregated_findings) == (
            set(result.consensus_findings) | set(result.outlier_findings)
        )

    def test_expiry_follows_evaluation_timeout(self) -> None:
        result = calculate_consensus("skill-1", approving_panel(), BASIC, now=FIXED_NOW)
        assert result.evaluated_at == FIXED_NOW
        assert result.expires_at == FIXED_NOW + timedelta(hours=72)

    def test_calculation_is_deterministic(self) -> None:
        reports = split_panel()
        first = calculate_consensus("skill-1", reports, BASIC, now=FIXED_NOW)
        second = calculate_consensus("skill-1", reports, BASIC, now=FIXED_NOW)
        assert first == second

    def test_as_dict(self) -> None:
        data = calculate_consensus("skill-1", approving_panel(), BASIC, now=FIXED_NOW).as_dict()
        assert data["verdict"] == "approved"
        assert data["metrics"]["evaluator_count"] == 3
        assert len(data["reports"]) == 3
        assert data["expires_at"] is not None


class TestPending:
    """Panels smaller than the tier minimum."""

    def test_too_few_reports_is_pending(self) -> None:
        reports = approving_panel()[:2]
        result = calculate_consensus("skill-1", reports, BASIC, now=FIXED_NOW)
        assert result.verdict is ConsensusVerdict.PENDING
        assert result.confidence == 0
        assert result.aggregated_findings == ()
        assert result.expires_at is None
        assert result.metrics.evaluator_count == 2
        assert result.reasoning == "Pending: need 1 more evaluation (2 of 3 received)"

    def test_no_reports_is_pending(self) -> None:
        result = calculate_consensus("skill-1", [], BASIC, now=FIXED_NOW)
        assert result.verdict is ConsensusVerdict.PENDING
        assert result.reasoning == "Pending: need 3 more evaluations (0 of 3 received)"

    def test_rigorous_tier_needs_five(self) -> None:
        result = ConsensusEngine(ConsensusTier.RIGOROUS).calculate_consensus(
            "skill-1", approving_panel(), now=FIXED_NOW,
        )
        assert result.verdict is ConsensusVerdict.PENDING
        assert "2 more evaluations" in result.reasoning


# ===========================================================================
# Quick consensus
# ===========================================================================


class TestQuickConsensus:

    def test_no_reports_is_pending(self) -> None:
        assert quick_consensus([], BASIC).verdict is ConsensusVerdict.PENDING

    def test_mean_above_seventy_percent_is_approved(self) -> None:
        result = quick_consensus([make_report("a", 710), make_report("b", 800)], BASIC)
        assert result.verdict is ConsensusVerdict.APPROVED
        assert result.mean_score == pytest.approx(755.0)

    def test_exactly_seventy_percent_is_not_approved(self) -> None:
        result = quick_consensus([make_report("a", 700)], BASIC)
        assert result.verdict is ConsensusVerdict.INCONCLUSIVE
        assert "gray zone" in result.reason

    def test_mean_at_rejection_threshold_is_rejected(self) -> None:
        result = quick_consensus([make_report("a", 400), make_report("b", 600)], BASIC)
        assert result.verdict is ConsensusVerdict.REJECTED

    def test_ignores_findings_and_methodology(self) -> None:
        reports = [
            make_report("a", 900, critical=[make_finding("One")]),
            make_report("b", 900, critical=[make_finding("Two")]),
        ]
        assert quick_consensus(reports, BASIC).verdict is ConsensusVerdict.APPROVED


# ===========================================================================
# Disputes
# ===========================================================================


class TestContest:

    def test_contest_marks_result_contested(self) -> None:
        result = calculate_consensus("skill-1", approving_panel(), BASIC, now=FIXED_NOW)
        contested = contest(result, _dispute())
        assert contested.verdict is ConsensusVerdict.CONTESTED
        assert contested.confidence == result.confidence
        assert "Contested (dispute d-1, round 1)" in contested.reasoning
        assert result.verdict is ConsensusVerdict.APPROVED

    def test_pending_result_cannot_be_contested(self) -> None:
        result = calculate_consensus("skill-1", [], BASIC, now=FIXED_NOW)
        with pytest.raises(ConsensusError, match="pending"):
            contest(result, _dispute())

    def test_dispute_for_other_skill_is_rejected(self) -> None:
        result = calculate_consensus("skill-1", approving_panel(), BASIC, now=FIXED_NOW)
        with pytest.raises(ConsensusError, match="skill-2"):
            contest(result, _dispute(skill_id="skill-2"))

    def test_dispute_round_is_bounded(self) -> None:
        with pytest.raises(ValueError):
            _dispute(round=4)
        with pytest.raises(ValueError):
            _dispute(stake=-1.0)

    def test_overturned_requires_resolution_and_new_verdict(self) -> None:
        assert not _dispute().overturned
        assert not _dispute(
            status=DisputeStatus.RESOLVED, new_verdict=ConsensusVerdict.APPROVED,
        ).overturned
        assert _dispute(
            status=DisputeStatus.RESOLVED, new_verdict=ConsensusVerdict.REJECTED,
        ).overturned


# ===========================================================================
# Engine construction
# ===========================================================================


class TestConsensusEngine:

    def test_default_tier_is_rigorous(self) -> None:
        assert ConsensusEngine().config.tier is ConsensusTier.RIGOROUS

    def test_accepts_name_enum_or_config(self) -> None:
        assert ConsensusEngine("basic").config is BASIC
        assert ConsensusEngine(ConsensusTier.BASIC).config is BASIC
        assert ConsensusEngine(BASIC).config is BASIC

    def test_unknown_tier_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            ConsensusEngine("ultra")

    def test_engine_methods_delegate(self) -> None:
        engine = ConsensusEngine(ConsensusTier.BASIC)
        result = engine.calculate_consensus("skill-1", approving_panel(), now=FIXED_NOW)
        assert result.verdict is ConsensusVerdict.APPROVED
        assert engine.quick_consensus(approving_panel()).verdict is ConsensusVerdict.APPROVED
        assert engine.contest(result, _dispute()).verdict is ConsensusVerdict.CONTESTED


def _panel_reputations(reputation: int) -> dict[str, AuditorReputation]:
    return {
        name: dataclasses.replace(AuditorReputation.new(name, FIXED_NOW), reputation=reputation)
        for name in ("alice", "bob", "carol")
    }


class TestTrustScore:

    def test_rejected_skill_scores_on_quality_and_execution_only(self) -> None:
        engine = ConsensusEngine(ConsensusTier.BASIC)
        result = engine.calculate_consensus("skill-1", rejecting_panel(), now=FIXED_NOW)
        score = engine.calculate_trust_score(result, _panel_reputations(5000), now=FIXED_NOW)
        # 1000 * (0.4 * 0 + 0.3 * 0.5 + 0.3 * 1.0)
        assert score.trust_score == 450
        assert score.consensus_strength == 0.0
        assert score.skill_id == "skill-1"

    def test_matches_reputation_engine(self) -> None:
        engine = ConsensusEngine(ConsensusTier.BASIC)
        result = engine.calculate_consensus("skill-1", approving_panel(), now=FIXED_NOW)
        reputations = _panel_reputations(2500)
        stats = ExecutionStats(success_count=9, total_count=10)
        expected = ReputationEngine().calculate_skill_trust_score(result, reputations, stats, FIXED_NOW)
        assert engine.calculate_trust_score(result, reputations, stats, now=FIXED_NOW) == expected
        assert expected.consensus_strength == result.confidence / 100

    def test_custom_reputation_engine_weights(self) -> None:
        engine = ConsensusEngine(ConsensusTier.BASIC)
        result = engine.calculate_consensus("skill-1", approving_panel(), now=FIXED_NOW)
        execution_only = ReputationEngine(
            weights=TrustScoreWeights(consensus=0.0, evaluator_quality=0.0, execution=1.0),
        )
        score = engine.calculate_trust_score(
            result, {}, ExecutionStats(success_count=9, total_count=10),
            reputation_engine=execution_only, now=FIXED_NOW,
        )
        assert score.trust_score == 900
