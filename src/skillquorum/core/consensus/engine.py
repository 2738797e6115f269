"""Consensus orchestration: from a panel of reports to one verdict.

State machine::

    PENDING --(enough reports)--> evaluating --> APPROVED | REJECTED
                                             \\-> INCONCLUSIVE | CONTESTED

APPROVED and REJECTED are terminal. INCONCLUSIVE is recovered by submitting
more reports; any non-pending verdict can be moved to CONTESTED by a
dispute.

The engine is stateless: each call depends only on the reports and the
``ConsensusConfig`` passed in, so consensus for different skills may run in
parallel without coordination.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Mapping, Sequence

from skillquorum.core.consensus.config import ConsensusConfig, ConsensusTier, get_config
from skillquorum.core.consensus.models import (
    ConsensusMetrics,
    ConsensusResult,
    ConsensusVerdict,
    Dispute,
    QuickConsensus,
)
from skillquorum.core.consensus.overlap import calculate_overlap
from skillquorum.core.consensus.policy import (
    build_reasoning,
    calculate_confidence,
    determine_verdict,
    distinct_methodologies,
    methodology_diversity,
)
from skillquorum.core.consensus.variance import calculate_variance
from skillquorum.core.report import SCORE_MAX, Report
from skillquorum.exceptions import ConsensusError

if TYPE_CHECKING:
    from skillquorum.core.reputation import (
        AuditorReputation,
        ExecutionStats,
        ReputationEngine,
        SkillTrustScore,
    )

logger = logging.getLogger(__name__)

QUICK_APPROVAL_RATIO: float = 0.70


def calculate_consensus(
    skill_id: str,
    reports: Sequence[Report],
    config: ConsensusConfig,
    now: datetime | None = None,
) -> ConsensusResult:
    """Turn a panel of reports into a verdict, confidence and reasoning.

    Steps:
      1. Fewer reports than ``config.min_evaluators`` -> PENDING.
      2. Variance and overlap under the config's thresholds.
      3. Methodology diversity ratio.
      4. Verdict, confidence and reasoning from the above.

    Args:
        skill_id: The skill under evaluation.
        reports: The panel's reports.
        config: Tier policy to apply.
        now: Evaluation time. Defaults to UTC now.

    Returns:
        A new ``ConsensusResult``.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    reports = tuple(reports)

    if len(reports) < config.min_evaluators:
        missing = config.min_evaluators - len(reports)
        logger.debug(
            "Skill %s pending: %d of %d evaluations", skill_id, len(reports), config.min_evaluators
        )
        return ConsensusResult(
            skill_id=skill_id,
            verdict=ConsensusVerdict.PENDING,
            confidence=0,
            metrics=ConsensusMetrics(evaluator_count=len(reports)),
            reports=reports,
            aggregated_findings=(),
            reasoning=(
                f"Pending: need {missing} more evaluation{'s' if missing != 1 else ''} "
                f"({len(reports)} of {config.min_evaluators} received)"
            ),
            evaluated_at=now,
        )

    variance = calculate_variance(reports, config.score_variance_max)
    overlap = calculate_overlap(reports, config.critical_overlap_min)
    diversity = methodology_diversity(reports, config)
    distinct = distinct_methodologies(reports)

    verdict = determine_verdict(variance, overlap, diversity, config)
    confidence = calculate_confidence(variance, overlap, diversity, len(reports), config)
    reasoning = build_reasoning(variance, overlap, distinct, reports, verdict, config)

    logger.debug(
        "Skill %s %s: variance=%.3f overlap=%.3f diversity=%.2f confidence=%d",
        skill_id, verdict.value, variance.variance, overlap.global_overlap,
        diversity, confidence,
    )

    return ConsensusResult(
        skill_id=skill_id,
        verdict=verdict,
        confidence=confidence,
        metrics=ConsensusMetrics(
            score_variance=variance.variance,
            critical_overlap=overlap.global_overlap,
            methodology_diversity=diversity,
            mean_score=variance.mean,
            evaluator_count=len(reports),
            distinct_methodologies=distinct,
        ),
        reports=reports,
        aggregated_findings=overlap.unique_findings,
        reasoning=reasoning,
        evaluated_at=now,
        expires_at=now + config.evaluation_timeout,
        consensus_findings=overlap.consensus_findings,
        outlier_findings=overlap.outlier_findings,
    )


def quick_consensus(reports: Sequence[Report], config: ConsensusConfig) -> QuickConsensus:
    """Mean-score-only verdict for low-stakes or demo flows.

    Skips overlap and methodology checks entirely. Approves when the mean
    overall score exceeds 70% of the scale maximum. Not suitable for
    production-grade determinations.
    """
    if not reports:
        return QuickConsensus(
            verdict=ConsensusVerdict.PENDING,
            mean_score=0.0,
            reason="No evaluations submitted",
        )

    mean = sum(r.scores.overall for r in reports) / len(reports)
    approval_bar = QUICK_APPROVAL_RATIO * SCORE_MAX

    if mean > approval_bar:
        return QuickConsensus(
            verdict=ConsensusVerdict.APPROVED,
            mean_score=mean,
            reason=f"Mean score {mean:.0f} > {approval_bar:.0f} threshold",
        )
    if mean <= config.rejection_threshold:
        return QuickConsensus(
            verdict=ConsensusVerdict.REJECTED,
            mean_score=mean,
            reason=f"Mean score {mean:.0f} <= {config.rejection_threshold} threshold",
        )
    return QuickConsensus(
        verdict=ConsensusVerdict.INCONCLUSIVE,
        mean_score=mean,
        reason=(
            f"Mean score {mean:.0f} in gray zone "
            f"({config.rejection_threshold}-{approval_bar:.0f})"
        ),
    )


def contest(result: ConsensusResult, dispute: Dispute) -> ConsensusResult:
    """Return a copy of ``result`` marked CONTESTED by ``dispute``.

    Raises:
        ConsensusError: If the result is still PENDING, or the dispute
            targets a different skill.
    """
    if result.verdict is ConsensusVerdict.PENDING:
        raise ConsensusError("Cannot contest a pending consensus result")
    if dispute.skill_id != result.skill_id:
        raise ConsensusError(
            f"Dispute {dispute.id} targets skill {dispute.skill_id!r}, "
            f"not {result.skill_id!r}"
        )
    return dataclasses.replace(
        result,
        verdict=ConsensusVerdict.CONTESTED,
        reasoning=(
            f"{result.reasoning}\n\nContested (dispute {dispute.id}, round "
            f"{dispute.round}): {dispute.reason}"
        ),
    )


class ConsensusEngine:
    """Consensus calculation bound to one tier policy.

    The engine holds an immutable ``ConsensusConfig`` and nothing else; it
    is safe to share across threads. Construct one per tier rather than
    mutating a shared instance.

    Usage::

        engine = ConsensusEngine(ConsensusTier.BASIC)
        result = engine.calculate_consensus("skill-1", reports)
        if result.verdict is ConsensusVerdict.INCONCLUSIVE:
            ...

    Args:
        config: A ``ConsensusConfig``, or a tier (enum member or name) to
            look up in the fixed table. Defaults to the rigorous tier.
    """

    def __init__(
        self,
        config: ConsensusConfig | ConsensusTier | str = ConsensusTier.RIGOROUS,
    ) -> None:
        if isinstance(config, ConsensusConfig):
            self._config = config
        else:
            self._config = get_config(config)

    @property
    def config(self) -> ConsensusConfig:
        """Return the tier policy this engine applies."""
        return self._config

    def calculate_consensus(
        self,
        skill_id: str,
        reports: Sequence[Report],
        now: datetime | None = None,
    ) -> ConsensusResult:
        """See :func:`calculate_consensus`."""
        return calculate_consensus(skill_id, reports, self._config, now)

    def quick_consensus(self, reports: Sequence[Report]) -> QuickConsensus:
        """See :func:`quick_consensus`."""
        return quick_consensus(reports, self._config)

    def contest(self, result: ConsensusResult, dispute: Dispute) -> ConsensusResult:
        """See :func:`contest`."""
        return contest(result, dispute)

    def calculate_trust_score(
        self,
        result: ConsensusResult,
        reputations: Mapping[str, AuditorReputation],
        execution_stats: ExecutionStats | None = None,
        reputation_engine: ReputationEngine | None = None,
        now: datetime | None = None,
    ) -> SkillTrustScore:
        """Derive the skill trust score for ``result`` from panel reputation.

        Args:
            result: A consensus result produced by this or another engine.
            reputations: Snapshot of the panel's reputation records.
            execution_stats: Observed runtime outcomes. None means no
                executions yet.
            reputation_engine: Engine holding the reputation config and
                trust weights. Defaults to ``ReputationEngine()``.
            now: Score time. Defaults to UTC now.
        """
        # The reputation package builds on consensus results.
        from skillquorum.core.reputation import ReputationEngine

        engine = reputation_engine or ReputationEngine()
        return engine.calculate_skill_trust_score(result, reputations, execution_stats, now)
