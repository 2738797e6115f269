"""Reputation accounting for evaluators and trust scoring for skills.

After each consensus round every participating evaluator earns or loses
reputation by how far their overall score sat from the panel mean, whether
their recommendation matched the final verdict, and whether they surfaced
critical findings the rest of the panel missed.

Disputes, sybil detection and inactivity decay also move reputation. Every
operation here returns ``ReputationChange`` records or fresh snapshots; the
caller owns persistence and applies changes atomically.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from typing import Iterable, Mapping, Sequence

from skillquorum.core.consensus import (
    ConsensusResult,
    ConsensusTier,
    ConsensusVerdict,
    finding_key,
)
from skillquorum.core.report import EvaluatorTier, Recommendation, Report
from skillquorum.core.reputation.decay import calculate_decay, calculate_decay_changes
from skillquorum.core.reputation.models import (
    AuditorReputation,
    ExecutionStats,
    ReputationChange,
    ReputationConfig,
    SkillTrustScore,
    TierRequirements,
    TrustScoreWeights,
)

logger = logging.getLogger(__name__)

TRUST_SCORE_MAX: int = 1000

_DAILY_LIMITS: dict[EvaluatorTier, int] = {
    EvaluatorTier.T1: 10,
    EvaluatorTier.T2: 5,
    EvaluatorTier.T3: 3,
}

_ELIGIBLE_CONSENSUS_TIERS: dict[EvaluatorTier, tuple[ConsensusTier, ...]] = {
    EvaluatorTier.T1: (ConsensusTier.BASIC, ConsensusTier.RIGOROUS, ConsensusTier.CRITICAL),
    EvaluatorTier.T2: (ConsensusTier.BASIC, ConsensusTier.RIGOROUS),
    EvaluatorTier.T3: (ConsensusTier.BASIC,),
}

_CONTRADICTIONS: dict[ConsensusVerdict, frozenset[Recommendation]] = {
    ConsensusVerdict.APPROVED: frozenset({Recommendation.REJECT}),
    ConsensusVerdict.REJECTED: frozenset({Recommendation.APPROVE, Recommendation.CONDITIONAL}),
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def score_divergence(score: float, mean: float) -> float:
    """Relative divergence ``|score - mean| / mean``.

    A zero mean gives 0.0 when the score is also zero and 1.0 otherwise.
    """
    if mean == 0:
        return 0.0 if score == 0 else 1.0
    return abs(score - mean) / mean


def _divergence_delta(divergence: float, config: ReputationConfig) -> tuple[int, str]:
    if divergence <= config.aligned_divergence:
        return config.aligned_bonus, "Aligned with consensus"
    if divergence <= config.slight_divergence:
        return config.slight_divergence_bonus, "Slight divergence from consensus"
    if divergence <= config.moderate_divergence:
        return config.moderate_divergence_penalty, "Moderate divergence from consensus"
    return config.extreme_divergence_penalty, "Extreme divergence from consensus"


def _unique_critical_count(report: Report, outlier_keys: frozenset[str]) -> int:
    return len({finding_key(f) for f in report.findings.critical} & outlier_keys)


def _snapshot_record(
    auditor_id: str,
    reputations: Mapping[str, AuditorReputation],
    config: ReputationConfig,
    now: datetime,
) -> AuditorReputation:
    record = reputations.get(auditor_id)
    if record is None:
        logger.debug("No reputation record for %s; starting at floor", auditor_id)
        record = AuditorReputation.new(auditor_id, now, config.min_reputation)
    return record


# ---------------------------------------------------------------------------
# Consensus-driven changes
# ---------------------------------------------------------------------------


def calculate_reputation_changes(
    result: ConsensusResult,
    reputations: Mapping[str, AuditorReputation],
    config: ReputationConfig,
    now: datetime | None = None,
) -> list[ReputationChange]:
    """Compute one change per report in a finished consensus round.

    Scoring per report:
      1. Divergence of the evaluator's overall score from the panel mean
         selects a band delta.
      2. On an APPROVED or REJECTED verdict, a recommendation contradicting
         the verdict turns any reward into the moderate penalty.
      3. Each critical finding the evaluator raised that only a minority
         of the panel reported earns ``unique_finding_bonus``.

    Evaluators with no record in ``reputations`` are treated as first-time
    evaluators starting at the floor.

    Args:
        result: A consensus result. PENDING results yield no changes.
        reputations: Current snapshot keyed by auditor id.
        config: Reputation policy.
        now: Timestamp for the changes. Defaults to UTC now.

    Returns:
        A list of ``ReputationChange`` in report order.
    """
    if result.verdict is ConsensusVerdict.PENDING:
        return []
    if now is None:
        now = datetime.now(timezone.utc)

    mean = result.metrics.mean_score
    contradicting = _CONTRADICTIONS.get(result.verdict, frozenset())
    outlier_keys = frozenset(finding_key(f) for f in result.outlier_findings)

    changes: list[ReputationChange] = []
    for report in result.reports:
        record = _snapshot_record(report.evaluator_id, reputations, config, now)

        divergence = score_divergence(report.scores.overall, mean)
        delta, reason = _divergence_delta(divergence, config)

        if delta > 0 and report.recommendation in contradicting:
            delta = config.moderate_divergence_penalty
            reason = f"Recommendation '{report.recommendation.value}' contradicts {result.verdict.value} verdict"
        aligned = delta > 0

        unique = _unique_critical_count(report, outlier_keys)
        if unique:
            delta += unique * config.unique_finding_bonus
            reason = f"{reason}; {unique} unique critical finding{'s' if unique != 1 else ''}"

        changes.append(ReputationChange(
            auditor_id=report.evaluator_id,
            previous_reputation=record.reputation,
            new_reputation=config.clamp(record.reputation + delta),
            change=delta,
            reason=reason,
            timestamp=now,
            aligned=aligned,
            evaluation_id=report.id,
        ))

    logger.debug(
        "Skill %s: %d reputation changes (%s)", result.skill_id, len(changes), result.verdict.value,
    )
    return changes


def handle_dispute_resolution(
    evaluators: Iterable[str],
    was_overturned: bool,
    reputations: Mapping[str, AuditorReputation],
    config: ReputationConfig,
    now: datetime | None = None,
) -> list[ReputationChange]:
    """Penalise the original panel when a dispute overturns its verdict.

    Returns no changes when the verdict stood. Evaluators missing from the
    snapshot are skipped with a warning.
    """
    if not was_overturned:
        return []
    return _flat_penalty(
        evaluators, reputations, config, config.overturned_penalty,
        "Verdict overturned on dispute", now, overturned=True,
    )


def apply_sybil_penalty(
    evaluators: Iterable[str],
    reputations: Mapping[str, AuditorReputation],
    config: ReputationConfig,
    now: datetime | None = None,
) -> list[ReputationChange]:
    """Penalise evaluators identified as one actor behind several identities."""
    return _flat_penalty(
        evaluators, reputations, config, config.sybil_penalty,
        "Sybil behaviour detected", now,
    )


def _flat_penalty(
    evaluators: Iterable[str],
    reputations: Mapping[str, AuditorReputation],
    config: ReputationConfig,
    penalty: int,
    reason: str,
    now: datetime | None,
    overturned: bool = False,
) -> list[ReputationChange]:
    if now is None:
        now = datetime.now(timezone.utc)
    changes: list[ReputationChange] = []
    for auditor_id in dict.fromkeys(evaluators):
        record = reputations.get(auditor_id)
        if record is None:
            logger.warning("Cannot penalise %s: no reputation record", auditor_id)
            continue
        changes.append(ReputationChange(
            auditor_id=auditor_id,
            previous_reputation=record.reputation,
            new_reputation=config.clamp(record.reputation + penalty),
            change=penalty,
            reason=reason,
            timestamp=now,
            overturned=overturned,
        ))
    return changes


# ---------------------------------------------------------------------------
# Tiers
# ---------------------------------------------------------------------------


def determine_tier(reputation: int, config: ReputationConfig) -> EvaluatorTier:
    """Map a reputation value to an evaluator tier."""
    if reputation >= config.tier1_min:
        return EvaluatorTier.T1
    if reputation >= config.tier2_min:
        return EvaluatorTier.T2
    return EvaluatorTier.T3


def tier_requirements(tier: EvaluatorTier, config: ReputationConfig) -> TierRequirements:
    """Minimum reputation, daily quota and eligible consensus tiers for ``tier``."""
    minimums = {
        EvaluatorTier.T1: config.tier1_min,
        EvaluatorTier.T2: config.tier2_min,
        EvaluatorTier.T3: config.tier3_min,
    }
    return TierRequirements(
        tier=tier,
        min_reputation=minimums[tier],
        max_evaluations_per_day=_DAILY_LIMITS[tier],
        consensus_tiers=_ELIGIBLE_CONSENSUS_TIERS[tier],
    )


# ---------------------------------------------------------------------------
# Applying changes
# ---------------------------------------------------------------------------


def apply_changes(
    reputations: Mapping[str, AuditorReputation],
    changes: Sequence[ReputationChange],
    config: ReputationConfig,
) -> dict[str, AuditorReputation]:
    """Return a new snapshot with ``changes`` applied in order.

    Deltas are re-applied to the running value and clamped, so several
    changes for one auditor compose. Consensus-driven changes (those that
    carry an ``evaluation_id``) bump the evaluation counters and the last
    activity time, and clear the decay anchor; penalties do not. Decay
    changes advance ``last_decayed_at`` so the next sweep starts from there.
    """
    updated: dict[str, AuditorReputation] = dict(reputations)
    for change in changes:
        record = updated.get(change.auditor_id)
        if record is None:
            record = AuditorReputation.new(change.auditor_id, change.timestamp, config.min_reputation)

        reputation = config.clamp(record.reputation + change.change)
        fields: dict[str, object] = {
            "reputation": reputation,
            "tier": determine_tier(reputation, config),
            "evaluations_overturned": record.evaluations_overturned + int(change.overturned),
        }
        if change.evaluation_id is not None:
            fields["evaluations_completed"] = record.evaluations_completed + 1
            fields["evaluations_aligned"] = record.evaluations_aligned + int(change.aligned)
            fields["last_evaluation_at"] = change.timestamp
            fields["last_decayed_at"] = None
        elif change.decayed:
            fields["last_decayed_at"] = change.timestamp
        updated[change.auditor_id] = dataclasses.replace(record, **fields)
    return updated


# ---------------------------------------------------------------------------
# Skill trust
# ---------------------------------------------------------------------------


def calculate_skill_trust_score(
    result: ConsensusResult,
    reputations: Mapping[str, AuditorReputation],
    execution_stats: ExecutionStats,
    config: ReputationConfig,
    weights: TrustScoreWeights,
    now: datetime | None = None,
) -> SkillTrustScore:
    """Blend consensus strength, panel quality and runtime success.

    - consensus strength: ``confidence / 100`` for an APPROVED verdict,
      otherwise 0.
    - evaluator quality: mean reputation of the panel divided by the
      ceiling; evaluators without a record count at the floor.
    - execution success rate: from ``execution_stats``.

    The weighted blend is scaled to 0-1000.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    strength = result.confidence / 100 if result.verdict is ConsensusVerdict.APPROVED else 0.0

    panel = list(dict.fromkeys(r.evaluator_id for r in result.reports))
    if panel:
        total = sum(
            reputations[a].reputation if a in reputations else config.min_reputation
            for a in panel
        )
        quality = (total / len(panel)) / config.max_reputation
    else:
        quality = 0.0

    success = execution_stats.success_rate
    blended = (
        weights.consensus * strength
        + weights.evaluator_quality * quality
        + weights.execution * success
    )
    score = max(0, min(TRUST_SCORE_MAX, round(TRUST_SCORE_MAX * blended)))

    return SkillTrustScore(
        skill_id=result.skill_id,
        trust_score=score,
        consensus_strength=strength,
        evaluator_quality=quality,
        execution_success_rate=success,
        last_updated=now,
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class ReputationEngine:
    """Reputation and trust calculations bound to one policy.

    Stateless apart from its validated configuration; snapshots go in and
    changes come out.

    Usage::

        engine = ReputationEngine()
        changes = engine.calculate_reputation_changes(result, snapshot)
        snapshot = engine.apply_changes(snapshot, changes)

    Args:
        config: Reputation policy. Defaults to ``ReputationConfig()``.
        weights: Trust score blend. Defaults to ``TrustScoreWeights()``.

    Raises:
        ValueError: If either config fails validation.
    """

    def __init__(
        self,
        config: ReputationConfig | None = None,
        weights: TrustScoreWeights | None = None,
    ) -> None:
        self._config = config or ReputationConfig()
        self._weights = weights or TrustScoreWeights()
        self._config.validate()
        self._weights.validate()

    @property
    def config(self) -> ReputationConfig:
        """Return the reputation policy."""
        return self._config

    @property
    def weights(self) -> TrustScoreWeights:
        """Return the trust score weights."""
        return self._weights

    def calculate_reputation_changes(
        self,
        result: ConsensusResult,
        reputations: Mapping[str, AuditorReputation],
        now: datetime | None = None,
    ) -> list[ReputationChange]:
        """See :func:`calculate_reputation_changes`."""
        return calculate_reputation_changes(result, reputations, self._config, now)

    def calculate_decay(self, auditor: AuditorReputation, now: datetime | None = None) -> int:
        """See :func:`skillquorum.core.reputation.decay.calculate_decay`."""
        return calculate_decay(auditor, self._config, now)

    def calculate_decay_changes(
        self,
        reputations: Mapping[str, AuditorReputation],
        now: datetime | None = None,
    ) -> list[ReputationChange]:
        """See :func:`skillquorum.core.reputation.decay.calculate_decay_changes`."""
        return calculate_decay_changes(reputations, self._config, now)

    def handle_dispute_resolution(
        self,
        evaluators: Iterable[str],
        was_overturned: bool,
        reputations: Mapping[str, AuditorReputation],
        now: datetime | None = None,
    ) -> list[ReputationChange]:
        """See :func:`handle_dispute_resolution`."""
        return handle_dispute_resolution(evaluators, was_overturned, reputations, self._config, now)

    def apply_sybil_penalty(
        self,
        evaluators: Iterable[str],
        reputations: Mapping[str, AuditorReputation],
        now: datetime | None = None,
    ) -> list[ReputationChange]:
        """See :func:`apply_sybil_penalty`."""
        return apply_sybil_penalty(evaluators, reputations, self._config, now)

    def determine_tier(self, reputation: int) -> EvaluatorTier:
        return determine_tier(reputation, self._config)

    def tier_requirements(self, tier: EvaluatorTier) -> TierRequirements:
        return tier_requirements(tier, self._config)

    def apply_changes(
        self,
        reputations: Mapping[str, AuditorReputation],
        changes: Sequence[ReputationChange],
    ) -> dict[str, AuditorReputation]:
        """See :func:`apply_changes`."""
        return apply_changes(reputations, changes, self._config)

    def calculate_skill_trust_score(
        self,
        result: ConsensusResult,
        reputations: Mapping[str, AuditorReputation],
        execution_stats: ExecutionStats | None = None,
        now: datetime | None = None,
    ) -> SkillTrustScore:
        """See :func:`calculate_skill_trust_score`."""
        return calculate_skill_trust_score(
            result, reputations, execution_stats or ExecutionStats(),
            self._config, self._weights, now,
        )
