"""Reputation data models: config, auditor records, changes, trust scores.

- ``ReputationConfig`` -- reward/penalty amounts, decay timing, tier
  thresholds and the reputation floor/ceiling.
- ``TrustScoreWeights`` -- blend weights for the skill trust score.
- ``AuditorReputation`` -- one evaluator's persistent trust state.
- ``ReputationChange`` -- a delta for the caller to apply to its store.
- ``ExecutionStats`` / ``SkillTrustScore`` -- inputs and output of the
  skill trust computation.
- ``TierRequirements`` -- what each evaluator tier unlocks.

All records are immutable; the engine never mutates the caller's snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from skillquorum.core.consensus import ConsensusTier
from skillquorum.core.report import EvaluatorTier
from skillquorum.exceptions import ReputationError

WEIGHT_SUM_EPSILON: float = 1e-6


# ---------------------------------------------------------------------------
# ReputationConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReputationConfig:
    """Reputation policy constants.

    Divergence is ``|score - mean| / mean``. Bands map divergence to a
    delta: up to ``aligned_divergence`` earns ``aligned_bonus``, up to
    ``slight_divergence`` earns ``slight_divergence_bonus``, up to
    ``moderate_divergence`` costs ``moderate_divergence_penalty``, anything
    beyond costs ``extreme_divergence_penalty``.

    Decay: no decay for ``grace_period_days`` of inactivity; the decay rate
    then ramps in linearly until ``soft_decay_days``, after which
    reputation halves toward the floor every ``half_life_days``.
    """

    aligned_bonus: int = 10
    slight_divergence_bonus: int = 5
    moderate_divergence_penalty: int = -5
    extreme_divergence_penalty: int = -15
    unique_finding_bonus: int = 3
    overturned_penalty: int = -50
    sybil_penalty: int = -100

    aligned_divergence: float = 0.05
    slight_divergence: float = 0.10
    moderate_divergence: float = 0.20

    half_life_days: float = 30.0
    grace_period_days: float = 30.0
    soft_decay_days: float = 90.0

    tier3_min: int = 0
    tier2_min: int = 500
    tier1_min: int = 2000

    min_reputation: int = 0
    max_reputation: int = 10000

    def validate(self) -> None:
        """Raise ValueError if the constants are inconsistent.

        The overturned penalty must be the largest consensus penalty:
        landing on the overturned side of a dispute outweighs any
        divergence in the original round.

        Raises:
            ValueError: On ordering or sign violations.
        """
        if not self.min_reputation < self.max_reputation:
            raise ValueError(
                f"min_reputation ({self.min_reputation}) must be below "
                f"max_reputation ({self.max_reputation})"
            )
        if not self.tier3_min <= self.tier2_min <= self.tier1_min:
            raise ValueError("Tier thresholds must satisfy tier3 <= tier2 <= tier1")
        if not 0 <= self.aligned_divergence <= self.slight_divergence <= self.moderate_divergence:
            raise ValueError("Divergence bands must be non-negative and ascending")
        if self.aligned_bonus < 0 or self.slight_divergence_bonus < 0 or self.unique_finding_bonus < 0:
            raise ValueError("Bonuses must be non-negative")
        if not (
            self.overturned_penalty
            <= self.extreme_divergence_penalty
            <= self.moderate_divergence_penalty
            <= 0
        ):
            raise ValueError(
                "Penalties must be non-positive with overturned <= extreme <= moderate"
            )
        if self.half_life_days <= 0:
            raise ValueError(f"half_life_days must be positive, got {self.half_life_days}")
        if not 0 <= self.grace_period_days <= self.soft_decay_days:
            raise ValueError("Decay windows must satisfy 0 <= grace <= soft")

    def clamp(self, reputation: float) -> int:
        """Clamp a reputation value into [floor, ceiling]."""
        return int(max(self.min_reputation, min(self.max_reputation, reputation)))


# ---------------------------------------------------------------------------
# TrustScoreWeights
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrustScoreWeights:
    """Weights for the skill trust score blend.

    Must be non-negative and sum to 1.0 (within floating-point tolerance),
    so that the blended score of three [0, 1] components stays in [0, 1].
    """

    consensus: float = 0.4
    evaluator_quality: float = 0.3
    execution: float = 0.3

    def validate(self) -> None:
        """Raise ValueError if weights are negative or don't sum to ~1.0."""
        total = 0.0
        for name in ("consensus", "evaluator_quality", "execution"):
            value = getattr(self, name)
            if value < 0.0:
                raise ValueError(f"Weight '{name}' must be non-negative, got {value}")
            total += value
        if abs(total - 1.0) > WEIGHT_SUM_EPSILON:
            raise ValueError(
                f"Weights must sum to 1.0 (within epsilon={WEIGHT_SUM_EPSILON}), "
                f"got sum={total}"
            )


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuditorReputation:
    """One evaluator's trust state.

    Created on first evaluation, updated after each consensus event or
    decay sweep, never deleted: dormant evaluators decay toward the floor
    but their record persists for audit.

    Attributes:
        auditor_id: Evaluator identity.
        tier: Current standing, derived from ``reputation``.
        reputation: Scalar reputation within the configured floor/ceiling.
        evaluations_completed: Reports that went through a consensus round.
        evaluations_aligned: Of those, how many earned a positive delta.
        evaluations_overturned: Disputes lost on the overturned side.
        last_evaluation_at: Last activity; drives decay.
        created_at: Record creation time.
        last_decayed_at: When decay was last applied since the last
            activity, or None. Later sweeps decay only from here.
    """

    auditor_id: str
    tier: EvaluatorTier
    reputation: int
    evaluations_completed: int
    evaluations_aligned: int
    evaluations_overturned: int
    last_evaluation_at: datetime
    created_at: datetime
    last_decayed_at: datetime | None = None

    @classmethod
    def new(cls, auditor_id: str, now: datetime, reputation: int = 0) -> AuditorReputation:
        """Create the record for a first-time evaluator."""
        return cls(
            auditor_id=auditor_id,
            tier=EvaluatorTier.T3,
            reputation=reputation,
            evaluations_completed=0,
            evaluations_aligned=0,
            evaluations_overturned=0,
            last_evaluation_at=now,
            created_at=now,
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "auditor_id": self.auditor_id,
            "tier": self.tier.name,
            "reputation": self.reputation,
            "evaluations_completed": self.evaluations_completed,
            "evaluations_aligned": self.evaluations_aligned,
            "evaluations_overturned": self.evaluations_overturned,
            "last_evaluation_at": self.last_evaluation_at.isoformat(),
            "created_at": self.created_at.isoformat(),
            "last_decayed_at": (
                self.last_decayed_at.isoformat() if self.last_decayed_at else None
            ),
        }


@dataclass(frozen=True)
class ReputationChange:
    """A reputation delta for the caller to apply.

    Attributes:
        auditor_id: Evaluator the change applies to.
        previous_reputation: Reputation in the snapshot.
        new_reputation: Reputation after the clamped change.
        change: Requested delta, before clamping.
        reason: Human-readable cause.
        aligned: The evaluation agreed with the consensus outcome.
        overturned: The evaluator was on the losing side of a dispute.
        evaluation_id: The report that caused the change, if any.
        decayed: The change comes from an inactivity decay sweep.
        timestamp: When the change was computed.
    """

    auditor_id: str
    previous_reputation: int
    new_reputation: int
    change: int
    reason: str
    timestamp: datetime
    aligned: bool = False
    overturned: bool = False
    evaluation_id: str | None = None
    decayed: bool = False

    def as_dict(self) -> dict[str, object]:
        return {
            "auditor_id": self.auditor_id,
            "previous_reputation": self.previous_reputation,
            "new_reputation": self.new_reputation,
            "change": self.change,
            "reason": self.reason,
            "aligned": self.aligned,
            "overturned": self.overturned,
            "evaluation_id": self.evaluation_id,
            "decayed": self.decayed,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class ExecutionStats:
    """Observed runtime outcomes of a skill."""

    success_count: int = 0
    total_count: int = 0

    def __post_init__(self) -> None:
        if self.success_count < 0 or self.total_count < 0:
            raise ReputationError("Execution counts must be non-negative")
        if self.success_count > self.total_count:
            raise ReputationError(
                f"success_count ({self.success_count}) exceeds "
                f"total_count ({self.total_count})"
            )

    @property
    def success_rate(self) -> float:
        """Success ratio; 1.0 when the skill has not run yet."""
        if self.total_count == 0:
            return 1.0
        return self.success_count / self.total_count


@dataclass(frozen=True)
class SkillTrustScore:
    """Derived 0-1000 trust view of a skill. Recomputed on demand."""

    skill_id: str
    trust_score: int
    consensus_strength: float
    evaluator_quality: float
    execution_success_rate: float
    last_updated: datetime

    def as_dict(self) -> dict[str, object]:
        return {
            "skill_id": self.skill_id,
            "trust_score": self.trust_score,
            "consensus_strength": round(self.consensus_strength, 4),
            "evaluator_quality": round(self.evaluator_quality, 4),
            "execution_success_rate": round(self.execution_success_rate, 4),
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class TierRequirements:
    """What an evaluator tier requires and unlocks."""

    tier: EvaluatorTier
    min_reputation: int
    max_evaluations_per_day: int
    consensus_tiers: tuple[ConsensusTier, ...]
