"""Evaluator reputation, inactivity decay and skill trust scoring."""

from skillquorum.core.reputation.decay import (
    calculate_decay,
    calculate_decay_changes,
    effective_decay_days,
)
from skillquorum.core.reputation.engine import (
    ReputationEngine,
    apply_changes,
    apply_sybil_penalty,
    calculate_reputation_changes,
    calculate_skill_trust_score,
    determine_tier,
    handle_dispute_resolution,
    score_divergence,
    tier_requirements,
)
from skillquorum.core.reputation.models import (
    AuditorReputation,
    ExecutionStats,
    ReputationChange,
    ReputationConfig,
    SkillTrustScore,
    TierRequirements,
    TrustScoreWeights,
)

__all__ = [
    "AuditorReputation",
    "ExecutionStats",
    "ReputationChange",
    "ReputationConfig",
    "ReputationEngine",
    "SkillTrustScore",
    "TierRequirements",
    "TrustScoreWeights",
    "apply_changes",
    "apply_sybil_penalty",
    "calculate_decay",
    "calculate_decay_changes",
    "calculate_reputation_changes",
    "calculate_skill_trust_score",
    "determine_tier",
    "effective_decay_days",
    "handle_dispute_resolution",
    "score_divergence",
    "tier_requirements",
]
