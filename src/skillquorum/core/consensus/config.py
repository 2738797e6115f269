"""Consensus rigor tiers and their fixed policy table.

A ``ConsensusConfig`` selects policy, never algorithm: every tier runs the
same variance, overlap and verdict logic with different thresholds. The
table is fixed; callers choose a tier by name and pass the resulting config
explicitly into each consensus call.

Tier table:

============  =======  =======  =======  ======  =======  ====  =======  =======
tier          var max  overlap  approve  reject  min/max  meth  eval     dispute
============  =======  =======  =======  ======  =======  ====  =======  =======
basic         0.20     0.50     >= 700   <= 500  3 / 5    2     72h      48h
rigorous      0.15     0.66     >= 700   <= 500  5 / 7    3     120h     72h
critical      0.10     0.75     >= 750   <= 450  7 / 9    4     168h     96h
============  =======  =======  =======  ======  =======  ====  =======  =======
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from skillquorum.exceptions import ConfigurationError


class ConsensusTier(str, Enum):
    """Consensus rigor level."""

    BASIC = "basic"
    RIGOROUS = "rigorous"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ConsensusConfig:
    """Thresholds and requirements for one consensus tier.

    Attributes:
        tier: The rigor tier this config belongs to.
        score_variance_max: Largest acceptable normalized score variance.
        critical_overlap_min: Smallest acceptable critical-finding overlap.
        approval_threshold: Mean overall score at or above which a skill may
            be approved (0-1000).
        rejection_threshold: Mean overall score at or below which a skill may
            be rejected (0-1000).
        min_evaluators: Reports required before a verdict other than PENDING.
        max_evaluators: Panel size at which confidence stops growing.
        min_methodologies: Distinct methodologies required for approval.
        evaluation_timeout: How long a round may stay open.
        dispute_timeout: How long a dispute may stay open.
    """

    tier: ConsensusTier
    score_variance_max: float
    critical_overlap_min: float
    approval_threshold: int
    rejection_threshold: int
    min_evaluators: int
    max_evaluators: int
    min_methodologies: int
    evaluation_timeout: timedelta
    dispute_timeout: timedelta

    def as_dict(self) -> dict[str, object]:
        return {
            "tier": self.tier.value,
            "score_variance_max": self.score_variance_max,
            "critical_overlap_min": self.critical_overlap_min,
            "approval_threshold": self.approval_threshold,
            "rejection_threshold": self.rejection_threshold,
            "min_evaluators": self.min_evaluators,
            "max_evaluators": self.max_evaluators,
            "min_methodologies": self.min_methodologies,
            "evaluation_timeout_hours": self.evaluation_timeout.total_seconds() / 3600,
            "dispute_timeout_hours": self.dispute_timeout.total_seconds() / 3600,
        }


CONSENSUS_CONFIGS: dict[ConsensusTier, ConsensusConfig] = {
    ConsensusTier.BASIC: ConsensusConfig(
        tier=ConsensusTier.BASIC,
        score_variance_max=0.20,
        critical_overlap_min=0.50,
        approval_threshold=700,
        rejection_threshold=500,
        min_evaluators=3,
        max_evaluators=5,
        min_methodologies=2,
        evaluation_timeout=timedelta(hours=72),
        dispute_timeout=timedelta(hours=48),
    ),
    ConsensusTier.RIGOROUS: ConsensusConfig(
        tier=ConsensusTier.RIGOROUS,
        score_variance_max=0.15,
        critical_overlap_min=0.66,
        approval_threshold=700,
        rejection_threshold=500,
        min_evaluators=5,
        max_evaluators=7,
        min_methodologies=3,
        evaluation_timeout=timedelta(hours=120),
        dispute_timeout=timedelta(hours=72),
    ),
    ConsensusTier.CRITICAL: ConsensusConfig(
        tier=ConsensusTier.CRITICAL,
        score_variance_max=0.10,
        critical_overlap_min=0.75,
        approval_threshold=750,
        rejection_threshold=450,
        min_evaluators=7,
        max_evaluators=9,
        min_methodologies=4,
        evaluation_timeout=timedelta(hours=168),
        dispute_timeout=timedelta(hours=96),
    ),
}

DEFAULT_TIER: ConsensusTier = ConsensusTier.RIGOROUS


def get_config(tier: ConsensusTier | str = DEFAULT_TIER) -> ConsensusConfig:
    """Look up the config for a tier given as enum member or name.

    Names are matched case-insensitively (``"basic"``, ``"BASIC"``).

    Raises:
        ConfigurationError: If the tier is not defined.
    """
    if isinstance(tier, ConsensusTier):
        return CONSENSUS_CONFIGS[tier]
    if isinstance(tier, str):
        try:
            return CONSENSUS_CONFIGS[ConsensusTier(tier.strip().lower())]
        except ValueError:
            pass
    valid = ", ".join(t.value for t in ConsensusTier)
    raise ConfigurationError(f"Unknown consensus tier {tier!r}; expected one of: {valid}")
