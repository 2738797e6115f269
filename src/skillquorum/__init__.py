"""SkillQuorum: Peer-review consensus and evaluator reputation for agent skills."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

from skillquorum.core.consensus import (
    CONSENSUS_CONFIGS,
    ConsensusConfig,
    ConsensusEngine,
    ConsensusResult,
    ConsensusTier,
    ConsensusVerdict,
    calculate_consensus,
    calculate_overlap,
    calculate_variance,
    get_config,
    quick_consensus,
)
from skillquorum.core.prereview import PreReviewResult, PreReviewScreener
from skillquorum.core.report import Finding, Report, Scores
from skillquorum.core.reputation import (
    AuditorReputation,
    ReputationEngine,
    SkillTrustScore,
)

__all__ = [
    "AuditorReputation",
    "CONSENSUS_CONFIGS",
    "ConsensusConfig",
    "ConsensusEngine",
    "ConsensusResult",
    "ConsensusTier",
    "ConsensusVerdict",
    "Finding",
    "PreReviewResult",
    "PreReviewScreener",
    "Report",
    "ReputationEngine",
    "Scores",
    "SkillTrustScore",
    "__version__",
    "calculate_consensus",
    "calculate_overlap",
    "calculate_variance",
    "get_config",
    "quick_consensus",
]
