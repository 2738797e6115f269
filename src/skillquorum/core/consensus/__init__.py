"""Peer-review consensus for agent skills.

Turns a panel of possibly-disagreeing evaluation reports into one verdict,
a 0-100 confidence, and a human-readable reasoning string.

Submodules:
    config    -- ConsensusTier, ConsensusConfig, CONSENSUS_CONFIGS, get_config
    variance  -- Range-based score variance and agreement bands
    overlap   -- Fuzzy critical-finding overlap (pairwise Jaccard)
    models    -- ConsensusVerdict, ConsensusMetrics, ConsensusResult, Dispute
    policy    -- Verdict, confidence and reasoning functions
    engine    -- ConsensusEngine, calculate_consensus, quick_consensus, contest

All public names are re-exported here::

    from skillquorum.core.consensus import ConsensusEngine, ConsensusTier
"""

from skillquorum.core.consensus.config import (
    CONSENSUS_CONFIGS,
    ConsensusConfig,
    ConsensusTier,
    get_config,
)
from skillquorum.core.consensus.engine import (
    ConsensusEngine,
    calculate_consensus,
    contest,
    quick_consensus,
)
from skillquorum.core.consensus.models import (
    ConsensusMetrics,
    ConsensusResult,
    ConsensusVerdict,
    Dispute,
    DisputeStatus,
    QuickConsensus,
)
from skillquorum.core.consensus.overlap import (
    OverlapResult,
    PairwiseOverlap,
    calculate_overlap,
    finding_key,
    interpret_overlap,
)
from skillquorum.core.consensus.variance import (
    ScoreStats,
    VarianceResult,
    calculate_variance,
    has_no_consensus,
    has_strong_consensus,
    has_weak_consensus,
    interpret_variance,
)

__all__ = [
    "CONSENSUS_CONFIGS",
    "ConsensusConfig",
    "ConsensusEngine",
    "ConsensusMetrics",
    "ConsensusResult",
    "ConsensusTier",
    "ConsensusVerdict",
    "Dispute",
    "DisputeStatus",
    "OverlapResult",
    "PairwiseOverlap",
    "QuickConsensus",
    "ScoreStats",
    "VarianceResult",
    "calculate_consensus",
    "calculate_overlap",
    "calculate_variance",
    "contest",
    "finding_key",
    "get_config",
    "has_no_consensus",
    "has_strong_consensus",
    "has_weak_consensus",
    "interpret_overlap",
    "interpret_variance",
    "quick_consensus",
]
