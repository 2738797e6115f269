"""Consensus output models: verdicts, metrics, results, disputes.

These types are produced fresh by every consensus call and never mutated in
place. They are kept apart from the engine so that the reputation engine and
the CLI formatters can import them without pulling in the decision logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from skillquorum.core.report import Finding, Report


class ConsensusVerdict(str, Enum):
    """Outcome of one evaluation round.

    APPROVED and REJECTED are terminal. INCONCLUSIVE and CONTESTED are
    recoverable through additional reports or a dispute. PENDING means the
    panel is not yet large enough to decide.
    """

    APPROVED = "approved"
    REJECTED = "rejected"
    INCONCLUSIVE = "inconclusive"
    PENDING = "pending"
    CONTESTED = "contested"

    @property
    def is_terminal(self) -> bool:
        return self in (ConsensusVerdict.APPROVED, ConsensusVerdict.REJECTED)


@dataclass(frozen=True)
class ConsensusMetrics:
    """Numbers behind a verdict.

    Attributes:
        score_variance: Normalized variance of overall scores.
        critical_overlap: Global overlap of critical/high findings.
        methodology_diversity: Distinct methodologies divided by the tier's
            minimum, capped at 1.0.
        mean_score: Mean overall score (0-1000).
        evaluator_count: Number of reports considered.
        distinct_methodologies: Raw count of distinct methodologies.
    """

    score_variance: float = 0.0
    critical_overlap: float = 0.0
    methodology_diversity: float = 0.0
    mean_score: float = 0.0
    evaluator_count: int = 0
    distinct_methodologies: int = 0


@dataclass(frozen=True)
class ConsensusResult:
    """A single verdict over a set of reports for one skill.

    ``aggregated_findings`` is the deduplicated critical/high finding list;
    ``consensus_findings`` and ``outlier_findings`` partition it.
    """

    skill_id: str
    verdict: ConsensusVerdict
    confidence: int
    metrics: ConsensusMetrics
    reports: tuple[Report, ...]
    aggregated_findings: tuple[Finding, ...]
    reasoning: str
    evaluated_at: datetime
    expires_at: datetime | None = None
    consensus_findings: tuple[Finding, ...] = ()
    outlier_findings: tuple[Finding, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        m = self.metrics
        return {
            "skill_id": self.skill_id,
            "verdict": self.verdict.value,
            "confidence": self.confidence,
            "metrics": {
                "score_variance": round(m.score_variance, 4),
                "critical_overlap": round(m.critical_overlap, 4),
                "methodology_diversity": round(m.methodology_diversity, 4),
                "mean_score": round(m.mean_score, 2),
                "evaluator_count": m.evaluator_count,
                "distinct_methodologies": m.distinct_methodologies,
            },
            "reports": [r.id for r in self.reports],
            "aggregated_findings": [f.as_dict() for f in self.aggregated_findings],
            "consensus_findings": [f.id for f in self.consensus_findings],
            "outlier_findings": [f.id for f in self.outlier_findings],
            "reasoning": self.reasoning,
            "evaluated_at": self.evaluated_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }


@dataclass(frozen=True)
class QuickConsensus:
    """Result of the simplified mean-score-only consensus path."""

    verdict: ConsensusVerdict
    mean_score: float
    reason: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict.value,
            "mean_score": round(self.mean_score, 2),
            "reason": self.reason,
        }


class DisputeStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Dispute:
    """A challenge to a prior verdict.

    Adjudication happens outside the engine; this record only carries the
    inputs the engine needs to mark a result CONTESTED and, once resolved,
    to penalize the overturned panel.

    Attributes:
        id: Dispute identifier.
        skill_id: The skill whose verdict is challenged.
        creator_id: Who opened the dispute.
        round: Escalation round, 1 to 3.
        stake: Amount staked by the creator.
        reason: Free-text grounds for the dispute.
        status: pending / resolved / expired.
        original_verdict: The verdict being challenged.
        new_verdict: The verdict after resolution, if resolved.
        new_panel: Evaluator ids of the re-review panel.
        created_at: When the dispute was opened.
        resolved_at: When it was resolved, if resolved.
    """

    id: str
    skill_id: str
    creator_id: str
    reason: str
    original_verdict: ConsensusVerdict
    created_at: datetime
    round: int = 1
    stake: float = 0.0
    status: DisputeStatus = DisputeStatus.PENDING
    new_verdict: ConsensusVerdict | None = None
    new_panel: tuple[str, ...] = field(default_factory=tuple)
    resolved_at: datetime | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.round <= 3:
            raise ValueError(f"Dispute round must be 1, 2 or 3, got {self.round}")
        if self.stake < 0:
            raise ValueError(f"Dispute stake must be non-negative, got {self.stake}")

    @property
    def overturned(self) -> bool:
        """True when a resolved dispute reversed the original verdict."""
        return (
            self.status is DisputeStatus.RESOLVED
            and self.new_verdict is not None
            and self.new_verdict != self.original_verdict
        )
